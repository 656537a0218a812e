"""End-to-end mirror setup.

``apply_mirror`` runs every step in order against a single MirrorConfig.
Any exception other than the locally recovered ConfigInvalidError aborts
the run where it happened. Nothing is rolled back: the backup taken before
patching is the operator's recovery point.
"""

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .client_config import write_crictl_config
from .config import (
    BOOT_JOURNAL_LINES,
    CRICTL_TIMEOUT,
    RECENT_JOURNAL_LINES,
    RECENT_JOURNAL_SINCE,
    REQUIRED_COMMANDS,
    MirrorConfig,
)
from .logging import LogEvent, log_info
from .patcher import ConfigPatcher, PatchResult
from .preflight import check_registry_reachable, require_commands, require_root
from .runtime import ContainerdRuntime


@dataclass
class ApplyResult:
    """Result of a mirror setup run.

    Attributes:
        config: Configuration the run used
        patch: What was done to the containerd configuration
        crictl_config_path: crictl configuration that was written
        service_active: Whether the runtime was confirmed active
        pull_verified: Whether the test pull succeeded
    """

    config: MirrorConfig
    patch: PatchResult
    crictl_config_path: Path
    service_active: bool = False
    pull_verified: bool = False


def run_preflight(config: MirrorConfig) -> None:
    """Check privilege, required commands and registry reachability."""
    require_root()
    require_commands(REQUIRED_COMMANDS)
    check_registry_reachable(config.probe_url, config.probe_timeout)


def apply_mirror(
    config: MirrorConfig,
    runtime: Optional[ContainerdRuntime] = None,
    preflight: Callable[[MirrorConfig], None] = run_preflight,
    clock: Callable[[], float] = time.time,
    verify_pull: bool = True,
) -> ApplyResult:
    """Configure the containerd mirror and verify it.

    Args:
        config: Resolved settings for this run
        runtime: Runtime controller, defaults to one for ``config.service``
        preflight: Precondition check run before any file is touched
        clock: Source of Unix timestamps for backup names
        verify_pull: Whether to finish with a test pull

    Returns:
        Summary of the run

    Raises:
        MirrorSetupError: On the first step that fails
    """
    runtime = runtime or ContainerdRuntime(service=config.service)

    preflight(config)

    patcher = ConfigPatcher(config.config_path, runtime, clock=clock)
    patch = patcher.run(config.upstream_registry, config.endpoint)

    write_crictl_config(config.crictl_config_path, config.socket, CRICTL_TIMEOUT)
    result = ApplyResult(config=config, patch=patch, crictl_config_path=config.crictl_config_path)

    runtime.restart_and_wait(journal_lines=BOOT_JOURNAL_LINES)
    result.service_active = True

    if verify_pull:
        runtime.pull(
            config.test_image,
            timeout=config.pull_timeout,
            journal_since=RECENT_JOURNAL_SINCE,
            journal_lines=RECENT_JOURNAL_LINES,
        )
        result.pull_verified = True

    log_info(
        LogEvent.VERIFY,
        f"Done. {config.upstream_registry} is mirrored to {config.endpoint}",
        endpoint=config.endpoint,
    )
    return result
