"""crictl client configuration."""

from pathlib import Path
from typing import Any, Dict

import yaml

from .logging import LogEvent, log_info


def crictl_settings(socket: str, timeout: int = 30, debug: bool = False) -> Dict[str, Any]:
    """Return the crictl settings pinning both endpoints to ``socket``."""
    return {
        "runtime-endpoint": socket,
        "image-endpoint": socket,
        "timeout": timeout,
        "debug": debug,
    }


def write_crictl_config(path: Path, socket: str, timeout: int = 30) -> None:
    """Overwrite the crictl configuration file.

    The file is always replaced in full; existing settings are not merged.
    """
    log_info(
        LogEvent.CLIENT_CONFIG,
        f"Ensuring {path} (remove warnings, pin endpoint to containerd)",
        path=str(path),
    )
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(crictl_settings(socket, timeout), f, default_flow_style=False, sort_keys=False)
