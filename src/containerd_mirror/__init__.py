"""Point containerd at a local registry mirror for registry.k8s.io.

This package patches the containerd configuration on a single host so that
pulls for the upstream registry go through an operator-run mirror, pins the
crictl client to the local containerd socket, restarts the runtime and
verifies the result with a test pull.
"""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _version

try:
    __version__ = _version("containerd-mirror")
except PackageNotFoundError:
    # Running from a source checkout without an installed distribution
    __version__ = "0.0.0+unknown"

from .apply import ApplyResult, apply_mirror
from .config import MirrorConfig
from .errors import (
    CommandError,
    ConfigInvalidError,
    MirrorSetupError,
    MissingDependencyError,
    NetworkUnreachableError,
    PrivilegeError,
    ServiceActivationError,
    VerificationError,
)
from .mirror_blocks import (
    find_mirror_endpoints,
    mirror_table_header,
    patch_mirror,
    render_mirror_block,
    strip_mirror_blocks,
)
from .patcher import ConfigPatcher, PatchResult
from .runtime import ContainerdRuntime

# Define public API
__all__ = [
    # Orchestration
    "apply_mirror",
    "ApplyResult",
    "MirrorConfig",
    # Config patching
    "ConfigPatcher",
    "PatchResult",
    "mirror_table_header",
    "render_mirror_block",
    "strip_mirror_blocks",
    "patch_mirror",
    "find_mirror_endpoints",
    # Runtime control
    "ContainerdRuntime",
    # Errors
    "MirrorSetupError",
    "PrivilegeError",
    "MissingDependencyError",
    "NetworkUnreachableError",
    "ConfigInvalidError",
    "CommandError",
    "ServiceActivationError",
    "VerificationError",
]
