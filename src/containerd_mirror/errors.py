"""Error types for containerd mirror setup.

This module defines the error types raised while checking preconditions,
patching the containerd configuration, restarting the runtime and verifying
the mirror with a test pull.
"""

from typing import List, Optional, Sequence


class MirrorSetupError(Exception):
    """Base class for all mirror setup errors.

    This is the parent class for all package-specific exceptions. The CLI
    treats every subclass as fatal, except ConfigInvalidError which the
    patcher recovers from by regenerating the default configuration.
    """

    def __init__(self, message: str) -> None:
        """Initialize mirror setup error.

        Args:
            message: Error message shown to the operator
        """
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        """Return string representation of the error.

        Returns:
            Error message
        """
        return self.message


class PrivilegeError(MirrorSetupError):
    """Raised when the process does not run with root privileges.

    Examples:
        >>> try:
        ...     require_root()
        ... except PrivilegeError as e:
        ...     print(f"Running as uid {e.euid}")
    """

    def __init__(self, message: str, euid: Optional[int] = None) -> None:
        """Initialize privilege error.

        Args:
            message: Error message
            euid: Effective user id the process was running with
        """
        super().__init__(message)
        self.euid = euid


class MissingDependencyError(MirrorSetupError):
    """Raised when a required external command cannot be found on PATH.

    Examples:
        >>> try:
        ...     require_commands(["crictl"])
        ... except MissingDependencyError as e:
        ...     print(f"Install {e.command}")
    """

    def __init__(self, message: str, command: str) -> None:
        """Initialize missing dependency error.

        Args:
            message: Error message
            command: Name of the command that was not found
        """
        super().__init__(message)
        self.command = command


class NetworkUnreachableError(MirrorSetupError):
    """Raised when the local registry does not answer the HTTP probe.

    Examples:
        >>> try:
        ...     check_registry_reachable("10.0.0.1:5000")
        ... except NetworkUnreachableError as e:
        ...     print(f"Probe failed: {e.url}")
    """

    def __init__(self, message: str, url: Optional[str] = None) -> None:
        """Initialize network error.

        Args:
            message: Error message
            url: URL that was probed
        """
        super().__init__(message)
        self.url = url


class ConfigInvalidError(MirrorSetupError):
    """Raised when a containerd configuration document is not valid TOML.

    The patcher recovers from this once by archiving the broken file and
    regenerating the default. Raised a second time it is fatal.
    """

    def __init__(
        self,
        message: str,
        path: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> None:
        """Initialize invalid config error.

        Args:
            message: Error message
            path: Path of the offending configuration file
            reason: Parser error detail
        """
        super().__init__(message)
        self.path = path
        self.reason = reason


class CommandError(MirrorSetupError):
    """Raised when an external command exits with a non-zero status."""

    def __init__(
        self,
        message: str,
        command: Sequence[str],
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        """Initialize command error.

        Args:
            message: Error message
            command: The argv that was executed
            returncode: Exit status, None if the command timed out
            stderr: Captured standard error
        """
        super().__init__(message)
        self.command: List[str] = list(command)
        self.returncode = returncode
        self.stderr = stderr


class ServiceActivationError(MirrorSetupError):
    """Raised when the runtime service is not active after a restart.

    Examples:
        >>> try:
        ...     runtime.restart_and_wait()
        ... except ServiceActivationError as e:
        ...     print(e.logs)
    """

    def __init__(self, message: str, unit: str, logs: str = "") -> None:
        """Initialize service activation error.

        Args:
            message: Error message
            unit: Service unit name
            logs: Recent journal output for the unit
        """
        super().__init__(message)
        self.unit = unit
        self.logs = logs


class VerificationError(MirrorSetupError):
    """Raised when the test pull through the mirror fails or times out."""

    def __init__(self, message: str, image: str, logs: str = "") -> None:
        """Initialize verification error.

        Args:
            message: Error message
            image: Image reference that failed to pull
            logs: Recent journal output for the runtime service
        """
        super().__init__(message)
        self.image = image
        self.logs = logs
