"""Wrappers around the containerd, systemd and crictl command-line tools.

Only the documented command-line contracts of these tools are used: the exit
status and captured output. Tests substitute the ``run`` callable to fake
them.
"""

import subprocess
from typing import Callable, List, Optional, Sequence

from .errors import CommandError, ServiceActivationError, VerificationError
from .logging import LogEvent, get_logger, log_debug, log_info, log_warning

logger = get_logger("runtime")

CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]


def run_command(
    argv: Sequence[str],
    timeout: Optional[float] = None,
    capture_output: bool = True,
) -> "subprocess.CompletedProcess[str]":
    """Run a command without a shell and return the completed process.

    A non-zero exit status is returned to the caller rather than raised.

    Raises:
        subprocess.TimeoutExpired: If the command runs longer than ``timeout``
    """
    log_debug(LogEvent.SERVICE, f"Running: {' '.join(argv)}", argv=list(argv))
    return subprocess.run(
        list(argv),
        check=False,
        capture_output=capture_output,
        text=True,
        timeout=timeout,
    )


def tail_lines(text: str, count: int) -> str:
    """Return the last ``count`` lines of ``text``."""
    if count <= 0:
        return ""
    lines = text.splitlines()
    return "\n".join(lines[-count:])


class ContainerdRuntime:
    """Controls the containerd service and its CLI clients on this host."""

    def __init__(self, service: str = "containerd", run: Optional[CommandRunner] = None) -> None:
        """Initialize the runtime controller.

        Args:
            service: systemd unit name
            run: Command runner, defaults to :func:`run_command`
        """
        self.service = service
        self._run: CommandRunner = run or run_command

    def default_config(self) -> str:
        """Return the output of ``containerd config default``.

        Raises:
            CommandError: If containerd fails to render its default config
        """
        argv = ["containerd", "config", "default"]
        result = self._run(argv)
        if result.returncode != 0:
            raise CommandError(
                f"containerd config default failed with exit code {result.returncode}",
                command=argv,
                returncode=result.returncode,
                stderr=result.stderr or "",
            )
        return str(result.stdout)

    def restart(self) -> None:
        """Restart the service unit.

        Raises:
            CommandError: If systemctl reports a failure
        """
        argv = ["systemctl", "restart", self.service]
        result = self._run(argv)
        if result.returncode != 0:
            raise CommandError(
                f"systemctl restart {self.service} failed with exit code {result.returncode}",
                command=argv,
                returncode=result.returncode,
                stderr=result.stderr or "",
            )

    def is_active(self) -> bool:
        """Return whether systemd reports the unit as active."""
        result = self._run(["systemctl", "is-active", "--quiet", self.service])
        return result.returncode == 0

    def boot_journal(self, lines: int) -> str:
        """Return the last ``lines`` journal lines of the unit for this boot."""
        result = self._run(["journalctl", "-u", self.service, "-b", "--no-pager", "-n", str(lines)])
        return str(result.stdout or "")

    def recent_journal(self, since: str, lines: int) -> str:
        """Return at most ``lines`` journal lines of the unit since ``since``.

        A journal that cannot be read yields whatever output was produced, so
        log collection never masks the error being reported.
        """
        result = self._run(["journalctl", "-u", self.service, "--since", since, "--no-pager"])
        return tail_lines(str(result.stdout or ""), lines)

    def restart_and_wait(self, journal_lines: int = 120) -> None:
        """Restart the unit and confirm it is active.

        Raises:
            CommandError: If the restart command fails
            ServiceActivationError: If the unit is not active afterwards
        """
        log_info(LogEvent.SERVICE, f"Restarting {self.service}", unit=self.service)
        self.restart()
        if not self.is_active():
            logs = self.boot_journal(journal_lines)
            raise ServiceActivationError(f"{self.service} is not active", unit=self.service, logs=logs)
        log_info(LogEvent.SERVICE, f"{self.service} is active", unit=self.service)

    def pull(
        self,
        image: str,
        timeout: float,
        journal_since: str = "5 min ago",
        journal_lines: int = 200,
    ) -> None:
        """Pull ``image`` with crictl, bounded by ``timeout`` seconds.

        Raises:
            VerificationError: If the pull fails or times out
        """
        argv: List[str] = ["crictl", "pull", image]
        log_info(LogEvent.VERIFY, f"Testing pull via mirror: {image}", image=image)
        try:
            result = self._run(argv, timeout=timeout, capture_output=False)
            failed = result.returncode != 0
            detail = f"exit code {result.returncode}"
        except subprocess.TimeoutExpired:
            failed = True
            detail = f"timed out after {timeout:g}s"

        if failed:
            log_warning(
                LogEvent.VERIFY,
                f"Test pull failed ({detail}). Collecting recent {self.service} logs",
                image=image,
            )
            logs = self.recent_journal(journal_since, journal_lines)
            raise VerificationError(f"crictl pull failed for {image}", image=image, logs=logs)

        log_info(LogEvent.VERIFY, f"OK: {image} pulled successfully", image=image)
