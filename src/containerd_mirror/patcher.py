"""containerd configuration patcher.

This module owns every change made to the containerd configuration file:
creating it from the runtime's default, backing it up, replacing it when it
is not valid TOML, and rewriting the mirror block for the upstream registry.
"""

import os
import shutil
import tempfile
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from .errors import ConfigInvalidError
from .logging import LogEvent, get_logger, log_info, log_warning
from .mirror_blocks import parse_toml, patch_mirror
from .runtime import ContainerdRuntime

logger = get_logger("patcher")


@dataclass
class PatchResult:
    """Result of patching the containerd configuration.

    Attributes:
        path: Configuration file that was patched
        created: Whether the file was generated because it did not exist
        backup_path: Backup taken before any modification
        regenerated: Whether the file was replaced by the default config
        invalid_path: Where the invalid file was moved, if regenerated
        blocks_removed: Number of stale mirror blocks stripped
        endpoint: Mirror endpoint now configured
    """

    path: Path
    created: bool = False
    backup_path: Optional[Path] = None
    regenerated: bool = False
    invalid_path: Optional[Path] = None
    blocks_removed: int = 0
    endpoint: Optional[str] = None


def _suffixed(path: Path, kind: str, timestamp: int, seq: int = 0) -> Path:
    name = f"{path.name}.{kind}.{timestamp}"
    if seq:
        name = f"{name}.{seq}"
    return path.with_name(name)


def reserve_artifact(path: Path, kind: str, timestamp: int) -> Path:
    """Create an empty, previously unused artifact file and return its path.

    The first choice is ``<name>.<kind>.<ts>``. When that already exists,
    ``.1``, ``.2`` and so on are appended, so an earlier artifact from the
    same second is never overwritten.
    """
    seq = 0
    while True:
        candidate = _suffixed(path, kind, timestamp, seq)
        try:
            fd = os.open(candidate, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
        except FileExistsError:
            seq += 1
            continue
        os.close(fd)
        return candidate


def atomic_write_text(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` via a temporary file and rename.

    The existing file's permission bits are kept.
    """
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(text)
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise


class ConfigPatcher:
    """Normalizes and patches one containerd configuration file."""

    def __init__(
        self,
        path: Path,
        runtime: ContainerdRuntime,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the patcher.

        Args:
            path: containerd configuration file
            runtime: Used to render the default configuration
            clock: Source of Unix timestamps for backup names
        """
        self.path = Path(path)
        self.runtime = runtime
        self._clock = clock

    def _timestamp(self) -> int:
        return int(self._clock())

    def _write_default(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(self.runtime.default_config(), encoding="utf-8")

    def ensure_exists(self) -> bool:
        """Generate the default configuration if the file is missing.

        Returns:
            True if the file was created
        """
        if self.path.is_file():
            return False
        log_info(
            LogEvent.CONFIG_PATCH,
            f"containerd config not found ({self.path}), generating default config",
            path=str(self.path),
        )
        self._write_default()
        return True

    def backup(self) -> Path:
        """Copy the configuration file to a timestamped backup.

        Returns:
            Path of the backup
        """
        target = reserve_artifact(self.path, "bak", self._timestamp())
        shutil.copy2(self.path, target)
        log_info(LogEvent.CONFIG_PATCH, f"Backup created: {target}", backup=str(target))
        return target

    def validate(self) -> None:
        """Check that the configuration file is valid TOML.

        Raises:
            ConfigInvalidError: If parsing fails
        """
        try:
            parse_toml(self.path.read_text(encoding="utf-8"))
        except (tomllib.TOMLDecodeError, UnicodeDecodeError) as e:
            raise ConfigInvalidError(
                f"TOML validation failed: {self.path}",
                path=str(self.path),
                reason=str(e),
            ) from e

    def validate_or_regenerate(self) -> Optional[Path]:
        """Validate the file, replacing it with the default if invalid.

        Returns:
            Path the invalid file was moved to, or None if it was valid

        Raises:
            ConfigInvalidError: If the regenerated default is itself invalid
        """
        try:
            self.validate()
            return None
        except ConfigInvalidError as e:
            log_warning(
                LogEvent.CONFIG_PATCH,
                f"{e.message}. Regenerating from containerd default (keeps only our changes).",
                path=str(self.path),
                reason=e.reason,
            )

        archived = reserve_artifact(self.path, "bad", self._timestamp())
        os.replace(self.path, archived)
        self._write_default()
        self.validate()
        return archived

    def apply_mirror(self, upstream: str, endpoint: str) -> int:
        """Replace any mirror blocks for ``upstream`` with one for ``endpoint``.

        The patched document is parsed before it is written; the file on disk
        is only replaced with valid TOML.

        Returns:
            Number of stale blocks removed

        Raises:
            ConfigInvalidError: If the patched document does not parse
        """
        log_info(LogEvent.CONFIG_PATCH, f"Ensuring mirror for {upstream} -> {endpoint}", endpoint=endpoint)
        patched, removed = patch_mirror(self.path.read_text(encoding="utf-8"), upstream, endpoint)
        try:
            parse_toml(patched)
        except tomllib.TOMLDecodeError as e:
            raise ConfigInvalidError(
                f"Patched configuration is not valid TOML, {self.path} left unchanged",
                path=str(self.path),
                reason=str(e),
            ) from e
        if removed:
            logger.debug("Removed %d existing mirror block(s) for %s", removed, upstream)
        atomic_write_text(self.path, patched)
        return removed

    def run(self, upstream: str, endpoint: str) -> PatchResult:
        """Run every patching step in order and report what was done."""
        result = PatchResult(path=self.path, endpoint=endpoint)
        result.created = self.ensure_exists()
        result.backup_path = self.backup()
        result.invalid_path = self.validate_or_regenerate()
        result.regenerated = result.invalid_path is not None
        result.blocks_removed = self.apply_mirror(upstream, endpoint)
        return result
