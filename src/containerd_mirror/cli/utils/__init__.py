"""CLI utilities package."""

from .helpers import (
    ExitCode,
    configure_logging,
    format_file_size,
    handle_error,
    resolve_log_level,
)
from .options import config_option, registry_option

__all__ = [
    "ExitCode",
    "configure_logging",
    "format_file_size",
    "handle_error",
    "resolve_log_level",
    "config_option",
    "registry_option",
]
