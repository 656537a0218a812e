"""Helper functions for CLI operations."""

import logging
import sys
from typing import Optional

from rich.text import Text

from ..formatters import OperatorLogHandler, create_console

# Logger that owns every package logger
PACKAGE_LOGGER = "containerd_mirror"


class ExitCode:
    """Standard exit codes for the CLI."""

    SUCCESS = 0
    GENERIC_ERROR = 1
    INVALID_USAGE = 2


def resolve_log_level(verbose: int = 0, quiet: int = 0, debug: bool = False) -> str:
    """Map the verbosity flags to a logging level name.

    INFO is the default because the progress lines are the command's output.

    Args:
        verbose: Number of --verbose flags
        quiet: Number of --quiet flags
        debug: Whether --debug was given

    Returns:
        Logging level name
    """
    if debug:
        return "DEBUG"
    if verbose > quiet:
        return "DEBUG"
    if quiet > verbose:
        if quiet >= 2:
            return "ERROR"
        return "WARNING"
    return "INFO"


def configure_logging(level: str, no_color: bool = False) -> OperatorLogHandler:
    """Route package log records to the operator console.

    Any handler installed by an earlier call is replaced.

    Args:
        level: Logging level name
        no_color: Disable color output

    Returns:
        The installed handler
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for existing in list(logger.handlers):
        if isinstance(existing, OperatorLogHandler):
            logger.removeHandler(existing)

    handler = OperatorLogHandler(
        out=create_console(no_color=no_color),
        err=create_console(stderr=True, no_color=no_color),
    )
    logger.addHandler(handler)
    logger.setLevel(level)
    return handler


def handle_error(
    error: Exception,
    exit_code: int = ExitCode.GENERIC_ERROR,
    no_color: bool = False,
    logs: Optional[str] = None,
) -> None:
    """Report a fatal error on stderr and exit.

    Args:
        error: Exception to report
        exit_code: Exit code to use
        no_color: Disable color output
        logs: Service logs to print before the error line
    """
    console = create_console(stderr=True, no_color=no_color)
    if logs:
        console.print(Text(logs.rstrip("\n")), soft_wrap=True, highlight=False)
    console.print(Text.assemble(("[error]", "bold red"), f" {error}"), soft_wrap=True, highlight=False)
    sys.exit(exit_code)


def format_file_size(size_bytes: int) -> str:
    """Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Human-readable size string
    """
    if size_bytes == 0:
        return "0 B"

    size_names = ["B", "KB", "MB", "GB"]
    size = float(size_bytes)
    i: int = 0
    while size >= 1024 and i < len(size_names) - 1:
        size /= 1024.0
        i += 1

    return f"{size:.1f} {size_names[i]}"
