"""CLI formatters package."""

from .console import (
    OperatorLogHandler,
    create_console,
    format_backups_table,
    format_diff,
    level_tag,
)
from .json import format_backups_json, format_json

__all__ = [
    "format_json",
    "format_backups_json",
    "create_console",
    "level_tag",
    "OperatorLogHandler",
    "format_backups_table",
    "format_diff",
]
