"""CLI commands package."""

# Import all command modules to make them available
from . import apply, backups, diff

__all__ = ["apply", "backups", "diff"]
