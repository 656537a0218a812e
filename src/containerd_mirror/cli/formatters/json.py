"""JSON output for the CLI."""

import json
import sys
from typing import Any, Dict, Optional, TextIO


def format_json(data: Any, output: Optional[TextIO] = None) -> None:
    """Write ``data`` to ``output`` (stdout by default) as indented JSON."""
    stream = output or sys.stdout
    stream.write(json.dumps(data, indent=2, sort_keys=True))
    stream.write("\n")


def format_backups_json(backups: Dict[str, Any]) -> Dict[str, Any]:
    """Add file count and total size to a ``list_backups`` result.

    Args:
        backups: Output of ``list_backups``

    Returns:
        Data structure for JSON output
    """
    files = backups.get("files", [])
    return {
        "config_path": backups.get("config_path"),
        "files": files,
        "file_count": len(files),
        "total_size_bytes": sum(f["size"] for f in files),
    }
