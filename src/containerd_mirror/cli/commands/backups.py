"""The backups command: list config backups left by apply."""

import re
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from ...config import MirrorConfig
from ..formatters import create_console, format_backups_json, format_backups_table, format_json
from ..utils import ExitCode, config_option, format_file_size, handle_error


def list_backups(config_path: Path) -> Dict[str, Any]:
    """Collect ``.bak.<ts>[.<n>]`` and ``.bad.<ts>[.<n>]`` files next to the config.

    Args:
        config_path: containerd config file

    Returns:
        Dictionary with the config path and one entry per artifact, oldest first
    """
    pattern = re.compile(rf"^{re.escape(config_path.name)}\.(bak|bad)\.(\d+)(?:\.(\d+))?$")
    files: List[Dict[str, Any]] = []

    directory = config_path.parent
    if directory.is_dir():
        for candidate in directory.iterdir():
            match = pattern.match(candidate.name)
            if not match or not candidate.is_file():
                continue
            timestamp = int(match.group(2))
            seq = int(match.group(3) or 0)
            size = candidate.stat().st_size
            files.append(
                {
                    "name": candidate.name,
                    "path": str(candidate),
                    "kind": match.group(1),
                    "timestamp": timestamp,
                    "seq": seq,
                    "created": datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S"),
                    "size": size,
                    "size_formatted": format_file_size(size),
                }
            )

    # The backup of a run is taken before its invalid config is archived
    files.sort(key=lambda f: (f["timestamp"], f["seq"], f["kind"] == "bad"))
    return {"config_path": str(config_path), "files": files}


@click.command()
@config_option
@click.option(
    "--format",
    "format_type",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@click.pass_context
def backups(ctx: click.Context, config_path: Optional[str] = None, format_type: str = "table") -> None:
    """List backups of the containerd config.

    Shows the timestamped copies taken before each apply and any invalid
    configs that apply replaced. Restoring one is a manual step.
    """
    no_color = ctx.obj["no_color"]
    try:
        config = MirrorConfig.from_env(config_path=config_path)
        result = list_backups(config.config_path)
    except (ValueError, OSError) as e:
        handle_error(e, ExitCode.GENERIC_ERROR, no_color=no_color)
        return

    if format_type.lower() == "json":
        format_json(format_backups_json(result))
    else:
        format_backups_table(result, create_console(no_color=no_color))
