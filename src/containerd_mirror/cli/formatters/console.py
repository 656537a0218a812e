"""Rich console output for the CLI."""

import logging
from typing import Any, Dict, List, Optional, TextIO, Tuple

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

# Prefix and style per level, checked from the most severe down
_LEVEL_TAGS = (
    (logging.ERROR, "[error]", "bold red"),
    (logging.WARNING, "[warn]", "bold yellow"),
    (logging.INFO, "[apply]", "bold green"),
    (logging.NOTSET, "[debug]", "dim"),
)


def create_console(output: Optional[TextIO] = None, stderr: bool = False, no_color: bool = False) -> Console:
    """Create a Rich console instance.

    Args:
        output: Output stream. When omitted the console writes to whatever
            ``sys.stdout`` (or ``sys.stderr``) is at print time.
        stderr: Write to standard error instead of standard output
        no_color: Disable color output

    Returns:
        Console instance
    """
    return Console(file=output, stderr=stderr, no_color=no_color)


def level_tag(levelno: int) -> Tuple[str, str]:
    """Return the ``(prefix, style)`` pair used for a log level."""
    for threshold, prefix, style in _LEVEL_TAGS:
        if levelno >= threshold:
            return prefix, style
    return _LEVEL_TAGS[-1][1], _LEVEL_TAGS[-1][2]


class OperatorLogHandler(logging.Handler):
    """Render log records as colored ``[apply]``/``[warn]``/``[error]`` lines.

    INFO and DEBUG go to standard output, WARNING and above to standard error.
    """

    def __init__(self, out: Console, err: Console, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.out = out
        self.err = err

    def emit(self, record: logging.LogRecord) -> None:
        try:
            prefix, style = level_tag(record.levelno)
            line = Text.assemble((prefix, style), " ", record.getMessage())
            console = self.err if record.levelno >= logging.WARNING else self.out
            console.print(line, soft_wrap=True, highlight=False)
        except Exception:
            self.handleError(record)


def format_backups_table(backups: Dict[str, Any], console: Optional[Console] = None) -> None:
    """Print configuration backups as a table.

    Args:
        backups: Output of ``list_backups``
        console: Console to print to
    """
    if console is None:
        console = create_console()

    console.print(f"[bold]Config File:[/bold] {escape(str(backups.get('config_path', 'N/A')))}", soft_wrap=True)
    entries: List[Dict[str, Any]] = backups.get("files", [])
    console.print(f"[bold]Total Files:[/bold] {len(entries)}")
    console.print()

    if not entries:
        console.print("[dim]No backups found[/dim]")
        return

    table = Table(title="Config Backups", show_header=True, header_style="bold magenta")
    table.add_column("Kind", style="cyan")
    table.add_column("File", no_wrap=True)
    table.add_column("Size", justify="right")
    table.add_column("Created", style="dim")

    for entry in entries:
        kind = "backup" if entry["kind"] == "bak" else "[yellow]invalid[/yellow]"
        table.add_row(kind, entry["name"], entry["size_formatted"], entry["created"])

    console.print(table)


def format_diff(diff_lines: List[str], console: Optional[Console] = None) -> None:
    """Print a unified diff with added and removed lines colored."""
    if console is None:
        console = create_console()

    for line in diff_lines:
        line = line.rstrip("\n")
        if line.startswith(("+++", "---")):
            style = "bold"
        elif line.startswith("+"):
            style = "green"
        elif line.startswith("-"):
            style = "red"
        elif line.startswith("@@"):
            style = "cyan"
        else:
            style = ""
        console.print(Text(line, style=style), soft_wrap=True, highlight=False)
