"""The diff command: preview the mirror patch without writing anything."""

import difflib
import tomllib
from typing import List, Optional

import click
from rich.markup import escape

from ...config import MirrorConfig
from ...mirror_blocks import find_mirror_endpoints, patch_mirror
from ..formatters import create_console, format_diff
from ..utils import ExitCode, config_option, handle_error, registry_option


def build_diff(current: str, patched: str, path: str) -> List[str]:
    """Return the unified diff between the current and patched config."""
    return list(
        difflib.unified_diff(
            current.splitlines(keepends=True),
            patched.splitlines(keepends=True),
            fromfile=path,
            tofile=f"{path} (patched)",
        )
    )


@click.command()
@registry_option
@config_option
@click.pass_context
def diff(ctx: click.Context, registry: Optional[str] = None, config_path: Optional[str] = None) -> None:
    """Show how apply would change the containerd config.

    Nothing is written and root is not required. Only the mirror block edit
    is previewed; a config that is not valid TOML would be regenerated from
    the containerd default by apply.
    """
    no_color = ctx.obj["no_color"]
    try:
        config = MirrorConfig.from_env(registry=registry, config_path=config_path)
    except ValueError as e:
        handle_error(e, ExitCode.INVALID_USAGE, no_color=no_color)
        return

    path = config.config_path
    if not path.is_file():
        handle_error(
            FileNotFoundError(f"{path} does not exist; apply would generate it from the containerd default"),
            ExitCode.GENERIC_ERROR,
            no_color=no_color,
        )
        return

    console = create_console(no_color=no_color)
    try:
        current = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        console.print(
            f"[yellow]Warning:[/yellow] {escape(str(path))} is not valid UTF-8 ({escape(str(e))}); "
            "apply would regenerate it.",
            soft_wrap=True,
        )
        return
    except OSError as e:
        handle_error(e, ExitCode.GENERIC_ERROR, no_color=no_color)
        return

    try:
        endpoints = find_mirror_endpoints(current, config.upstream_registry)
    except tomllib.TOMLDecodeError as e:
        console.print(
            f"[yellow]Warning:[/yellow] {escape(str(path))} is not valid TOML ({escape(str(e))}); "
            "apply would regenerate it.",
            soft_wrap=True,
        )
        endpoints = []

    if endpoints:
        console.print(f"Current mirror for {config.upstream_registry}: {', '.join(endpoints)}", soft_wrap=True)
    else:
        console.print(f"No mirror configured for {config.upstream_registry}", soft_wrap=True)

    patched, _ = patch_mirror(current, config.upstream_registry, config.endpoint)
    lines = build_diff(current, patched, str(path))
    if not lines:
        console.print("✅ [green]Config already up to date[/green]")
        return

    format_diff(lines, console)
