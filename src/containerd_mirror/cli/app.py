"""Main CLI application for containerd-mirror."""

import click
import rich_click as rich_click

from .utils import configure_logging, resolve_log_level

# Configure rich-click
rich_click.rich_click.USE_RICH_MARKUP = True
rich_click.rich_click.USE_MARKDOWN = True
rich_click.rich_click.SHOW_ARGUMENTS = True
rich_click.rich_click.GROUP_ARGUMENTS_OPTIONS = True


@click.group(invoke_without_command=True)
@click.option("--verbose", "-v", count=True, help="Increase verbosity (can be used multiple times).")
@click.option("--quiet", "-q", count=True, help="Decrease verbosity (can be used multiple times).")
@click.option("--debug", is_flag=True, help="Enable debug-level logging.")
@click.option("--no-color", is_flag=True, help="Disable color output.")
@click.option("--version", is_flag=True, is_eager=True, help="Print version information.")
@click.pass_context
def app(
    ctx: click.Context,
    verbose: int = 0,
    quiet: int = 0,
    debug: bool = False,
    no_color: bool = False,
    version: bool = False,
) -> None:
    """containerd-mirror - pull registry.k8s.io images through a local mirror.

    Settings come from command-line flags, then the REGISTRY, TEST_IMAGE and
    CONTAINERD_CFG environment variables, then built-in defaults.

    Examples:
      # Configure and verify the mirror
      sudo REGISTRY=10.0.0.1:5000 containerd-mirror apply

      # Preview the config change
      containerd-mirror diff --registry 10.0.0.1:5000

      # List backups of the containerd config
      containerd-mirror backups
    """
    if version:
        try:
            from .. import __version__
        except ImportError:
            __version__ = "unknown"

        click.echo(f"containerd-mirror version: {__version__}")
        ctx.exit()

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit()

    log_level = resolve_log_level(verbose=verbose, quiet=quiet, debug=debug)
    configure_logging(log_level, no_color=no_color)

    ctx.ensure_object(dict)
    ctx.obj.update(
        {
            "verbose": verbose,
            "quiet": quiet,
            "debug": debug,
            "no_color": no_color,
            "log_level": log_level,
        }
    )


# Import and register subcommands after the group is defined
from .commands import apply, backups, diff  # noqa: E402

app.add_command(apply.apply)
app.add_command(diff.diff)
app.add_command(backups.backups)


if __name__ == "__main__":
    app()
