"""The apply command: configure the mirror and verify it."""

from typing import Optional

import click

from ...apply import apply_mirror
from ...config import ENV_TEST_IMAGE, MirrorConfig
from ...errors import MirrorSetupError
from ..utils import ExitCode, config_option, handle_error, registry_option


@click.command()
@registry_option
@click.option(
    "--test-image",
    type=str,
    help=f"Image pulled to verify the mirror. Takes precedence over the {ENV_TEST_IMAGE} environment variable.",
)
@config_option
@click.option("--skip-pull", is_flag=True, help="Stop once containerd is active, without a test pull.")
@click.pass_context
def apply(
    ctx: click.Context,
    registry: Optional[str] = None,
    test_image: Optional[str] = None,
    config_path: Optional[str] = None,
    skip_pull: bool = False,
) -> None:
    """Mirror registry.k8s.io through the local registry.

    Requires root. Checks the registry is reachable, backs up and patches
    the containerd config, pins crictl to the containerd socket, restarts
    containerd and pulls a test image through the mirror.

    Examples:
      sudo REGISTRY=10.0.0.1:5000 containerd-mirror apply

      sudo containerd-mirror apply --registry 10.0.0.1:5000 --skip-pull
    """
    no_color = ctx.obj["no_color"]
    try:
        config = MirrorConfig.from_env(registry=registry, test_image=test_image, config_path=config_path)
    except ValueError as e:
        handle_error(e, ExitCode.INVALID_USAGE, no_color=no_color)
        return

    try:
        apply_mirror(config, verify_pull=not skip_pull)
    except MirrorSetupError as e:
        handle_error(e, ExitCode.GENERIC_ERROR, no_color=no_color, logs=getattr(e, "logs", None))
    except OSError as e:
        handle_error(e, ExitCode.GENERIC_ERROR, no_color=no_color)
