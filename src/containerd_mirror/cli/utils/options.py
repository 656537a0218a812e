"""Common CLI options and decorators."""

from functools import wraps
from typing import Any, Callable, TypeVar, cast

import click

from ...config import ENV_CONTAINERD_CFG, ENV_REGISTRY

F = TypeVar("F", bound=Callable[..., Any])


def registry_option(func: F) -> F:
    """Add --registry option to a command."""

    @click.option(
        "--registry",
        type=str,
        help=f"host:port of the local registry mirror. Takes precedence over the {ENV_REGISTRY} environment variable.",
    )
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return cast(F, wrapper)


def config_option(func: F) -> F:
    """Add --config option to a command."""

    @click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False),
        help=f"containerd config file. Takes precedence over the {ENV_CONTAINERD_CFG} environment variable.",
    )
    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        return func(*args, **kwargs)

    return cast(F, wrapper)
