"""Precondition checks run before anything on disk is touched."""

import os
import shutil
from typing import Iterable

import requests

from .errors import MissingDependencyError, NetworkUnreachableError, PrivilegeError
from .logging import LogEvent, log_debug, log_info


def require_root() -> None:
    """Ensure the process runs with an effective uid of 0.

    Raises:
        PrivilegeError: If not running as root
    """
    euid = os.geteuid()
    if euid != 0:
        raise PrivilegeError("Run as root (sudo). Example: sudo REGISTRY=<host:port> containerd-mirror apply", euid=euid)


def require_commands(commands: Iterable[str]) -> None:
    """Ensure every command resolves on PATH.

    Raises:
        MissingDependencyError: For the first command that is missing
    """
    for command in commands:
        path = shutil.which(command)
        if path is None:
            raise MissingDependencyError(f"Missing required command: {command}", command=command)
        log_debug(LogEvent.PREFLIGHT, f"Found {command} at {path}", command=command, path=path)


def check_registry_reachable(url: str, timeout: float) -> None:
    """Probe the registry API endpoint, ignoring HTTP_PROXY and friends.

    Args:
        url: Registry API URL, e.g. ``http://10.0.0.1:5000/v2/``
        timeout: Seconds to wait for the whole probe

    Raises:
        NetworkUnreachableError: If the request fails or returns an error status
    """
    log_info(LogEvent.PREFLIGHT, f"Checking registry reachability: {url} (no proxy)", url=url)
    session = requests.Session()
    session.trust_env = False
    try:
        response = session.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        raise NetworkUnreachableError(
            f"Registry is not reachable: {url} . Check network/firewall/registry container. ({e})",
            url=url,
        ) from e
    finally:
        session.close()
