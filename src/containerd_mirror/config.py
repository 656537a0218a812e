"""Configuration for containerd mirror setup.

Settings are resolved from explicit overrides first, then environment
variables, then built-in defaults. The resolved values are carried in a
MirrorConfig instance that is passed to every step.
"""

import os
import re
from pathlib import Path
from typing import Optional

# Environment variable names
ENV_REGISTRY = "REGISTRY"
ENV_TEST_IMAGE = "TEST_IMAGE"
ENV_CONTAINERD_CFG = "CONTAINERD_CFG"

# Defaults
DEFAULT_REGISTRY = "192.168.126.130:5000"
DEFAULT_TEST_IMAGE = "registry.k8s.io/ingress-nginx/controller:v1.12.0"
DEFAULT_CONTAINERD_CFG = "/etc/containerd/config.toml"

# Fixed values
UPSTREAM_REGISTRY = "registry.k8s.io"
CRICTL_CONFIG_PATH = "/etc/crictl.yaml"
CONTAINERD_SERVICE = "containerd"
CONTAINERD_SOCKET = "unix:///run/containerd/containerd.sock"
CRICTL_TIMEOUT = 30
PROBE_TIMEOUT = 3.0
PULL_TIMEOUT = 180.0
BOOT_JOURNAL_LINES = 120
RECENT_JOURNAL_LINES = 200
RECENT_JOURNAL_SINCE = "5 min ago"

REQUIRED_COMMANDS = ("containerd", "systemctl", "crictl", "journalctl")

_REGISTRY_RE = re.compile(r"^[A-Za-z0-9.\-\[\]:]+(:\d{1,5})?$")


class MirrorConfig:
    """Configuration for one mirror setup run."""

    def __init__(
        self,
        registry: str = DEFAULT_REGISTRY,
        test_image: str = DEFAULT_TEST_IMAGE,
        config_path: str = DEFAULT_CONTAINERD_CFG,
        crictl_config_path: str = CRICTL_CONFIG_PATH,
        upstream_registry: str = UPSTREAM_REGISTRY,
        service: str = CONTAINERD_SERVICE,
        socket: str = CONTAINERD_SOCKET,
        probe_timeout: float = PROBE_TIMEOUT,
        pull_timeout: float = PULL_TIMEOUT,
    ):
        """Initialize mirror configuration.

        Args:
            registry: host:port of the local registry mirror, without scheme.
            test_image: Image reference pulled to verify the mirror.
            config_path: Path of the containerd configuration file.
            crictl_config_path: Path of the crictl client configuration.
            upstream_registry: Registry name whose pulls are mirrored.
            service: systemd unit name of the runtime.
            socket: Runtime socket URI written to the crictl configuration.
            probe_timeout: Seconds to wait for the registry probe.
            pull_timeout: Seconds to wait for the test pull.
        """
        registry = registry.strip()
        if not registry:
            raise ValueError("registry must not be empty")
        if "://" in registry or not _REGISTRY_RE.match(registry):
            raise ValueError(f"registry must be host:port without a scheme, got '{registry}'")
        if not test_image.strip():
            raise ValueError("test_image must not be empty")
        if probe_timeout <= 0:
            raise ValueError("probe_timeout must be positive")
        if pull_timeout <= 0:
            raise ValueError("pull_timeout must be positive")

        self.registry = registry
        self.test_image = test_image.strip()
        self.config_path = Path(config_path)
        self.crictl_config_path = Path(crictl_config_path)
        self.upstream_registry = upstream_registry
        self.service = service
        self.socket = socket
        self.probe_timeout = probe_timeout
        self.pull_timeout = pull_timeout

    @property
    def endpoint(self) -> str:
        """Mirror endpoint URL written into the containerd configuration."""
        return f"http://{self.registry}"

    @property
    def probe_url(self) -> str:
        """Registry API URL used for the reachability probe."""
        return f"http://{self.registry}/v2/"

    @classmethod
    def from_env(
        cls,
        registry: Optional[str] = None,
        test_image: Optional[str] = None,
        config_path: Optional[str] = None,
    ) -> "MirrorConfig":
        """Build a configuration from overrides, the environment and defaults.

        Empty environment values count as unset.

        Args:
            registry: Override for REGISTRY
            test_image: Override for TEST_IMAGE
            config_path: Override for CONTAINERD_CFG

        Returns:
            Resolved configuration
        """
        return cls(
            registry=registry or os.getenv(ENV_REGISTRY) or DEFAULT_REGISTRY,
            test_image=test_image or os.getenv(ENV_TEST_IMAGE) or DEFAULT_TEST_IMAGE,
            config_path=config_path or os.getenv(ENV_CONTAINERD_CFG) or DEFAULT_CONTAINERD_CFG,
        )

    def __repr__(self) -> str:
        return (
            f"MirrorConfig(registry={self.registry!r}, test_image={self.test_image!r}, "
            f"config_path={str(self.config_path)!r})"
        )
