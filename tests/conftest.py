"""Shared fixtures: a fake command runner standing in for containerd tools."""

import subprocess
from typing import List, Optional, Sequence

import pytest

from containerd_mirror.runtime import ContainerdRuntime

# Abbreviated output of `containerd config default` (containerd 1.7)
DEFAULT_CONFIG = """disabled_plugins = []
version = 2

[plugins]

  [plugins."io.containerd.grpc.v1.cri"]
    sandbox_image = "registry.k8s.io/pause:3.8"

    [plugins."io.containerd.grpc.v1.cri".registry]
      config_path = ""

      [plugins."io.containerd.grpc.v1.cri".registry.mirrors]

[timeouts]
  "io.containerd.timeout.shim.cleanup" = "5s"
"""

MIRROR_HEADER = '[plugins."io.containerd.grpc.v1.cri".registry.mirrors."registry.k8s.io"]'


class FakeRunner:
    """Records commands and answers them like containerd, systemctl, journalctl and crictl."""

    def __init__(
        self,
        default_config: str = DEFAULT_CONFIG,
        active: bool = True,
        restart_returncode: int = 0,
        pull_returncode: int = 0,
        pull_times_out: bool = False,
        journal: str = "containerd[1]: level=info msg=started\n",
    ) -> None:
        self.default_config = default_config
        self.active = active
        self.restart_returncode = restart_returncode
        self.pull_returncode = pull_returncode
        self.pull_times_out = pull_times_out
        self.journal = journal
        self.calls: List[List[str]] = []
        self.timeouts: List[Optional[float]] = []

    def __call__(
        self,
        argv: Sequence[str],
        timeout: Optional[float] = None,
        capture_output: bool = True,
    ) -> "subprocess.CompletedProcess[str]":
        argv = list(argv)
        self.calls.append(argv)
        self.timeouts.append(timeout)

        if argv[:3] == ["containerd", "config", "default"]:
            return subprocess.CompletedProcess(argv, 0, stdout=self.default_config, stderr="")
        if argv[:2] == ["systemctl", "restart"]:
            return subprocess.CompletedProcess(argv, self.restart_returncode, stdout="", stderr="restart failed")
        if argv[:2] == ["systemctl", "is-active"]:
            return subprocess.CompletedProcess(argv, 0 if self.active else 3, stdout="", stderr="")
        if argv[0] == "journalctl":
            return subprocess.CompletedProcess(argv, 0, stdout=self.journal, stderr="")
        if argv[:2] == ["crictl", "pull"]:
            if self.pull_times_out:
                raise subprocess.TimeoutExpired(argv, timeout or 0)
            return subprocess.CompletedProcess(argv, self.pull_returncode, stdout=None, stderr=None)
        raise AssertionError(f"Unexpected command: {argv}")

    def commands(self) -> List[str]:
        """Return each recorded command as a single string."""
        return [" ".join(call) for call in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Create a fake runner for a healthy host."""
    return FakeRunner()


@pytest.fixture
def runtime(fake_runner: FakeRunner) -> ContainerdRuntime:
    """Create a runtime controller backed by the fake runner."""
    return ContainerdRuntime(service="containerd", run=fake_runner)
