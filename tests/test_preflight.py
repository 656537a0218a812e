"""Tests for precondition checks."""

from unittest.mock import MagicMock, Mock, patch

import pytest
import requests

from containerd_mirror.errors import MissingDependencyError, NetworkUnreachableError, PrivilegeError
from containerd_mirror.preflight import check_registry_reachable, require_commands, require_root


class TestRequireRoot:
    """Tests for require_root."""

    @patch("containerd_mirror.preflight.os.geteuid", return_value=0)
    def test_root_passes(self, mock_geteuid: MagicMock) -> None:
        """Root passes without error."""
        require_root()
        mock_geteuid.assert_called_once()

    @patch("containerd_mirror.preflight.os.geteuid", return_value=1000)
    def test_non_root_fails(self, mock_geteuid: MagicMock) -> None:
        """Any other uid raises PrivilegeError."""
        with pytest.raises(PrivilegeError) as excinfo:
            require_root()
        assert excinfo.value.euid == 1000
        assert "Run as root" in str(excinfo.value)


class TestRequireCommands:
    """Tests for require_commands."""

    @patch("containerd_mirror.preflight.shutil.which", side_effect=lambda c: f"/usr/bin/{c}")
    def test_all_present(self, mock_which: MagicMock) -> None:
        """Every command is looked up."""
        require_commands(["containerd", "crictl"])
        assert [c.args[0] for c in mock_which.call_args_list] == ["containerd", "crictl"]

    @patch("containerd_mirror.preflight.shutil.which")
    def test_first_missing_command_reported(self, mock_which: MagicMock) -> None:
        """The first missing command stops the check."""
        mock_which.side_effect = lambda c: None if c in ("crictl", "journalctl") else f"/usr/bin/{c}"
        with pytest.raises(MissingDependencyError) as excinfo:
            require_commands(["containerd", "crictl", "journalctl"])
        assert excinfo.value.command == "crictl"
        assert str(excinfo.value) == "Missing required command: crictl"
        assert mock_which.call_count == 2


class TestCheckRegistryReachable:
    """Tests for check_registry_reachable."""

    @patch("containerd_mirror.preflight.requests.Session")
    def test_reachable(self, mock_session_class: MagicMock) -> None:
        """A 200 answer passes; proxies from the environment are ignored."""
        session = mock_session_class.return_value
        session.get.return_value = Mock(raise_for_status=Mock(return_value=None))

        check_registry_reachable("http://10.0.0.1:5000/v2/", timeout=3.0)

        assert session.trust_env is False
        session.get.assert_called_once_with("http://10.0.0.1:5000/v2/", timeout=3.0)
        session.close.assert_called_once()

    @patch("containerd_mirror.preflight.requests.Session")
    def test_timeout_is_unreachable(self, mock_session_class: MagicMock) -> None:
        """A timeout raises NetworkUnreachableError with the URL."""
        session = mock_session_class.return_value
        session.get.side_effect = requests.Timeout("timed out")

        with pytest.raises(NetworkUnreachableError) as excinfo:
            check_registry_reachable("http://10.0.0.1:5000/v2/", timeout=3.0)

        assert excinfo.value.url == "http://10.0.0.1:5000/v2/"
        assert "Registry is not reachable" in str(excinfo.value)
        session.close.assert_called_once()

    @patch("containerd_mirror.preflight.requests.Session")
    def test_error_status_is_unreachable(self, mock_session_class: MagicMock) -> None:
        """An HTTP error status counts as unreachable."""
        session = mock_session_class.return_value
        response = Mock()
        response.raise_for_status.side_effect = requests.HTTPError("503 Server Error")
        session.get.return_value = response

        with pytest.raises(NetworkUnreachableError):
            check_registry_reachable("http://10.0.0.1:5000/v2/", timeout=3.0)

    @patch("containerd_mirror.preflight.requests.Session")
    def test_connection_refused_is_unreachable(self, mock_session_class: MagicMock) -> None:
        """A refused connection counts as unreachable."""
        mock_session_class.return_value.get.side_effect = requests.ConnectionError("refused")

        with pytest.raises(NetworkUnreachableError):
            check_registry_reachable("http://10.0.0.1:5000/v2/", timeout=3.0)
