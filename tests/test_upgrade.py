"""
Tests for self-upgrade and confirmation prompts (gvm_cli/upgrade.py, gvm_cli/common.py).
"""

from dataclasses import replace
from unittest.mock import MagicMock, patch

import pytest

from gvm_cli.common import confirm, require_confirmation
from gvm_cli.errors import GvmError, NetworkError, UserAbort
from gvm_cli.upgrade import self_upgrade


SCRIPT = b"#!/bin/sh\necho installing\n"


class TestConfirm:
    """Tests for confirm."""

    @patch("gvm_cli.common.sys.stdin")
    def test_not_a_tty(self, mock_stdin):
        mock_stdin.isatty.return_value = False
        assert confirm("Continue? ") is False

    @pytest.mark.parametrize("answer,expected", [
        ("y", True),
        ("YES", True),
        ("n", False),
        ("", False),
    ])
    @patch("gvm_cli.common.sys.stdin")
    def test_answers(self, mock_stdin, answer, expected):
        mock_stdin.isatty.return_value = True
        with patch("builtins.input", return_value=answer):
            assert confirm("Continue? ") is expected

    @patch("gvm_cli.common.sys.stdin")
    def test_eof(self, mock_stdin):
        mock_stdin.isatty.return_value = True
        with patch("builtins.input", side_effect=EOFError):
            assert confirm("Continue? ") is False


class TestRequireConfirmation:
    """Tests for require_confirmation."""

    @patch("gvm_cli.common.confirm")
    def test_non_interactive_never_prompts(self, mock_confirm, config):
        with pytest.raises(UserAbort):
            require_confirmation(replace(config, non_interactive=True), "? ", "Cancelled")
        mock_confirm.assert_not_called()

    @patch("gvm_cli.common.confirm", return_value=False)
    def test_declined(self, mock_confirm, config):
        with pytest.raises(UserAbort) as exc_info:
            require_confirmation(config, "? ", "Cancelled", remediation="Try again")
        assert exc_info.value.message == "Cancelled"
        assert exc_info.value.remediation == "Try again"

    @patch("gvm_cli.common.confirm", return_value=True)
    def test_accepted(self, mock_confirm, config):
        require_confirmation(config, "? ", "Cancelled")
        mock_confirm.assert_called_once_with("? ")


class TestSelfUpgrade:
    """Tests for self_upgrade."""

    @patch("gvm_cli.upgrade.subprocess.run", return_value=MagicMock(returncode=0))
    @patch("gvm_cli.upgrade.http_get", return_value=SCRIPT)
    @patch("gvm_cli.common.confirm", return_value=True)
    def test_runs_script_after_consent(self, mock_confirm, mock_get, mock_run, config, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/bash")
        with patch("gvm_cli.upgrade.installed_executable", return_value="/usr/local/bin/gvm"):
            assert self_upgrade(config) == 0

        mock_get.assert_called_once_with(config.install_script_url, timeout=config.timeout_seconds)
        args, kwargs = mock_run.call_args
        assert args[0] == ["/bin/bash", "-s", "--", "-y"]
        assert kwargs["input"] == SCRIPT
        assert kwargs["env"]["GVM_INSTALL_PATH"] == "/usr/local/bin/gvm"

    @patch("gvm_cli.upgrade.subprocess.run")
    @patch("gvm_cli.upgrade.http_get", return_value=SCRIPT)
    @patch("gvm_cli.common.confirm", return_value=False)
    def test_declined_downloads_nothing(self, mock_confirm, mock_get, mock_run, config):
        with pytest.raises(UserAbort):
            self_upgrade(config)
        mock_get.assert_not_called()
        mock_run.assert_not_called()

    @patch("gvm_cli.upgrade.subprocess.run")
    @patch("gvm_cli.upgrade.http_get", return_value=SCRIPT)
    def test_non_interactive_requires_trust(self, mock_get, mock_run, config):
        with pytest.raises(UserAbort):
            self_upgrade(replace(config, non_interactive=True))
        mock_run.assert_not_called()

    @patch("gvm_cli.upgrade.subprocess.run", return_value=MagicMock(returncode=0))
    @patch("gvm_cli.upgrade.http_get", return_value=SCRIPT)
    @patch("gvm_cli.common.confirm")
    def test_trusted_skips_prompt(self, mock_confirm, mock_get, mock_run, config):
        trusted = replace(config, non_interactive=True, trust_install_script=True)
        assert self_upgrade(trusted) == 0
        mock_confirm.assert_not_called()
        mock_run.assert_called_once()

    @patch("gvm_cli.upgrade.subprocess.run", return_value=MagicMock(returncode=2))
    @patch("gvm_cli.upgrade.http_get", return_value=SCRIPT)
    def test_script_failure(self, mock_get, mock_run, config):
        with pytest.raises(GvmError) as exc_info:
            self_upgrade(replace(config, trust_install_script=True))
        assert "exit code 2" in exc_info.value.message

    @patch("gvm_cli.upgrade.subprocess.run")
    @patch("gvm_cli.upgrade.http_get", side_effect=NetworkError("Failed to fetch"))
    def test_download_failure(self, mock_get, mock_run, config):
        with pytest.raises(NetworkError):
            self_upgrade(replace(config, trust_install_script=True))
        mock_run.assert_not_called()
