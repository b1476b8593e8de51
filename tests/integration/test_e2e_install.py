"""
End-to-end integration tests for install, switch and cleanup workflows.

Runs the CLI entry point against an isolated GOPATH/GOROOT with the
release server replaced by in-memory archives.
"""

import io
import os
import sys
from unittest.mock import patch

import pytest

from gvm_cli import VersionStore
from gvm_cli.cli import main

skip_on_windows = pytest.mark.skipif(
    sys.platform == "win32",
    reason="Activation relies on POSIX symlinks and shell scripts",
)

INDEX_HTML = b"""
<a href="/dl/go1.19.src.tar.gz">go1.19.src.tar.gz</a>
<a href="/dl/go1.20.src.tar.gz">go1.20.src.tar.gz</a>
<a href="/dl/go1.21.3.src.tar.gz">go1.21.3.src.tar.gz</a>
"""

SUFFIX = ".linux-amd64.tar.gz"
PLATFORM = ["--os", "linux", "--arch", "amd64"]


class ReleaseServer:
    """Stand-in for the download mirror serving generated archives."""

    def __init__(self, make_archive, published=("1.19", "1.20", "1.21.3")):
        self.make_archive = make_archive
        self.published = set(published)
        self.corrupt = set()
        self.downloads = []

    @staticmethod
    def _version(url):
        name = url.rsplit("/", 1)[1]
        return name[len("go"):-len(SUFFIX)]

    def status(self, url, timeout=30):
        return 200 if self._version(url) in self.published else 404

    def stream(self, url, timeout=30):
        version = self._version(url)
        self.downloads.append(version)
        if version in self.corrupt:
            return io.BytesIO(b"<html>503 Service Unavailable</html>")
        return io.BytesIO(self.make_archive(version))


@pytest.fixture
def server(release_archive):
    release_server = ReleaseServer(release_archive)
    with patch("gvm_cli.installer.http_status", side_effect=release_server.status), \
            patch("gvm_cli.installer.open_stream", side_effect=release_server.stream), \
            patch("gvm_cli.catalog.http_get", return_value=INDEX_HTML):
        yield release_server


@skip_on_windows
class TestInstallWorkflow:
    """Integration tests for installing and activating versions."""

    def test_install_creates_symlink_chain(self, config, server, capsys):
        assert main(["install", "1.21.3", *PLATFORM]) == 0

        version_dir = config.versions_dir / "1.21.3"
        go_link = config.bin_dir / "go"
        assert go_link.is_symlink()
        assert os.path.realpath(go_link) == os.path.realpath(version_dir / "bin" / "go")
        assert os.path.realpath(config.goroot_dir / "bin") == os.path.realpath(version_dir / "bin")
        assert not (version_dir / "gvm.lock").exists()

        capsys.readouterr()
        assert main(["list"]) == 0
        assert capsys.readouterr().out == "> 1.21.3\n"

    def test_install_latest_resolves_from_index(self, config, server):
        assert main(["install", "latest", *PLATFORM]) == 0
        assert server.downloads == ["1.21.3"]
        assert VersionStore(config).current_version() == "1.21.3"

    def test_download_is_idempotent(self, config, server):
        assert main(["download", "1.20", *PLATFORM]) == 0
        assert main(["download", "1.20", *PLATFORM]) == 0
        assert server.downloads == ["1.20"]
        # downloading never activates
        assert VersionStore(config).current_version() is None

    def test_unpublished_version(self, config, server, capsys):
        assert main(["install", "1.99.0", *PLATFORM]) == 1
        assert server.downloads == []
        assert VersionStore(config).list_installed() == []


@skip_on_windows
class TestSwitchAndCleanup:
    """Integration tests for switching between versions and pruning."""

    def _install_all(self):
        for version in ("1.19", "1.20", "1.21.3"):
            assert main(["install", version, *PLATFORM]) == 0

    def test_switch_with_set(self, config, server, capsys):
        self._install_all()
        assert VersionStore(config).current_version() == "1.21.3"

        assert main(["set", "1.19"]) == 0

        capsys.readouterr()
        main(["list"])
        assert capsys.readouterr().out == "> 1.19\n  1.20\n  1.21.3\n"
        assert (config.goroot_dir / "VERSION").read_text() == "go1.19\n"

    def test_prune_keeps_only_active(self, config, server):
        self._install_all()
        main(["set", "1.20"])

        assert main(["prune"]) == 0

        assert VersionStore(config).list_installed() == ["1.20"]
        assert VersionStore(config).current_version() == "1.20"

    def test_remove_active_then_inactive(self, config, server):
        self._install_all()

        assert main(["remove", "1.21.3"]) == 1
        assert main(["rm", "1.19", "1.20"]) == 0

        assert VersionStore(config).list_installed() == ["1.21.3"]

    def test_run_uses_requested_version(self, config, server, capfd):
        self._install_all()
        main(["set", "1.19"])
        capfd.readouterr()

        assert main(["run", "1.20", "env", "GOPATH"]) == 0

        assert "go1.20 env GOPATH" in capfd.readouterr().out
        assert VersionStore(config).current_version() == "1.19"


@skip_on_windows
class TestInterruptedInstall:
    """Integration tests for recovery from incomplete installs."""

    def test_corrupt_install_is_refused_then_repaired(self, config, server, capsys):
        server.corrupt.add("1.20")
        assert main(["download", "1.20", *PLATFORM]) == 1
        assert VersionStore(config).is_locked("1.20")

        assert main(["set", "1.20"]) == 1
        assert "incomplete or corrupt" in capsys.readouterr().err
        assert not (config.bin_dir / "go").exists()

        server.corrupt.clear()
        assert main(["install", "1.20", *PLATFORM]) == 0
        assert not VersionStore(config).is_locked("1.20")
        assert VersionStore(config).current_version() == "1.20"
        assert server.downloads == ["1.20", "1.20"]
