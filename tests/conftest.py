"""
Shared fixtures: an isolated GOPATH/GOROOT pair, fake Go trees and
in-memory release archives.
"""

import io
import os
import tarfile
from pathlib import Path

import pytest

from gvm_cli.config import Config
from gvm_cli.store import LOCK_FILENAME


def fake_go_script(version: str) -> str:
    """Shell script standing in for a go binary of the given version."""
    return (
        "#!/bin/sh\n"
        'if [ "$1" = "version" ]; then\n'
        f'  echo "go version go{version} linux/amd64"\n'
        "  exit 0\n"
        "fi\n"
        f'echo "go{version} $*"\n'
        "exit ${GVM_TEST_EXIT:-0}\n"
    )


def make_archive(version: str, prefix: str = "go") -> bytes:
    """Build a release-style .tar.gz with every file under ``prefix/``."""
    files = {
        "bin/go": (fake_go_script(version), 0o755),
        "bin/gofmt": (f"#!/bin/sh\necho gofmt {version}\n", 0o755),
        "src/runtime/runtime.go": ("package runtime\n", 0o644),
        "VERSION": (f"go{version}\n", 0o644),
    }
    buf = io.BytesIO()
    with tarfile.open(fileobj=buf, mode="w:gz") as tar:
        for directory in ("", "bin", "src", "src/runtime"):
            info = tarfile.TarInfo(f"{prefix}/{directory}".rstrip("/"))
            info.type = tarfile.DIRTYPE
            info.mode = 0o755
            tar.addfile(info)
        for name, (content, mode) in files.items():
            data = content.encode()
            info = tarfile.TarInfo(f"{prefix}/{name}")
            info.size = len(data)
            info.mode = mode
            tar.addfile(info, io.BytesIO(data))
    return buf.getvalue()


@pytest.fixture
def config(tmp_path, monkeypatch):
    """Config rooted in tmp_path with GOPATH/bin as the only PATH entry."""
    gopath = tmp_path / "gopath"
    goroot = tmp_path / "goroot"
    (gopath / "bin").mkdir(parents=True)
    (goroot / ".versions").mkdir(parents=True)

    monkeypatch.setenv("GOPATH", str(gopath))
    monkeypatch.setenv("GOROOT", str(goroot))
    monkeypatch.setenv("PATH", str(gopath / "bin"))
    monkeypatch.delenv("GVM_CONFIG", raising=False)
    monkeypatch.setattr("gvm_cli.config.CONFIG_LOCATIONS", [])

    return Config(gopath=str(gopath), goroot=str(goroot), color=False, timeout_seconds=5)


@pytest.fixture
def make_version(config):
    """Factory creating an extracted version directory."""
    def _make(version: str, locked: bool = False) -> Path:
        root = config.versions_dir / version
        (root / "bin").mkdir(parents=True)
        (root / "src").mkdir()
        go = root / "bin" / "go"
        go.write_text(fake_go_script(version))
        go.chmod(0o755)
        gofmt = root / "bin" / "gofmt"
        gofmt.write_text(f"#!/bin/sh\necho gofmt {version}\n")
        gofmt.chmod(0o755)
        (root / "VERSION").write_text(f"go{version}\n")
        if locked:
            (root / LOCK_FILENAME).touch()
        return root
    return _make


@pytest.fixture
def release_archive():
    """Factory returning release archive bytes for a version."""
    return make_archive
