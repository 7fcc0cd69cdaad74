"""Shared fixtures: an exploded bundle with plugin archives and a plugins directory."""

import os
import zipfile
from pathlib import Path

import pytest

BUNDLED_TIME_MS = 1_700_000_000_000


def _set_mtime_ms(path: Path, timestamp_ms: int) -> None:
    ns = timestamp_ms * 1_000_000
    os.utime(path, ns=(ns, ns))


@pytest.fixture
def bundle_root(tmp_path):
    """Root of the exploded bundle, with an empty WEB-INF/plugins directory."""
    root = tmp_path / "war"
    (root / "WEB-INF" / "plugins").mkdir(parents=True)
    return root


@pytest.fixture
def plugins_dir(tmp_path):
    """Live plugins directory (not created yet)."""
    return tmp_path / "plugins"


@pytest.fixture
def add_plugin(bundle_root):
    """Factory writing a plugin archive into the bundle.

    Usage: add_plugin("git.jpi", dependencies=["credentials:2.1"], mtime=...)
    """

    def _add(
        file_name: str,
        dependencies: list[str] | None = None,
        mtime: int = BUNDLED_TIME_MS,
        directory: str = "WEB-INF/plugins",
        content: str = "",
    ) -> Path:
        path = bundle_root / directory / file_name
        path.parent.mkdir(parents=True, exist_ok=True)

        manifest = "Manifest-Version: 1.0\n"
        manifest += f"Short-Name: {file_name.rsplit('.', 1)[0]}\n"
        if dependencies:
            manifest += f"Plugin-Dependencies: {','.join(dependencies)}\n"

        with zipfile.ZipFile(path, "w") as archive:
            archive.writestr("META-INF/MANIFEST.MF", manifest)
            archive.writestr("WEB-INF/lib/payload.txt", content or file_name)

        _set_mtime_ms(path, mtime)
        return path

    return _add
