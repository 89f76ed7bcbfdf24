"""pytest fixture plugin.

Usage::

    # conftest.py
    pytest_plugins = ["embedfs._pytest_plugin"]

This makes the ``vfs`` and ``site_dir`` fixtures available::

    def test_something(vfs, site_dir):
        vfs.add_mount("/", site_dir)
        assert vfs.read_file("/index.html") == b"<h1>home</h1>"
"""

import pytest

from ._vfs import VirtualFileSystem


@pytest.fixture
def vfs() -> VirtualFileSystem:
    """An empty :class:`VirtualFileSystem` (not in embedded mode).

    Provides an independent instance per test (function scope).
    """
    return VirtualFileSystem()


@pytest.fixture
def site_dir(tmp_path):
    """A small physical directory tree to mount.

    Layout::

        index.html
        css/app.css
        js/app.js
    """
    root = tmp_path / "site"
    (root / "css").mkdir(parents=True)
    (root / "js").mkdir()
    (root / "index.html").write_bytes(b"<h1>home</h1>")
    (root / "css" / "app.css").write_bytes(b"body{color:red}")
    (root / "js" / "app.js").write_bytes(b"console.log(1)")
    return root
