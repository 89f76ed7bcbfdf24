import pytest

from embedfs import VirtualFileSystem
from tests.helpers.builders import embed_directory

pytest_plugins = ["embedfs._pytest_plugin"]


@pytest.fixture
def app_dir(tmp_path):
    """Physical application layout used by most mount tests.

    Layout::

        .gitignore
        config/aah.conf
        config/env/prod.conf
        config/routes.conf
        config/security.conf
        static/js/app.js
        static/robots.txt
        views/common/.keep
        views/errors/404.html
        views/pages/app/index.html
    """
    root = tmp_path / "app"
    files = {
        ".gitignore": b"*.pyc\n",
        "config/aah.conf": b'name = "vfstest"\n' + b"# padding line\n" * 200,
        "config/env/prod.conf": b"env = prod\n",
        "config/routes.conf": b"routes {}\n",
        "config/security.conf": b"# Anti-CSRF Protection\n" + b"#secret_length = 32\n" * 100,
        "static/js/app.js": b"console.log('app')\n",
        "static/robots.txt": b"User-agent: *\nDisallow: /\n",
        "views/common/.keep": b"",
        "views/errors/404.html": b"<h1>not found</h1>\n",
        "views/pages/app/index.html": b"<p>{{ greet }}</p>\n",
    }
    for rel, data in files.items():
        p = root / rel
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_bytes(data)
    return root


@pytest.fixture
def app_vfs(app_dir) -> VirtualFileSystem:
    """VFS with ``app_dir`` mounted at ``/app`` and fully embedded.

    ``aah.conf`` and ``security.conf`` are stored gzip-compressed.
    """
    fs = VirtualFileSystem()
    m = fs.add_mount("/app", app_dir)
    embed_directory(m, app_dir, gzip_names={"aah.conf", "security.conf"})
    return fs
