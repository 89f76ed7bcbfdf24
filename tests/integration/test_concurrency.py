import threading

import pytest
from tests.helpers.concurrency import run_concurrent


def test_concurrent_reads_same_node(app_vfs):
    """Multiple threads can read the same gzip node through separate handles."""
    expected = app_vfs.read_file("/app/config/aah.conf")

    def reader(_):
        with app_vfs.open("/app/config/aah.conf") as f:
            return f.read()

    results, errors = run_concurrent(reader, n_threads=10)
    assert not any(e for e in errors)
    assert all(r == expected for r in results)


def test_concurrent_mixed_tree_and_disk(app_vfs, app_dir):
    (app_dir / "disk_only.txt").write_bytes(b"disk" * 64)
    paths = ["/app/config/security.conf", "/app/disk_only.txt", "/app/static/js/app.js"]
    expected = {p: app_vfs.read_file(p) for p in paths}

    def reader(i):
        p = paths[i % len(paths)]
        return p, app_vfs.read_file(p)

    results, errors = run_concurrent(reader, n_threads=12)
    assert not any(e for e in errors)
    for p, data in results:
        assert data == expected[p]


def test_concurrent_seek_on_distinct_handles(app_vfs):
    """Each handle keeps its own cursor; seeking in one never moves another."""
    full = app_vfs.read_file("/app/config/security.conf")
    errors = []
    lock = threading.Lock()

    def reader(thread_id):
        offset = (thread_id * 37) % len(full)
        try:
            with app_vfs.open("/app/config/security.conf") as f:
                for _ in range(20):
                    f.seek(offset)
                    assert f.read(16) == full[offset: offset + 16]
        except Exception as e:
            with lock:
                errors.append(e)

    threads = [threading.Thread(target=reader, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=30.0)
    assert not errors, f"cursor interference detected: {errors}"


@pytest.mark.p1
def test_concurrent_listing_and_glob(app_vfs):
    def lister(_):
        return (
            [i.name for i in app_vfs.read_dir("/app/views")],
            app_vfs.glob("/app/config/*.conf"),
        )

    results, errors = run_concurrent(lister, n_threads=10)
    assert not any(e for e in errors)
    assert len({repr(r) for r in results}) == 1
