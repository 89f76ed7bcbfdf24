def assert_sorted_listing(infos):
    names = [info.name for info in infos]
    assert names == sorted(names)
    assert len(names) == len(set(names))


def assert_stats_consistent(vfs):
    s = vfs.stats()
    assert set(s.keys()) == {
        "mount_count",
        "dir_count",
        "file_count",
        "gzip_count",
        "embedded_bytes",
    }
    assert s["mount_count"] == len(vfs.mounts)
    # every mount has at least its root directory node
    assert s["dir_count"] >= s["mount_count"]
    assert 0 <= s["gzip_count"] <= s["file_count"]
    assert s["embedded_bytes"] >= 0
