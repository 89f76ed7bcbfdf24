"""unit/test_node_tree.py

NodeTree on its own: lookup, construction-order rules, sorted children,
walk and stats. No mount or disk involved.
"""

import gzip
import stat as stat_mod
from datetime import datetime, timezone

import pytest
from embedfs import DirNode, FileNode, NodeInfo, NodeTree
from embedfs._exceptions import VFSInvalidPathError


@pytest.fixture
def tree():
    t = NodeTree("/static")
    t.add_dir(NodeInfo("/static/css", is_dir=True))
    t.add_dir(NodeInfo("/static/js", is_dir=True))
    t.add_file(NodeInfo("/static/css/app.css"), b"body{}")
    t.add_file(NodeInfo("/static/js/app.js"), b"console.log(1)")
    return t


# ---------------------------------------------------------------------------
#  find
# ---------------------------------------------------------------------------


def test_find_root_returns_root_itself(tree):
    node = tree.find("/static")
    assert node is tree.root
    assert node.is_dir


def test_find_file(tree):
    node = tree.find("/static/css/app.css")
    assert isinstance(node, FileNode)
    assert node.data == b"body{}"
    assert node.size == 6


def test_find_normalizes_query(tree):
    assert tree.find("static//css/./app.css").path == "/static/css/app.css"


def test_find_missing_segment_raises_not_found(tree):
    with pytest.raises(FileNotFoundError):
        tree.find("/static/img/logo.png")


def test_find_outside_tree_raises_not_found(tree):
    with pytest.raises(FileNotFoundError):
        tree.find("/views/index.html")


def test_find_through_file_raises_not_a_directory(tree):
    with pytest.raises(NotADirectoryError):
        tree.find("/static/css/app.css/extra")


def test_find_nul_byte_rejected_before_traversal(tree):
    with pytest.raises(VFSInvalidPathError):
        tree.find("/static/css\x00")


def test_find_is_case_sensitive(tree):
    with pytest.raises(FileNotFoundError):
        tree.find("/static/CSS/app.css")


# ---------------------------------------------------------------------------
#  find_node
# ---------------------------------------------------------------------------


def test_find_node_returns_dir(tree):
    node = tree.find_node("/static/css")
    assert isinstance(node, DirNode)
    assert node.path == "/static/css"


def test_find_node_outside_tree_is_none(tree):
    assert tree.find_node("/views") is None


def test_find_node_missing_intermediate_raises(tree):
    with pytest.raises(FileNotFoundError):
        tree.find_node("/static/img/icons")


def test_find_node_on_file_raises(tree):
    with pytest.raises(NotADirectoryError):
        tree.find_node("/static/css/app.css")


# ---------------------------------------------------------------------------
#  Construction
# ---------------------------------------------------------------------------


def test_add_file_requires_parent(tree):
    with pytest.raises(FileNotFoundError, match="Parent directory"):
        tree.add_file(NodeInfo("/static/img/logo.png"), b"png")


def test_add_dir_requires_parent(tree):
    with pytest.raises(FileNotFoundError):
        tree.add_dir(NodeInfo("/static/img/icons", is_dir=True))


def test_add_duplicate_rejected(tree):
    with pytest.raises(FileExistsError):
        tree.add_file(NodeInfo("/static/css/app.css"), b"other")
    assert tree.find("/static/css/app.css").raw_bytes() == b"body{}"


def test_add_outside_tree_is_skipped(tree):
    assert tree.add_file(NodeInfo("/views/index.html"), b"x") is None
    assert tree.add_dir(NodeInfo("/views", is_dir=True)) is None
    assert len(tree) == 5
    with pytest.raises(FileNotFoundError):
        tree.find("/views/index.html")


def test_add_file_at_root_rejected(tree):
    with pytest.raises(IsADirectoryError):
        tree.add_file(NodeInfo("/static"), b"x")


def test_add_dir_at_root_updates_mod_time(tree):
    when = datetime(2020, 1, 2, tzinfo=timezone.utc)
    node = tree.add_dir(NodeInfo("/static", is_dir=True, mod_time=when))
    assert node is tree.root
    assert tree.root.mod_time == when


def test_gzip_detected_from_header():
    t = NodeTree("/")
    payload = gzip.compress(b"x" * 100)
    node = t.add_file(NodeInfo("/big.txt"), payload)
    assert node.is_gzip()
    assert node.size == 100
    assert node.raw_bytes() == payload


def test_gzip_flag_explicit_false_keeps_plain():
    t = NodeTree("/")
    payload = gzip.compress(b"abc")
    node = t.add_file(NodeInfo("/blob.gz"), payload, gzip=False)
    assert not node.is_gzip()
    assert node.size == len(payload)


def test_declared_size_preferred():
    t = NodeTree("/")
    node = t.add_file(NodeInfo("/a.txt", size=3), b"abc")
    assert node.size == 3


def test_gzip_flag_on_non_gzip_payload_keeps_flag():
    t = NodeTree("/static")
    node = t.add_file(NodeInfo("/static/app.css"), b"body{}", gzip=True)
    assert node.is_gzip()
    assert node.raw_bytes() == b"body{}"
    assert node.size == 6
    assert t.find("/static/app.css") is node


def test_gzip_flag_on_truncated_payload_keeps_flag():
    t = NodeTree("/")
    payload = gzip.compress(b"y" * 64)[:12]
    node = t.add_file(NodeInfo("/cut.gz"), payload, gzip=True)
    assert node.is_gzip()
    assert node.size == len(payload)


@pytest.mark.parametrize("attr, value", [
    ("path", "/elsewhere"),
    ("is_dir", True),
    ("size", 99),
    ("mod_time", datetime(2000, 1, 1, tzinfo=timezone.utc)),
])
def test_node_attributes_are_read_only(tree, attr, value):
    node = tree.find("/static/css/app.css")
    with pytest.raises(AttributeError):
        setattr(node, attr, value)
    assert node.size == 6
    assert node.path == "/static/css/app.css"


def test_file_payload_and_children_are_read_only(tree):
    node = tree.find("/static/css/app.css")
    with pytest.raises(AttributeError):
        node.data = b"other"
    with pytest.raises(AttributeError):
        node.gzip = True
    with pytest.raises(TypeError):
        tree.root.children["evil"] = 0
    assert sorted(tree.root.children) == ["css", "js"]


# ---------------------------------------------------------------------------
#  Listing / walk / stats
# ---------------------------------------------------------------------------


def test_child_infos_sorted_regardless_of_insert_order():
    t = NodeTree("/docs")
    for name in ("b.txt", "c.txt", "a.txt"):
        t.add_file(NodeInfo(f"/docs/{name}"), name.encode())
    assert [c.name for c in t.child_infos(t.root)] == ["a.txt", "b.txt", "c.txt"]


def test_walk_yields_sorted_top_down(tree):
    result = list(tree.walk())
    assert result == [
        ("/static", ["css", "js"], []),
        ("/static/css", [], ["app.css"]),
        ("/static/js", [], ["app.js"]),
    ]


def test_walk_prunes_removed_dirnames(tree):
    seen = []
    for dirpath, dirnames, _ in tree.walk():
        seen.append(dirpath)
        if "css" in dirnames:
            dirnames.remove("css")
    assert seen == ["/static", "/static/js"]


def test_walk_from_file_raises(tree):
    with pytest.raises(NotADirectoryError):
        list(tree.walk("/static/js/app.js"))


def test_stats_counts(tree):
    assert tree.stats() == (3, 2, 0, len(b"body{}") + len(b"console.log(1)"))
    assert len(tree) == 5


def test_is_empty():
    t = NodeTree("/x")
    assert t.is_empty()
    t.add_dir(NodeInfo("/x/y", is_dir=True))
    assert not t.is_empty()


# ---------------------------------------------------------------------------
#  NodeInfo
# ---------------------------------------------------------------------------


def test_default_modes():
    assert NodeInfo("/d", is_dir=True).mode == stat_mod.S_IFDIR | 0o755
    assert NodeInfo("/f").mode == stat_mod.S_IFREG | 0o444


def test_dir_size_is_zero():
    assert NodeInfo("/d", is_dir=True, size=4096).size == 0


def test_root_name():
    assert NodeInfo("/", is_dir=True).name == "/"


def test_str_form(tree):
    node = tree.find("/static/css/app.css")
    text = str(node)
    assert text.startswith("node(name=app.css dir=False gzip=False size=6, modtime=")
    assert str(NodeInfo("/x.txt", size=2)).startswith("file(name=x.txt ")
