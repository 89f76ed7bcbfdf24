from __future__ import annotations

import errno
import gzip as _gzip
import logging
import os
import posixpath
import stat as stat_mod
import zlib
from collections.abc import Iterator, Mapping
from datetime import datetime, timezone
from types import MappingProxyType

from ._path import is_within, normalize_path, split_parts

log = logging.getLogger(__name__)

# RFC 1952 section 2.3 member header (ID1, ID2, CM=deflate)
GZIP_MEMBER_HEADER = b"\x1f\x8b\x08"

DIR_MODE = stat_mod.S_IFDIR | 0o755
FILE_MODE = stat_mod.S_IFREG | 0o444


# ---------------------------------------------------------------------------
#  File metadata
# ---------------------------------------------------------------------------


class NodeInfo:
    """Metadata of one file or directory, whether it lives in memory or on disk.

    ``size`` is the content length in bytes (0 for directories). For a
    gzip-compressed tree node it is the uncompressed length; the compressed
    payload is available through :meth:`raw_bytes`.

    Instances are read-only once built: tree nodes are handed out directly
    by ``stat`` and ``read_dir`` and are shared between readers.
    """

    __slots__ = ("_path", "_is_dir", "_size", "_mod_time", "_mode")

    _kind = "file"

    def __init__(
        self,
        path: str,
        is_dir: bool = False,
        size: int = 0,
        mod_time: datetime | None = None,
        mode: int | None = None,
    ) -> None:
        self._path: str = path
        self._is_dir: bool = is_dir
        self._size: int = 0 if is_dir else size
        self._mod_time: datetime = (
            mod_time if mod_time is not None else datetime.now(timezone.utc)
        )
        self._mode: int | None = mode

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> NodeInfo:
        is_dir = stat_mod.S_ISDIR(st.st_mode)
        return cls(
            path,
            is_dir=is_dir,
            size=st.st_size,
            mod_time=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
            mode=st.st_mode,
        )

    @property
    def path(self) -> str:
        return self._path

    @property
    def is_dir(self) -> bool:
        return self._is_dir

    @property
    def size(self) -> int:
        return self._size

    @property
    def mod_time(self) -> datetime:
        return self._mod_time

    @property
    def name(self) -> str:
        return posixpath.basename(self._path) or "/"

    @property
    def mode(self) -> int:
        if self._mode is not None:
            return self._mode
        return DIR_MODE if self._is_dir else FILE_MODE

    def is_gzip(self) -> bool:
        return False

    def raw_bytes(self) -> bytes:
        return b""

    def __str__(self) -> str:
        return (
            f"{self._kind}(name={self.name} dir={self._is_dir} gzip={self.is_gzip()} "
            f"size={self._size}, modtime={self._mod_time.isoformat()})"
        )

    __repr__ = __str__


# ---------------------------------------------------------------------------
#  Tree nodes
# ---------------------------------------------------------------------------


class DirNode(NodeInfo):
    __slots__ = ("_node_id", "_children")

    _kind = "node"

    def __init__(self, path: str, mod_time: datetime | None = None) -> None:
        super().__init__(path, is_dir=True, mod_time=mod_time)
        self._node_id: int = -1
        self._children: dict[str, int] = {}

    @property
    def node_id(self) -> int:
        return self._node_id

    @property
    def children(self) -> Mapping[str, int]:
        return MappingProxyType(self._children)


class FileNode(NodeInfo):
    __slots__ = ("_node_id", "_data", "_gzip")

    _kind = "node"

    def __init__(
        self,
        path: str,
        data: bytes,
        size: int,
        mod_time: datetime | None = None,
        gzip: bool = False,
    ) -> None:
        super().__init__(path, is_dir=False, size=size, mod_time=mod_time)
        self._node_id: int = -1
        self._data: bytes = data
        self._gzip: bool = gzip

    @property
    def node_id(self) -> int:
        return self._node_id

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def gzip(self) -> bool:
        return self._gzip

    def is_gzip(self) -> bool:
        return self._gzip

    def raw_bytes(self) -> bytes:
        return self._data


Node = DirNode | FileNode


# ---------------------------------------------------------------------------
#  NodeTree
# ---------------------------------------------------------------------------


class NodeTree:
    """In-memory tree of embedded resources rooted at one virtual path.

    Nodes live in an arena keyed by integer id; a directory references its
    children by id. The tree is populated once by ``add_dir``/``add_file``
    during the build phase and is only read afterwards.
    """

    def __init__(self, root_path: str, mod_time: datetime | None = None) -> None:
        self._root_path: str = normalize_path(root_path)
        self._nodes: dict[int, Node] = {}
        self._next_node_id: int = 0
        self._root = DirNode(self._root_path, mod_time)
        self._register(self._root)

    def _register(self, node: Node) -> None:
        node._node_id = self._next_node_id
        self._next_node_id += 1
        self._nodes[node.node_id] = node

    @property
    def root(self) -> DirNode:
        return self._root

    @property
    def root_path(self) -> str:
        return self._root_path

    def __len__(self) -> int:
        return len(self._nodes)

    def is_empty(self) -> bool:
        return not self._root._children

    # -- lookup --

    def _relative_parts(self, npath: str) -> list[str] | None:
        if not is_within(npath, self._root_path):
            return None
        return split_parts(npath[len(self._root_path):])

    def _walk_parts(self, npath: str, parts: list[str]) -> Node:
        current: Node = self._root
        for part in parts:
            if not isinstance(current, DirNode):
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", current.path)
            child_id = current._children.get(part)
            if child_id is None:
                raise FileNotFoundError(errno.ENOENT, "No such file or directory", npath)
            current = self._nodes[child_id]
        return current

    def find(self, path: str) -> Node:
        """Return the node at *path*; the tree root itself when *path* is the root."""
        npath = normalize_path(path)
        parts = self._relative_parts(npath)
        if parts is None:
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", npath)
        return self._walk_parts(npath, parts)

    def find_node(self, dir_path: str) -> DirNode | None:
        """Locate the directory node for *dir_path*.

        Returns None when *dir_path* lies outside this tree. Raises when a
        segment is missing or names a file.
        """
        npath = normalize_path(dir_path)
        parts = self._relative_parts(npath)
        if parts is None:
            return None
        node = self._walk_parts(npath, parts)
        if not isinstance(node, DirNode):
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", npath)
        return node

    def child_infos(self, node: DirNode) -> list[Node]:
        return [self._nodes[node._children[name]] for name in sorted(node._children)]

    # -- construction --

    def add_child(self, parent: DirNode, node: Node) -> None:
        name = node.name
        if name in parent._children:
            raise FileExistsError(errno.EEXIST, "Node already exists", node.path)
        self._register(node)
        parent._children[name] = node.node_id

    def _parent_of(self, npath: str) -> DirNode | None:
        parent_path = posixpath.dirname(npath)
        try:
            return self.find_node(parent_path)
        except FileNotFoundError as err:
            raise FileNotFoundError(
                errno.ENOENT, "Parent directory does not exist", parent_path
            ) from err

    def _uncompressed_size(self, npath: str, data: bytes) -> int:
        try:
            return len(_gzip.decompress(data))
        except (OSError, EOFError, zlib.error) as err:
            log.warning(
                "gzip node %s is not a valid gzip stream (%s); using stored size",
                npath,
                err,
            )
            return len(data)

    def add_dir(self, info: NodeInfo) -> DirNode | None:
        """Add a directory node under an existing parent.

        A path outside this tree is skipped and None is returned.
        """
        npath = normalize_path(info.path)
        if npath == self._root_path:
            self._root._mod_time = info.mod_time
            return self._root
        parent = self._parent_of(npath)
        if parent is None:
            log.debug("skipping dir %s: outside tree %s", npath, self._root_path)
            return None
        node = DirNode(npath, info.mod_time)
        self.add_child(parent, node)
        log.debug("added dir node %s", npath)
        return node

    def add_file(
        self, info: NodeInfo, data: bytes, gzip: bool | None = None
    ) -> FileNode | None:
        """Add a file node holding *data*.

        ``gzip=None`` detects compression from the gzip member header. When
        ``info.size`` is 0 the size is derived from the payload. A path
        outside this tree is skipped and None is returned.
        """
        npath = normalize_path(info.path)
        if npath == self._root_path:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", npath)
        parent = self._parent_of(npath)
        if parent is None:
            log.debug("skipping file %s: outside tree %s", npath, self._root_path)
            return None
        data = bytes(data)
        is_gzip = data.startswith(GZIP_MEMBER_HEADER) if gzip is None else gzip
        size = info.size
        if not size and data:
            size = self._uncompressed_size(npath, data) if is_gzip else len(data)
        node = FileNode(npath, data, size, info.mod_time, is_gzip)
        self.add_child(parent, node)
        log.debug("added file node %s (size=%d gzip=%s)", npath, size, is_gzip)
        return node

    # -- traversal --

    def walk(self, path: str | None = None) -> Iterator[tuple[str, list[str], list[str]]]:
        """Walk the tree top-down, yielding ``(dirpath, dirnames, filenames)``.

        Names are sorted. Removing names from ``dirnames`` prunes the walk.
        """
        start = self._root if path is None else self.find(path)
        if not isinstance(start, DirNode):
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", start.path)
        yield from self._walk_dir(start)

    def _walk_dir(
        self, dir_node: DirNode
    ) -> Iterator[tuple[str, list[str], list[str]]]:
        dirnames: list[str] = []
        filenames: list[str] = []
        for child in self.child_infos(dir_node):
            if isinstance(child, DirNode):
                dirnames.append(child.name)
            else:
                filenames.append(child.name)
        yield dir_node.path, dirnames, filenames
        for name in dirnames:
            child_id = dir_node._children.get(name)
            if child_id is None:
                continue
            child = self._nodes[child_id]
            if isinstance(child, DirNode):
                yield from self._walk_dir(child)

    def stats(self) -> tuple[int, int, int, int]:
        """Return ``(dir_count, file_count, gzip_count, embedded_bytes)``."""
        dir_count = 0
        file_count = 0
        gzip_count = 0
        embedded_bytes = 0
        for node in self._nodes.values():
            if isinstance(node, DirNode):
                dir_count += 1
            else:
                file_count += 1
                embedded_bytes += len(node._data)
                if node._gzip:
                    gzip_count += 1
        return dir_count, file_count, gzip_count, embedded_bytes
