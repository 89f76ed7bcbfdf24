from __future__ import annotations

import errno
import os
import posixpath
import warnings
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from ._file import GzipContent, INodeContent, PlainContent
from ._node import DirNode, NodeInfo

if TYPE_CHECKING:
    from ._node import Node, NodeTree


def scan_physical_dir(virtual_path: str, physical_path: str) -> list[NodeInfo]:
    """List a disk directory as NodeInfos carrying virtual paths, sorted by name."""
    infos: list[NodeInfo] = []
    with os.scandir(physical_path) as it:
        for entry in it:
            try:
                st = entry.stat()
            except FileNotFoundError:
                # dangling symlink
                st = entry.stat(follow_symlinks=False)
            infos.append(NodeInfo.from_stat(posixpath.join(virtual_path, entry.name), st))
    infos.sort(key=lambda info: info.name)
    return infos


class VFSFile(ABC):
    """Read-only handle over a tree node or a disk file/directory.

    Callers use the same contract regardless of origin: ``read``/``seek``/
    ``tell`` for files, ``readdir``/``readdirnames`` for directories,
    ``stat`` for both. A handle keeps its own cursor and must not be shared
    between threads.
    """

    def __init__(self, path: str, is_dir: bool) -> None:
        self._path = path
        self._is_dir = is_dir
        self._is_closed: bool = False
        self._dir_entries: list[NodeInfo] | None = None
        self._dir_cursor: int = 0

    @property
    def name(self) -> str:
        return self._path

    @property
    def closed(self) -> bool:
        return self._is_closed

    def _assert_open(self) -> None:
        if self._is_closed:
            raise ValueError("I/O operation on closed file.")

    def _assert_file(self) -> None:
        if self._is_dir:
            raise IsADirectoryError(errno.EISDIR, "Is a directory", self._path)

    @abstractmethod
    def stat(self) -> NodeInfo: ...

    @abstractmethod
    def read(self, size: int = -1) -> bytes: ...

    @abstractmethod
    def seek(self, offset: int, whence: int = 0) -> int: ...

    @abstractmethod
    def tell(self) -> int: ...

    @abstractmethod
    def _list_dir(self) -> list[NodeInfo]: ...

    @abstractmethod
    def _close(self) -> None: ...

    def readdir(self, n: int = -1) -> list[NodeInfo]:
        """Return up to *n* directory entries (all remaining when ``n <= 0``).

        Entries are sorted by name; repeated calls continue where the
        previous one stopped.
        """
        self._assert_open()
        if not self._is_dir:
            raise NotADirectoryError(errno.ENOTDIR, "Not a directory", self._path)
        if self._dir_entries is None:
            self._dir_entries = self._list_dir()
        remaining = self._dir_entries[self._dir_cursor:]
        if n > 0:
            remaining = remaining[:n]
        self._dir_cursor += len(remaining)
        return remaining

    def readdirnames(self, n: int = -1) -> list[str]:
        return [info.name for info in self.readdir(n)]

    def is_gzip(self) -> bool:
        return False

    def raw_bytes(self) -> bytes:
        return b""

    def readable(self) -> bool:
        self._assert_open()
        return not self._is_dir

    def seekable(self) -> bool:
        self._assert_open()
        return not self._is_dir

    def close(self) -> None:
        if self._is_closed:
            return
        self._is_closed = True
        self._close()

    def __enter__(self) -> VFSFile:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def __del__(self) -> None:
        if not getattr(self, "_is_closed", True):
            warnings.warn(
                f"VFS file handle '{self._path}' was not closed. "
                "Always use 'with vfs.open(...) as f:' or call close().",
                ResourceWarning,
                stacklevel=1,
            )


class NodeFile(VFSFile):
    """Handle over an in-memory tree node; gzip nodes are decompressed on read."""

    def __init__(self, tree: NodeTree, node: Node) -> None:
        super().__init__(node.path, isinstance(node, DirNode))
        self._tree = tree
        self._node = node
        self._cursor: int = 0
        self._content: INodeContent | None = None
        if not isinstance(node, DirNode):
            if node.gzip:
                self._content = GzipContent(node.data, node.size)
            else:
                self._content = PlainContent(node.data)

    @property
    def node(self) -> Node:
        return self._node

    def stat(self) -> NodeInfo:
        self._assert_open()
        return self._node

    def read(self, size: int = -1) -> bytes:
        self._assert_open()
        self._assert_file()
        content = self._content
        assert content is not None
        total = content.get_size()
        if self._cursor >= total:
            return b""
        if size < 0:
            data = content.read_at(self._cursor, -1)
        else:
            data = content.read_at(self._cursor, min(size, total - self._cursor))
        self._cursor += len(data)
        return data

    def seek(self, offset: int, whence: int = 0) -> int:
        self._assert_open()
        self._assert_file()
        assert self._content is not None
        size = self._content.get_size()
        if whence == os.SEEK_SET:
            new_pos = offset
        elif whence == os.SEEK_CUR:
            new_pos = self._cursor + offset
        elif whence == os.SEEK_END:
            new_pos = size + offset
        else:
            raise ValueError(f"Invalid whence value: {whence}. Must be 0, 1, or 2.")
        if new_pos < 0:
            raise ValueError(f"Resulting cursor position {new_pos} is negative.")
        if new_pos > size:
            raise ValueError(
                f"Cannot seek to {new_pos}: beyond content length {size}."
            )
        self._cursor = new_pos
        return self._cursor

    def tell(self) -> int:
        self._assert_open()
        return self._cursor

    def _list_dir(self) -> list[NodeInfo]:
        assert isinstance(self._node, DirNode)
        return list(self._tree.child_infos(self._node))

    def is_gzip(self) -> bool:
        return self._node.is_gzip()

    def raw_bytes(self) -> bytes:
        return self._node.raw_bytes()

    def _close(self) -> None:
        if self._content is not None:
            self._content.close()


class OSFile(VFSFile):
    """Handle over a file or directory on the host filesystem."""

    def __init__(self, path: str, physical_path: str) -> None:
        is_dir = os.path.isdir(physical_path)
        self._fp = None if is_dir else open(physical_path, "rb")
        super().__init__(path, is_dir)
        self._physical_path = physical_path

    @property
    def physical_path(self) -> str:
        return self._physical_path

    def stat(self) -> NodeInfo:
        self._assert_open()
        if self._fp is None:
            return NodeInfo.from_stat(self._path, os.stat(self._physical_path))
        return NodeInfo.from_stat(self._path, os.fstat(self._fp.fileno()))

    def read(self, size: int = -1) -> bytes:
        self._assert_open()
        self._assert_file()
        assert self._fp is not None
        return self._fp.read(size)

    def seek(self, offset: int, whence: int = 0) -> int:
        self._assert_open()
        self._assert_file()
        assert self._fp is not None
        return self._fp.seek(offset, whence)

    def tell(self) -> int:
        self._assert_open()
        if self._fp is None:
            return 0
        return self._fp.tell()

    def _list_dir(self) -> list[NodeInfo]:
        return scan_physical_dir(self._path, self._physical_path)

    def raw_bytes(self) -> bytes:
        self._assert_open()
        if self._fp is None:
            return b""
        with open(self._physical_path, "rb") as f:
            return f.read()

    def _close(self) -> None:
        if self._fp is not None:
            self._fp.close()
