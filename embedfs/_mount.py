from __future__ import annotations

import errno
import fnmatch
import glob as _glob
import logging
import os
import posixpath
from collections.abc import Iterator
from datetime import datetime, timezone

from ._exceptions import VFSInvalidPathError, VFSPhysicalRootError
from ._handle import NodeFile, OSFile, VFSFile, scan_physical_dir
from ._node import DirNode, FileNode, Node, NodeInfo, NodeTree
from ._path import is_within, normalize_path

log = logging.getLogger(__name__)


def _physical_error(err: OSError, npath: str) -> OSError:
    """Rebuild an OS error so it names the virtual path, not the physical one."""
    code = err.errno if err.errno is not None else errno.EIO
    return type(err)(code, err.strerror or os.strerror(code), npath)


class Mount:
    """One virtual root bound to one physical directory plus an embedded tree.

    Every query checks the in-memory tree first. Only genuine absence from
    the tree (a tree-miss) falls back to the physical directory; invalid
    paths and file/directory mismatches inside the tree are raised as-is.
    A mount whose tree has no children serves everything from disk.
    """

    def __init__(
        self, virtual_root: str, physical_root: str, embedded: bool = False
    ) -> None:
        self._vroot: str = normalize_path(virtual_root)
        self._proot: str = os.path.normpath(physical_root)
        self._tree = NodeTree(self._vroot, datetime.now(timezone.utc))
        self.embedded: bool = embedded

    @property
    def virtual_root(self) -> str:
        return self._vroot

    @property
    def physical_root(self) -> str:
        return self._proot

    @property
    def tree(self) -> NodeTree:
        return self._tree

    def __repr__(self) -> str:
        return f"Mount(virtual_root={self._vroot!r}, physical_root={self._proot!r})"

    def is_tree_empty(self) -> bool:
        return self._tree.is_empty()

    # -- path translation --

    def _np(self, path: str) -> str:
        npath = normalize_path(path)
        if not is_within(npath, self._vroot):
            raise VFSInvalidPathError(npath, f"outside mount '{self._vroot}'")
        return npath

    def to_physical_path(self, path: str) -> str:
        npath = self._np(path)
        rel = npath[len(self._vroot):].lstrip("/")
        if not rel:
            return self._proot
        return os.path.join(self._proot, *rel.split("/"))

    def to_virtual_path(self, physical_path: str) -> str:
        rel = os.path.relpath(os.path.normpath(physical_path), self._proot)
        if rel == os.curdir:
            return self._vroot
        if rel == os.pardir or rel.startswith(os.pardir + os.sep):
            raise VFSInvalidPathError(
                physical_path, f"outside physical root '{self._proot}'"
            )
        return posixpath.join(self._vroot, rel.replace(os.sep, "/"))

    # -- lookup --

    def _lookup(self, npath: str) -> Node | None:
        """Return the tree node for *npath*, or None on a tree-miss."""
        if self._tree.is_empty():
            return None
        try:
            return self._tree.find(npath)
        except FileNotFoundError:
            return None

    def open(self, path: str) -> VFSFile:
        npath = self._np(path)
        node = self._lookup(npath)
        if node is not None:
            return NodeFile(self._tree, node)
        try:
            return OSFile(npath, self.to_physical_path(npath))
        except OSError as err:
            raise _physical_error(err, npath) from err

    def stat(self, path: str) -> NodeInfo:
        npath = self._np(path)
        node = self._lookup(npath)
        if node is not None:
            return node
        try:
            return NodeInfo.from_stat(npath, os.stat(self.to_physical_path(npath)))
        except OSError as err:
            raise _physical_error(err, npath) from err

    def lstat(self, path: str) -> NodeInfo:
        npath = self._np(path)
        node = self._lookup(npath)
        if node is not None:
            return node
        try:
            return NodeInfo.from_stat(npath, os.lstat(self.to_physical_path(npath)))
        except OSError as err:
            raise _physical_error(err, npath) from err

    def is_exists(self, path: str) -> bool:
        try:
            self.lstat(path)
        except OSError:
            return False
        return True

    def read_file(self, path: str) -> bytes:
        with self.open(path) as f:
            if f.stat().is_dir:
                raise IsADirectoryError(errno.EISDIR, "Is a directory", f.name)
            return f.read()

    def read_dir(self, path: str) -> list[NodeInfo]:
        npath = self._np(path)
        node = self._lookup(npath)
        if node is not None:
            if isinstance(node, FileNode):
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", npath)
            return list(self._tree.child_infos(node))
        try:
            return scan_physical_dir(npath, self.to_physical_path(npath))
        except OSError as err:
            raise _physical_error(err, npath) from err

    def glob(self, pattern: str) -> list[str]:
        """Match the base-name *pattern* against the entries of its directory.

        Returned paths are virtual and sorted, whether they came from the
        tree or from disk.
        """
        npattern = normalize_path(pattern)
        dir_path, base = posixpath.split(npattern)
        if not base or not is_within(dir_path, self._vroot):
            return []
        try:
            node = self._lookup(dir_path)
        except NotADirectoryError:
            return []
        if node is not None:
            if not isinstance(node, DirNode):
                return []
            return [
                child.path
                for child in self._tree.child_infos(node)
                if fnmatch.fnmatchcase(child.name, base)
            ]
        physical_dir = self.to_physical_path(dir_path)
        matches = _glob.glob(
            os.path.join(_glob.escape(physical_dir), base), include_hidden=True
        )
        return sorted(self.to_virtual_path(m) for m in matches)

    def walk(self, path: str | None = None) -> Iterator[tuple[str, list[str], list[str]]]:
        """Walk top-down from *path* (the mount root by default).

        Yields ``(dirpath, dirnames, filenames)`` with virtual paths and
        sorted names, from the tree when the start directory is embedded and
        from disk otherwise.
        """
        npath = self._vroot if path is None else self._np(path)
        node = self._lookup(npath)
        if node is not None:
            yield from self._tree.walk(npath)
            return
        yield from self._walk_physical(npath)

    def _walk_physical(self, npath: str) -> Iterator[tuple[str, list[str], list[str]]]:
        physical = self.to_physical_path(npath)
        if not os.path.isdir(physical):
            if os.path.lexists(physical):
                raise NotADirectoryError(errno.ENOTDIR, "Not a directory", npath)
            raise FileNotFoundError(errno.ENOENT, "No such file or directory", npath)
        for dirpath, dirnames, filenames in os.walk(physical):
            dirnames.sort()
            filenames.sort()
            yield self.to_virtual_path(dirpath), dirnames, filenames

    # -- build phase --

    def _assert_physical_root(self) -> None:
        if self.embedded:
            return
        if not os.path.isdir(self._proot):
            code = errno.ENOTDIR if os.path.exists(self._proot) else errno.ENOENT
            raise VFSPhysicalRootError(self._proot, code)

    def add_dir(self, info: NodeInfo) -> DirNode | None:
        self._assert_physical_root()
        return self._tree.add_dir(info)

    def add_file(
        self, info: NodeInfo, data: bytes, gzip: bool | None = None
    ) -> FileNode | None:
        self._assert_physical_root()
        return self._tree.add_file(info, data, gzip)

    def stats(self) -> tuple[int, int, int, int]:
        return self._tree.stats()
