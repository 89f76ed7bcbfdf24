from __future__ import annotations

import errno
import logging
import os
import posixpath
from collections.abc import Iterator

from ._exceptions import VFSMountExistsError, VFSMountNotFoundError, VFSPhysicalRootError
from ._handle import VFSFile
from ._mount import Mount
from ._node import NodeInfo
from ._path import clean_mount_path, is_within, normalize_path
from ._typing import VFSStats

log = logging.getLogger(__name__)


class VirtualFileSystem:
    """Registry of mounts addressed through one virtual path space.

    Mounts are registered once at startup with :meth:`add_mount` and never
    removed. A path is served by the mount with the longest virtual root
    that contains it, so ``/app/vendor`` takes precedence over ``/app`` for
    ``/app/vendor/lib.js`` however the mounts were registered.
    """

    def __init__(self, embedded_mode: bool = False) -> None:
        self._embedded_mode: bool = embedded_mode
        self._mounts: dict[str, Mount] = {}
        # longest virtual root first
        self._ordered: list[Mount] = []

    # -- embedded mode --

    @property
    def embedded_mode(self) -> bool:
        return self._embedded_mode

    def set_embedded_mode(self) -> None:
        """Mark the VFS as running from a single embedded artifact.

        Physical roots are then no longer required to exist.
        """
        self._embedded_mode = True
        for m in self._ordered:
            m.embedded = True
        log.debug("VFS switched to embedded mode")

    # -- mount registry --

    @property
    def mounts(self) -> list[Mount]:
        return sorted(self._mounts.values(), key=lambda m: m.virtual_root)

    def add_mount(self, mount_path: str, physical_path: str | os.PathLike[str]) -> Mount:
        pp = os.path.abspath(os.fspath(physical_path))
        if not self._embedded_mode:
            if not os.path.exists(pp):
                raise VFSPhysicalRootError(pp, errno.ENOENT)
            if not os.path.isdir(pp):
                raise VFSPhysicalRootError(pp, errno.ENOTDIR)

        mp = clean_mount_path(mount_path, pp)
        if mp in self._mounts:
            raise VFSMountExistsError(mp)

        m = Mount(mp, pp, embedded=self._embedded_mode)
        self._mounts[mp] = m
        self._ordered.append(m)
        self._ordered.sort(key=lambda mount: len(mount.virtual_root), reverse=True)
        log.debug("mounted %s -> %s", mp, pp)
        return m

    def find_mount(self, path: str) -> Mount:
        npath = normalize_path(path)
        for m in self._ordered:
            if is_within(npath, m.virtual_root):
                return m
        raise VFSMountNotFoundError(npath)

    # -- read operations --

    def open(self, path: str) -> VFSFile:
        return self.find_mount(path).open(path)

    def stat(self, path: str) -> NodeInfo:
        return self.find_mount(path).stat(path)

    def lstat(self, path: str) -> NodeInfo:
        return self.find_mount(path).lstat(path)

    def read_file(self, path: str) -> bytes:
        return self.find_mount(path).read_file(path)

    def read_dir(self, path: str) -> list[NodeInfo]:
        return self.find_mount(path).read_dir(path)

    def glob(self, pattern: str) -> list[str]:
        """Match *pattern* on the base name only, like ``filepath.Glob`` per directory."""
        dir_path = posixpath.dirname(normalize_path(pattern))
        return self.find_mount(dir_path).glob(pattern)

    def is_exists(self, path: str) -> bool:
        try:
            self.lstat(path)
        except OSError:
            return False
        return True

    def is_dir(self, path: str) -> bool:
        try:
            return self.lstat(path).is_dir
        except OSError:
            return False

    def walk(self, root: str) -> Iterator[tuple[str, list[str], list[str]]]:
        """Walk the mount owning *root* top-down; see :meth:`Mount.walk`."""
        return self.find_mount(root).walk(root)

    def dirs(self, root: str) -> list[str]:
        return [dirpath for dirpath, _, _ in self.walk(root)]

    def files(self, root: str) -> list[str]:
        return [
            posixpath.join(dirpath, name)
            for dirpath, _, filenames in self.walk(root)
            for name in filenames
        ]

    def stats(self) -> VFSStats:
        dir_count = file_count = gzip_count = embedded_bytes = 0
        for m in self._ordered:
            d, f, g, b = m.stats()
            dir_count += d
            file_count += f
            gzip_count += g
            embedded_bytes += b
        return VFSStats(
            mount_count=len(self._ordered),
            dir_count=dir_count,
            file_count=file_count,
            gzip_count=gzip_count,
            embedded_bytes=embedded_bytes,
        )
