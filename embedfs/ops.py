"""Helpers that accept either a VFS or nothing.

Libraries consuming embedfs often take an optional filesystem argument;
passing ``None`` routes the call to the real operating system while still
returning embedfs types (:class:`VFSFile`, :class:`NodeInfo`).
"""

from __future__ import annotations

import glob as _glob
import os
from collections.abc import Iterator

from ._handle import OSFile, VFSFile, scan_physical_dir
from ._node import NodeInfo
from ._typing import FileSystem


def open(fs: FileSystem | None, name: str) -> VFSFile:  # noqa: A001
    if fs is None:
        return OSFile(name, name)
    return fs.open(name)


def stat(fs: FileSystem | None, name: str) -> NodeInfo:
    if fs is None:
        return NodeInfo.from_stat(name, os.stat(name))
    return fs.stat(name)


def lstat(fs: FileSystem | None, name: str) -> NodeInfo:
    if fs is None:
        return NodeInfo.from_stat(name, os.lstat(name))
    return fs.lstat(name)


def read_file(fs: FileSystem | None, name: str) -> bytes:
    if fs is None:
        with OSFile(name, name) as f:
            return f.read()
    return fs.read_file(name)


def read_dir(fs: FileSystem | None, name: str) -> list[NodeInfo]:
    if fs is None:
        return scan_physical_dir(name, name)
    return fs.read_dir(name)


def glob(fs: FileSystem | None, pattern: str) -> list[str]:
    if fs is None:
        return sorted(_glob.glob(pattern, include_hidden=True))
    return fs.glob(pattern)


def is_exists(fs: FileSystem | None, name: str) -> bool:
    if fs is None:
        return os.path.lexists(name)
    return fs.is_exists(name)


def is_dir(fs: FileSystem | None, name: str) -> bool:
    try:
        return lstat(fs, name).is_dir
    except OSError:
        return False


def walk(fs: FileSystem | None, root: str) -> Iterator[tuple[str, list[str], list[str]]]:
    if fs is not None:
        yield from fs.walk(root)
        return
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        filenames.sort()
        yield dirpath, dirnames, filenames
