from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, Protocol, TypedDict, runtime_checkable

if TYPE_CHECKING:
    from ._handle import VFSFile
    from ._node import NodeInfo


class VFSStats(TypedDict):
    mount_count: int
    dir_count: int
    file_count: int
    gzip_count: int
    embedded_bytes: int


@runtime_checkable
class FileSystem(Protocol):
    """Read-only filesystem contract shared by ``VirtualFileSystem`` and ``Mount``.

    Paths are slash-separated virtual paths regardless of the host
    operating system convention.
    """

    def open(self, path: str) -> VFSFile: ...

    def stat(self, path: str) -> NodeInfo: ...

    def lstat(self, path: str) -> NodeInfo: ...

    def read_file(self, path: str) -> bytes: ...

    def read_dir(self, path: str) -> list[NodeInfo]: ...

    def glob(self, pattern: str) -> list[str]: ...

    def is_exists(self, path: str) -> bool: ...

    def walk(self, path: str) -> Iterator[tuple[str, list[str], list[str]]]: ...
