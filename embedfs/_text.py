"""VFSTextHandle: read-only text helper.

Wraps a :class:`VFSFile` for callers such as template/view loaders that
want ``str`` instead of ``bytes``. Works the same for tree-backed and
disk-backed handles, and for gzip nodes (bytes arrive decompressed).
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ._handle import VFSFile


class VFSTextHandle:
    """Bufferless text reader over a VFS handle.

    Parameters
    ----------
    handle:
        Handle obtained from ``VirtualFileSystem.open()``.
    encoding:
        Text encoding (default ``"utf-8"``).
    errors:
        Decode error handling (default ``"strict"``).

    Example
    -------
    >>> with vfs.open("/views/index.html") as f:
    ...     for line in VFSTextHandle(f):
    ...         print(line, end="")
    """

    def __init__(
        self,
        handle: VFSFile,
        encoding: str = "utf-8",
        errors: str = "strict",
    ) -> None:
        self._handle = handle
        self._encoding = encoding
        self._errors = errors

    @property
    def encoding(self) -> str:
        """Text encoding."""
        return self._encoding

    @property
    def errors(self) -> str:
        """Decode error handling."""
        return self._errors

    @property
    def name(self) -> str:
        return self._handle.name

    def read(self, size: int = -1) -> str:
        """Read bytes and decode them.

        Parameters
        ----------
        size:
            Maximum number of bytes to read. ``-1`` reads everything.
        """
        if size < 0:
            raw = self._handle.read()
        else:
            raw = self._handle.read(size)
        return raw.decode(self._encoding, self._errors)

    def readline(self, limit: int = -1) -> str:
        """Read one line.

        Recognizes ``\\n``, ``\\r\\n``, and bare ``\\r`` as line endings.

        Parameters
        ----------
        limit:
            Maximum number of bytes to read (``-1`` means unlimited).
        """
        buf = bytearray()
        while True:
            if limit >= 0 and len(buf) >= limit:
                break
            b = self._handle.read(1)
            if not b:
                break
            buf.extend(b)
            if b == b"\n":
                break
            if b == b"\r":
                # Peek at the next byte to determine \r\n vs bare \r
                next_b = self._handle.read(1)
                if next_b == b"\n":
                    buf.extend(next_b)
                elif next_b:
                    self._handle.seek(self._handle.tell() - 1)
                break
        return buf.decode(self._encoding, self._errors)

    def readlines(self) -> list[str]:
        return list(self)

    def __iter__(self) -> Iterator[str]:
        """Line iterator."""
        return self

    def __next__(self) -> str:
        line = self.readline()
        if not line:
            raise StopIteration
        return line

    def __enter__(self) -> VFSTextHandle:
        return self

    def __exit__(self, *args: object) -> None:
        # The handle belongs to the caller's ``with vfs.open(...)`` block
        pass
