import gzip
import io
from abc import ABC, abstractmethod

_DISCARD_CHUNK = 64 * 1024


class INodeContent(ABC):
    """Abstract read cursor over a file node's bytes.

    One instance belongs to one open handle; the node's ``bytes`` are shared
    read-only between instances.
    """

    @abstractmethod
    def read_at(self, offset: int, size: int) -> bytes: ...

    @abstractmethod
    def get_size(self) -> int: ...

    def close(self) -> None:
        return None


class PlainContent(INodeContent):
    def __init__(self, data: bytes) -> None:
        self._view = memoryview(data)

    def get_size(self) -> int:
        return len(self._view)

    def read_at(self, offset: int, size: int) -> bytes:
        if offset >= len(self._view) or size == 0:
            return b""
        if size < 0:
            return bytes(self._view[offset:])
        return bytes(self._view[offset: offset + size])

    def close(self) -> None:
        self._view.release()


class GzipContent(INodeContent):
    """Transparent reads over gzip-compressed bytes.

    The decompressor only moves forward: reading behind the current
    decompression position rewinds to the start, reading ahead discards the
    bytes in between.
    """

    def __init__(self, data: bytes, size: int) -> None:
        self._data = data
        self._size = size
        self._reader = gzip.GzipFile(fileobj=io.BytesIO(data), mode="rb")
        self._rpos = 0

    def get_size(self) -> int:
        return self._size

    def _rewind(self) -> None:
        self._reader.close()
        self._reader = gzip.GzipFile(fileobj=io.BytesIO(self._data), mode="rb")
        self._rpos = 0

    def _skip(self, count: int) -> None:
        while count > 0:
            chunk = self._reader.read(min(count, _DISCARD_CHUNK))
            if not chunk:
                break
            self._rpos += len(chunk)
            count -= len(chunk)

    def read_at(self, offset: int, size: int) -> bytes:
        if size == 0:
            return b""
        if self._rpos > offset:
            self._rewind()
        if self._rpos < offset:
            self._skip(offset - self._rpos)
        data = self._reader.read(size)
        self._rpos += len(data)
        return data

    def close(self) -> None:
        self._reader.close()
