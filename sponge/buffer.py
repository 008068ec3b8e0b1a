"""Read-only byte buffers that can cheaply drop bytes from the front."""

from __future__ import annotations

from collections import deque
from typing import Iterable, Union

BytesLike = Union[bytes, bytearray, memoryview]


def _to_bytes(data: BytesLike | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class Buffer:
    """An immutable byte string that can discard bytes from the front without copying."""

    __slots__ = ("_storage", "_offset")

    def __init__(self, data: BytesLike | str = b"") -> None:
        self._storage = _to_bytes(data)
        self._offset = 0

    @property
    def view(self) -> memoryview:
        """The remaining bytes, without copying."""
        return memoryview(self._storage)[self._offset:]

    def __len__(self) -> int:
        return len(self._storage) - self._offset

    def __bytes__(self) -> bytes:
        return self.copy()

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Buffer):
            return self.view == other.view
        if isinstance(other, (bytes, bytearray, memoryview)):
            return self.view == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"Buffer({self.copy()!r})"

    def _clone(self) -> Buffer:
        clone = Buffer.__new__(Buffer)
        clone._storage = self._storage
        clone._offset = self._offset
        return clone

    def at(self, n: int) -> int:
        """The byte at position ``n``."""
        if not 0 <= n < len(self):
            raise IndexError("Buffer.at")
        return self._storage[self._offset + n]

    def copy(self) -> bytes:
        """A fresh copy of the remaining bytes."""
        return self._storage[self._offset:]

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes."""
        if n < 0 or n > len(self):
            raise IndexError("Buffer::remove_prefix")
        self._offset += n
        if self._offset == len(self._storage):
            self._storage = b""
            self._offset = 0


class BufferList:
    """A discontiguous byte string made of a queue of :class:`Buffer` objects."""

    def __init__(self, data: Buffer | BytesLike | str | None = None) -> None:
        self._buffers: deque[Buffer] = deque()
        if isinstance(data, Buffer):
            self._buffers.append(data._clone())
        elif data is not None:
            self._buffers.append(Buffer(data))

    @property
    def buffers(self) -> tuple[Buffer, ...]:
        """The underlying buffers, in order."""
        return tuple(self._buffers)

    def append(self, other: BufferList | Buffer | BytesLike | str) -> None:
        """Append the buffers of another list (or a single piece of data)."""
        if not isinstance(other, BufferList):
            other = BufferList(other)
        self._buffers.extend(buf._clone() for buf in other._buffers)

    def to_buffer(self) -> Buffer:
        """Return the contents as one Buffer; only possible with at most one buffer."""
        if not self._buffers:
            return Buffer()
        if len(self._buffers) == 1:
            return self._buffers[0]._clone()
        raise ValueError(
            "BufferList: please use concatenate() to combine a multi-Buffer BufferList into one Buffer"
        )

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the buffers."""
        while n > 0:
            if not self._buffers:
                raise IndexError("BufferList::remove_prefix")
            front = self._buffers[0]
            if n < len(front):
                front.remove_prefix(n)
                n = 0
            else:
                n -= len(front)
                self._buffers.popleft()

    def __len__(self) -> int:
        return sum(len(buf) for buf in self._buffers)

    def __bytes__(self) -> bytes:
        return self.concatenate()

    def concatenate(self) -> bytes:
        """Copy all the bytes into one string."""
        return b"".join(buf.view for buf in self._buffers)


class BufferViewList:
    """A non-owning view of a discontiguous byte string."""

    def __init__(self, source: BufferList | Buffer | BytesLike | str) -> None:
        self._views: deque[memoryview] = deque()
        if isinstance(source, BufferList):
            pieces: Iterable[memoryview] = (buf.view for buf in source.buffers)
        elif isinstance(source, Buffer):
            pieces = (source.view,)
        elif isinstance(source, str):
            pieces = (memoryview(source.encode("utf-8")),)
        else:
            pieces = (memoryview(source).cast("B"),)
        self._views.extend(pieces)

    def remove_prefix(self, n: int) -> None:
        """Discard the first ``n`` bytes across the views."""
        while n > 0:
            if not self._views:
                raise IndexError("BufferListView::remove_prefix")
            front = self._views[0]
            if n < len(front):
                self._views[0] = front[n:]
                n = 0
            else:
                n -= len(front)
                self._views.popleft()

    def __len__(self) -> int:
        return sum(len(view) for view in self._views)

    def as_iovecs(self) -> list[memoryview]:
        """The views as a list suitable for ``os.writev`` or ``socket.sendmsg``."""
        return list(self._views)