"""Reference-counted handles to kernel file descriptors."""

from __future__ import annotations

import os
import sys

from sponge.buffer import Buffer, BufferList, BufferViewList, BytesLike
from sponge.util import system_call

_MAX_READ = 1024 * 1024


class _FDWrapper:
    """Owns a kernel file descriptor and closes it when no longer referenced."""

    __slots__ = ("fd", "eof", "closed", "read_count", "write_count")

    def __init__(self, fd: int) -> None:
        if fd < 0:
            raise ValueError(f"invalid fd number:{fd}")
        self.fd = fd
        self.eof = False
        self.closed = False
        self.read_count = 0
        self.write_count = 0

    def close(self) -> None:
        system_call("close", lambda: os.close(self.fd))
        self.eof = self.closed = True

    def __del__(self) -> None:
        if getattr(self, "closed", True):
            return
        try:
            self.close()
        except Exception as exc:  # never raise from a finaliser
            print(f"Exception destructing FDWrapper: {exc}", file=sys.stderr)


class FileDescriptor:
    """A handle to a file descriptor, shared between duplicates.

    It tracks EOF and counts reads and writes, which the event loop uses to
    detect busy waiting. The descriptor is closed when the last handle goes
    away, or explicitly with :meth:`close`.
    """

    def __init__(self, fd: int | FileDescriptor) -> None:
        if isinstance(fd, FileDescriptor):
            self._internal_fd = fd._internal_fd
        else:
            self._internal_fd = _FDWrapper(fd)

    def __enter__(self) -> FileDescriptor:
        return self

    def __exit__(self, *exc_info: object) -> None:
        if not self.closed():
            self.close()

    def _register_read(self) -> None:
        self._internal_fd.read_count += 1

    def _register_write(self) -> None:
        self._internal_fd.write_count += 1

    def read(self, limit: int | None = None) -> bytes:
        """Read up to ``limit`` bytes (at most 1 MiB); fewer may be returned."""
        size = _MAX_READ if limit is None else min(_MAX_READ, limit)
        if size < 0:
            raise ValueError("read limit must not be negative")
        data = system_call("read", lambda: os.read(self.fd_num(), size))
        if size > 0 and not data:
            self._internal_fd.eof = True
        if len(data) > size:
            raise RuntimeError("read() read more than requested")
        self._register_read()
        return data

    def write(self, data: BufferViewList | BufferList | Buffer | BytesLike | str, write_all: bool = True) -> int:
        """Write ``data``; with ``write_all``, keep going until all of it is written.

        Returns the number of bytes written.
        """
        buffer = data if isinstance(data, BufferViewList) else BufferViewList(data)
        total = 0
        while True:
            iovecs = buffer.as_iovecs() or [b""]
            remaining = len(buffer)
            written = system_call("writev", lambda: os.writev(self.fd_num(), iovecs))
            if written == 0 and remaining:
                raise RuntimeError("write returned 0 given non-empty input buffer")
            if written > remaining:
                raise RuntimeError("write wrote more than length of input buffer")
            self._register_write()
            buffer.remove_prefix(written)
            total += written
            if not (write_all and len(buffer)):
                return total

    def close(self) -> None:
        """Close the underlying descriptor (for every duplicate)."""
        self._internal_fd.close()

    def duplicate(self) -> FileDescriptor:
        """Another handle on the same descriptor."""
        return FileDescriptor(self)

    def set_blocking(self, blocking_state: bool) -> None:
        """Make the descriptor blocking (True) or non-blocking (False)."""
        system_call("fcntl", lambda: os.set_blocking(self.fd_num(), blocking_state))

    def fd_num(self) -> int:
        """The kernel's descriptor number."""
        return self._internal_fd.fd

    def eof(self) -> bool:
        """Whether a read has hit end of file (or the descriptor is closed)."""
        return self._internal_fd.eof

    def closed(self) -> bool:
        """Whether the descriptor has been closed."""
        return self._internal_fd.closed

    def read_count(self) -> int:
        """How many times the descriptor has been read."""
        return self._internal_fd.read_count

    def write_count(self) -> int:
        """How many times the descriptor has been written."""
        return self._internal_fd.write_count