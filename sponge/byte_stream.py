"""A flow-controlled, in-order, in-memory byte stream."""

from __future__ import annotations

from sponge.buffer import BytesLike


def _as_bytes(data: BytesLike | str) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class ByteStream:
    """Bytes are written on the input side and read from the output side.

    The stream holds at most ``capacity`` unread bytes. The writer can end the
    input, after which nothing more is accepted.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 0:
            raise ValueError("ByteStream capacity must not be negative")
        self._capacity = capacity
        self._buffer = bytearray()
        self._bytes_written = 0
        self._bytes_read = 0
        self._input_ended = False
        self._error = False

    # Input side

    def write(self, data: BytesLike | str) -> int:
        """Write as many bytes of ``data`` as fit and return how many were accepted."""
        if self._input_ended:
            return 0
        raw = _as_bytes(data)
        accepted = raw[: self.remaining_capacity()]
        self._buffer.extend(accepted)
        self._bytes_written += len(accepted)
        return len(accepted)

    def remaining_capacity(self) -> int:
        """How many more bytes the stream has room for."""
        return self._capacity - len(self._buffer)

    def end_input(self) -> None:
        """Signal that the stream has reached its end."""
        self._input_ended = True

    def set_error(self) -> None:
        """Mark the stream as having suffered an error."""
        self._error = True

    # Output side

    def peek_output(self, length: int) -> bytes:
        """A copy of up to ``length`` bytes from the front of the stream."""
        return bytes(self._buffer[: max(length, 0)])

    def pop_output(self, length: int) -> None:
        """Remove up to ``length`` bytes from the front of the stream."""
        count = min(max(length, 0), len(self._buffer))
        del self._buffer[:count]
        self._bytes_read += count

    def read(self, length: int) -> bytes:
        """Copy and then remove up to ``length`` bytes from the front of the stream."""
        data = self.peek_output(length)
        self.pop_output(len(data))
        return data

    def input_ended(self) -> bool:
        """Whether the writer has ended the input."""
        return self._input_ended

    def error(self) -> bool:
        """Whether the stream has suffered an error."""
        return self._error

    def buffer_size(self) -> int:
        """The number of bytes that can currently be read."""
        return len(self._buffer)

    def buffer_empty(self) -> bool:
        """Whether there is nothing to read right now."""
        return not self._buffer

    def eof(self) -> bool:
        """Whether the input has ended and every byte has been read."""
        return self._input_ended and not self._buffer

    # Accounting

    def bytes_written(self) -> int:
        """Total number of bytes accepted."""
        return self._bytes_written

    def bytes_read(self) -> int:
        """Total number of bytes popped."""
        return self._bytes_read