"""Parsing and serialising big-endian integers in network packets."""

from __future__ import annotations

from enum import IntEnum

from sponge.buffer import Buffer, BytesLike


class ParseResult(IntEnum):
    """Outcome of parsing a datagram, segment, frame or message; falsy on success."""

    NO_ERROR = 0
    BAD_CHECKSUM = 1
    PACKET_TOO_SHORT = 2
    WRONG_IP_VERSION = 3
    HEADER_TOO_SHORT = 4
    TRUNCATED_PACKET = 5
    UNSUPPORTED = 6


_NAMES = {
    ParseResult.NO_ERROR: "NoError",
    ParseResult.BAD_CHECKSUM: "BadChecksum",
    ParseResult.PACKET_TOO_SHORT: "PacketTooShort",
    ParseResult.WRONG_IP_VERSION: "WrongIPVersion",
    ParseResult.HEADER_TOO_SHORT: "HeaderTooShort",
    ParseResult.TRUNCATED_PACKET: "TruncatedPacket",
    ParseResult.UNSUPPORTED: "Unsupported",
}


def as_string(r: ParseResult) -> str:
    """A readable name for a ParseResult."""
    return _NAMES[ParseResult(r)]


class NetParser:
    """Reads big-endian integers from the front of a buffer.

    Running out of data sets ``error`` to ``PACKET_TOO_SHORT``; once an error
    is set, reads return 0 and consume nothing.
    """

    def __init__(self, buffer: Buffer | BytesLike | str) -> None:
        self._buffer = buffer._clone() if isinstance(buffer, Buffer) else Buffer(buffer)
        self.error = ParseResult.NO_ERROR

    @property
    def buffer(self) -> Buffer:
        """The data not yet parsed."""
        return self._buffer._clone()

    def _check_size(self, size: int) -> None:
        if size > len(self._buffer):
            self.error = ParseResult.PACKET_TOO_SHORT

    def _parse_int(self, length: int) -> int:
        self._check_size(length)
        if self.error:
            return 0
        value = int.from_bytes(self._buffer.view[:length], "big")
        self._buffer.remove_prefix(length)
        return value

    def u32(self) -> int:
        """Parse a 32-bit integer in network byte order."""
        return self._parse_int(4)

    def u16(self) -> int:
        """Parse a 16-bit integer in network byte order."""
        return self._parse_int(2)

    def u8(self) -> int:
        """Parse an 8-bit integer."""
        return self._parse_int(1)

    def remove_prefix(self, n: int) -> None:
        """Skip ``n`` bytes."""
        self._check_size(n)
        if self.error:
            return
        self._buffer.remove_prefix(n)


class NetUnparser:
    """Appends big-endian integers to a bytearray; values are truncated to the field width."""

    @staticmethod
    def _unparse_int(s: bytearray, val: int, length: int) -> None:
        s.extend((val & ((1 << (8 * length)) - 1)).to_bytes(length, "big"))

    @staticmethod
    def u32(s: bytearray, val: int) -> None:
        """Append a 32-bit integer in network byte order."""
        NetUnparser._unparse_int(s, val, 4)

    @staticmethod
    def u16(s: bytearray, val: int) -> None:
        """Append a 16-bit integer in network byte order."""
        NetUnparser._unparse_int(s, val, 2)

    @staticmethod
    def u8(s: bytearray, val: int) -> None:
        """Append an 8-bit integer."""
        NetUnparser._unparse_int(s, val, 1)