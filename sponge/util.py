"""Error types, system-call checking, checksums and other small helpers."""

from __future__ import annotations

import os
import random
import sys
import time
from typing import Callable, TypeVar

T = TypeVar("T")

_PROGRAM_START = time.monotonic()


class TaggedError(Exception):
    """An error code plus a description of what was being attempted."""

    def __init__(self, attempt: str, code: int, message: str) -> None:
        super().__init__(f"{attempt}: {message}")
        self.attempt = attempt
        self.code = code
        self.message = message


class UnixError(TaggedError):
    """A failed system call, tagged with the call's name and its errno."""

    def __init__(self, attempt: str, error: int) -> None:
        super().__init__(attempt, error, os.strerror(error))


def system_call(attempt: str, return_value: Callable[[], T], errno_mask: int = 0) -> T | None:
    """Run the zero-argument callable ``return_value`` and return its result.

    An ``OSError`` it raises becomes a :class:`UnixError` naming ``attempt``,
    unless its errno equals ``errno_mask``, in which case ``None`` is returned.
    """
    try:
        return return_value()
    except OSError as exc:
        code = exc.errno or 0
        if errno_mask and code == errno_mask:
            return None
        raise UnixError(attempt, code) from exc


def get_random_generator() -> random.Random:
    """Return a Mersenne Twister generator seeded with plenty of OS entropy."""
    seed = int.from_bytes(os.urandom(624 * 4), "little")
    return random.Random(seed)


def timestamp_ms() -> int:
    """Milliseconds elapsed since the program started."""
    return int((time.monotonic() - _PROGRAM_START) * 1000)


class InternetChecksum:
    """The Internet (ones'-complement) checksum, returned in host order.

    Running it over data that already carries a correct checksum yields zero.
    """

    def __init__(self, initial_sum: int = 0) -> None:
        self._sum = initial_sum & 0xFFFFFFFF
        self._parity = False

    def add(self, data: bytes | bytearray | memoryview) -> None:
        """Add bytes to the running sum."""
        for byte in bytes(data):
            value = byte if self._parity else byte << 8
            self._sum = (self._sum + value) & 0xFFFFFFFF
            self._parity = not self._parity

    def value(self) -> int:
        """The 16-bit checksum of everything added so far."""
        total = self._sum
        while total > 0xFFFF:
            total = (total >> 16) + (total & 0xFFFF)
        return ~total & 0xFFFF


def _hexdump_text(data: bytes, indent: int) -> str:
    pad = " " * indent
    out: list[str] = []
    chars: list[str] = []
    for printed, byte in enumerate(data):
        if printed % 16 == 0:
            if printed:
                out.append("    " + "".join(chars) + "\n")
                chars = []
            out.append(f"{pad}{printed:08x}:    ")
        elif printed % 2 == 0:
            out.append(" ")
        out.append(f"{byte:02x}")
        chars.append(chr(byte) if 0x20 <= byte < 0x7F else ".")
    remainder = (16 - len(data) % 16) % 16
    out.append(" " * (2 * remainder + remainder // 2 + 4) + ("".join(chars) or " "))
    out.append("\n\n")
    return "".join(out)


def hexdump(data: bytes | bytearray | memoryview | str, indent: int = 0) -> None:
    """Print a hex and ASCII dump of ``data`` to standard output."""
    raw = data.encode("latin-1") if isinstance(data, str) else bytes(data)
    sys.stdout.write(_hexdump_text(raw, indent))
    sys.stdout.flush()