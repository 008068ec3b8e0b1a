import errno
import random

import pytest

from sponge.util import (
    InternetChecksum,
    TaggedError,
    UnixError,
    get_random_generator,
    hexdump,
    system_call,
    timestamp_ms,
)


def _raise(code):
    def call():
        raise OSError(code, "boom")

    return call


def test_system_call_returns_result():
    assert system_call("open", lambda: 7) == 7


def test_system_call_wraps_oserror():
    with pytest.raises(UnixError) as info:
        system_call("open", _raise(errno.ENOENT))
    assert info.value.code == errno.ENOENT
    assert info.value.attempt == "open"
    assert str(info.value).startswith("open: ")


def test_unix_error_is_tagged_error():
    with pytest.raises(TaggedError):
        system_call("read", _raise(errno.EBADF))


def test_system_call_masked_errno_returns_none():
    assert system_call("read", _raise(errno.EAGAIN), errno.EAGAIN) is None


def test_system_call_other_errno_not_masked():
    with pytest.raises(UnixError) as info:
        system_call("read", _raise(errno.EBADF), errno.EAGAIN)
    assert info.value.code == errno.EBADF


def test_random_generator_independent_streams():
    first = get_random_generator()
    second = get_random_generator()
    assert isinstance(first, random.Random)
    assert first.getrandbits(256) != second.getrandbits(256)


def test_timestamp_is_monotonic():
    before = timestamp_ms()
    after = timestamp_ms()
    assert 0 <= before <= after


def test_checksum_of_ipv4_header():
    header = bytes.fromhex("450000730000400040110000c0a80001c0a800c7")
    checksum = InternetChecksum()
    checksum.add(header)
    assert checksum.value() == 0xB861


def test_checksum_verifies_to_zero():
    header = bytearray.fromhex("450000730000400040110000c0a80001c0a800c7")
    checksum = InternetChecksum()
    checksum.add(header)
    header[10:12] = checksum.value().to_bytes(2, "big")
    verify = InternetChecksum()
    verify.add(header)
    assert verify.value() == 0


def test_checksum_split_adds_match_single_add():
    data = b"an odd-length piece of data!"
    whole = InternetChecksum()
    whole.add(data)
    parts = InternetChecksum()
    parts.add(data[:5])
    parts.add(data[5:])
    assert whole.value() == parts.value()


def test_checksum_empty_is_all_ones():
    assert InternetChecksum().value() == 0xFFFF


def test_hexdump_two_lines(capsys):
    hexdump(b"abcdefghijklmnopq")
    out = capsys.readouterr().out
    lines = out.split("\n")
    assert lines[0].startswith("00000000:    6162 6364")
    assert lines[0].endswith("    abcdefghijklmnop")
    assert lines[1].startswith("00000010:    71")
    assert lines[1].endswith("q")
    assert out.endswith("\n\n")


def test_hexdump_indent_and_unprintable(capsys):
    hexdump(b"\x00A", indent=2)
    out = capsys.readouterr().out
    assert out.startswith("  00000000:    0041")
    assert out.rstrip("\n").endswith(".A")