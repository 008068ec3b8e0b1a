from sponge.byte_stream import ByteStream
from sponge.util import get_random_generator


def _state(bs):
    return {
        "input_ended": bs.input_ended(),
        "buffer_empty": bs.buffer_empty(),
        "eof": bs.eof(),
        "bytes_read": bs.bytes_read(),
        "bytes_written": bs.bytes_written(),
        "remaining_capacity": bs.remaining_capacity(),
        "buffer_size": bs.buffer_size(),
    }


def _expect(input_ended, buffer_empty, eof, bytes_read, bytes_written, remaining_capacity, buffer_size):
    return {
        "input_ended": input_ended,
        "buffer_empty": buffer_empty,
        "eof": eof,
        "bytes_read": bytes_read,
        "bytes_written": bytes_written,
        "remaining_capacity": remaining_capacity,
        "buffer_size": buffer_size,
    }


# construction


def test_construction():
    bs = ByteStream(15)
    assert _state(bs) == _expect(False, True, False, 0, 0, 15, 0)


def test_construction_end():
    bs = ByteStream(15)
    bs.end_input()
    assert _state(bs) == _expect(True, True, True, 0, 0, 15, 0)


# one write


def test_write_end_pop():
    bs = ByteStream(15)
    assert bs.write("cat") == 3
    assert _state(bs) == _expect(False, False, False, 0, 3, 12, 3)
    assert bs.peek_output(3) == b"cat"

    bs.end_input()
    assert _state(bs) == _expect(True, False, False, 0, 3, 12, 3)
    assert bs.peek_output(3) == b"cat"

    bs.pop_output(3)
    assert _state(bs) == _expect(True, True, True, 3, 3, 15, 0)


def test_write_pop_end():
    bs = ByteStream(15)
    bs.write(b"cat")
    assert _state(bs) == _expect(False, False, False, 0, 3, 12, 3)
    assert bs.peek_output(3) == b"cat"

    bs.pop_output(3)
    assert _state(bs) == _expect(False, True, False, 3, 3, 15, 0)

    bs.end_input()
    assert _state(bs) == _expect(True, True, True, 3, 3, 15, 0)


def test_write_pop2_end():
    bs = ByteStream(15)
    bs.write(b"cat")
    assert _state(bs) == _expect(False, False, False, 0, 3, 12, 3)
    assert bs.peek_output(3) == b"cat"

    bs.pop_output(1)
    assert _state(bs) == _expect(False, False, False, 1, 3, 13, 2)
    assert bs.peek_output(2) == b"at"

    bs.pop_output(2)
    assert _state(bs) == _expect(False, True, False, 3, 3, 15, 0)

    bs.end_input()
    assert _state(bs) == _expect(True, True, True, 3, 3, 15, 0)


# two writes


def test_write_write_end_pop_pop():
    bs = ByteStream(15)
    bs.write(b"cat")
    assert _state(bs) == _expect(False, False, False, 0, 3, 12, 3)
    assert bs.peek_output(3) == b"cat"

    bs.write(b"tac")
    assert _state(bs) == _expect(False, False, False, 0, 6, 9, 6)
    assert bs.peek_output(6) == b"cattac"

    bs.end_input()
    assert _state(bs) == _expect(True, False, False, 0, 6, 9, 6)
    assert bs.peek_output(6) == b"cattac"

    bs.pop_output(2)
    assert _state(bs) == _expect(True, False, False, 2, 6, 11, 4)
    assert bs.peek_output(4) == b"ttac"

    bs.pop_output(4)
    assert _state(bs) == _expect(True, True, True, 6, 6, 15, 0)


def test_write_pop_write_end_pop():
    bs = ByteStream(15)
    bs.write(b"cat")
    assert _state(bs) == _expect(False, False, False, 0, 3, 12, 3)
    assert bs.peek_output(3) == b"cat"

    bs.pop_output(2)
    assert _state(bs) == _expect(False, False, False, 2, 3, 14, 1)
    assert bs.peek_output(1) == b"t"

    bs.write(b"tac")
    assert _state(bs) == _expect(False, False, False, 2, 6, 11, 4)
    assert bs.peek_output(4) == b"ttac"

    bs.end_input()
    assert _state(bs) == _expect(True, False, False, 2, 6, 11, 4)
    assert bs.peek_output(4) == b"ttac"

    bs.pop_output(4)
    assert _state(bs) == _expect(True, True, True, 6, 6, 15, 0)


# capacity


def test_overwrite():
    bs = ByteStream(2)
    assert bs.write(b"cat") == 2
    assert _state(bs) == _expect(False, False, False, 0, 2, 0, 2)
    assert bs.peek_output(2) == b"ca"

    assert bs.write(b"t") == 0
    assert _state(bs) == _expect(False, False, False, 0, 2, 0, 2)
    assert bs.peek_output(2) == b"ca"


def test_overwrite_clear_overwrite():
    bs = ByteStream(2)
    assert bs.write(b"cat") == 2
    bs.pop_output(2)
    assert bs.write(b"tac") == 2
    assert _state(bs) == _expect(False, False, False, 2, 4, 0, 2)
    assert bs.peek_output(2) == b"ta"


def test_overwrite_pop_overwrite():
    bs = ByteStream(2)
    assert bs.write(b"cat") == 2
    bs.pop_output(1)
    assert bs.write(b"tac") == 1
    assert _state(bs) == _expect(False, False, False, 1, 3, 0, 2)
    assert bs.peek_output(2) == b"at"


def test_long_stream():
    bs = ByteStream(3)
    assert bs.write(b"abcdef") == 3
    assert bs.peek_output(3) == b"abc"
    bs.pop_output(1)

    rounds = ((b"abc", b"bca"), (b"bca", b"cab"), (b"cab", b"abc"))
    for _ in range(99997):
        for data, expected_peek in rounds:
            assert bs.remaining_capacity() == 1
            assert bs.buffer_size() == 2
            assert bs.write(data) == 1
            assert bs.remaining_capacity() == 0
            assert bs.peek_output(3) == expected_peek
            bs.pop_output(1)

    bs.end_input()
    assert bs.peek_output(2) == b"bc"
    bs.pop_output(2)
    assert bs.eof() is True


# many writes


def test_many_writes():
    rng = get_random_generator()
    nreps, min_write, max_write = 1000, 10, 200
    capacity = max_write * nreps
    bs = ByteStream(capacity)

    acc = 0
    for _ in range(nreps):
        size = min_write + rng.randrange(max_write - min_write)
        data = bytes(ord("a") + rng.randrange(26) for _ in range(size))
        assert bs.write(data) == size
        acc += size
        assert _state(bs) == _expect(False, False, False, 0, acc, capacity - acc, acc)


# further behaviour


def test_read_copies_and_pops():
    bs = ByteStream(10)
    bs.write(b"hello")
    assert bs.read(3) == b"hel"
    assert bs.bytes_read() == 3
    assert bs.read(10) == b"lo"
    assert bs.buffer_empty() is True


def test_write_after_end_is_refused():
    bs = ByteStream(10)
    bs.end_input()
    assert bs.write(b"abc") == 0
    assert bs.bytes_written() == 0


def test_error_flag():
    bs = ByteStream(4)
    assert bs.error() is False
    bs.set_error()
    assert bs.error() is True