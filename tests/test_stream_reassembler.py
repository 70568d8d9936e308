import random

import pytest

from sponge.stream_reassembler import StreamReassembler


def _available(reassembler, expected: bytes) -> None:
    stream = reassembler.stream_out
    assert stream.buffer_size == len(expected)
    assert stream.read(len(expected)) == expected


def _assembled(reassembler) -> int:
    return reassembler.stream_out.bytes_written


# capacity cases


def test_cap_sequential_reads():
    r = StreamReassembler(2)
    r.push_substring(b"ab", 0)
    assert _assembled(r) == 2
    _available(r, b"ab")
    r.push_substring(b"cd", 2)
    assert _assembled(r) == 4
    _available(r, b"cd")
    r.push_substring(b"ef", 4)
    assert _assembled(r) == 6
    _available(r, b"ef")


def test_cap_full_output_drops_then_accepts():
    r = StreamReassembler(2)
    r.push_substring(b"ab", 0)
    assert _assembled(r) == 2
    r.push_substring(b"cd", 2)
    assert _assembled(r) == 2
    _available(r, b"ab")
    assert _assembled(r) == 2
    r.push_substring(b"cd", 2)
    assert _assembled(r) == 4
    _available(r, b"cd")


def test_cap_truncates_beyond_window():
    r = StreamReassembler(2)
    r.push_substring(b"bX", 1)
    assert _assembled(r) == 0
    r.push_substring(b"a", 0)
    assert _assembled(r) == 2
    _available(r, b"ab")


def test_cap_one():
    r = StreamReassembler(1)
    r.push_substring(b"ab", 0)
    assert _assembled(r) == 1
    r.push_substring(b"ab", 0)
    assert _assembled(r) == 1
    _available(r, b"a")
    assert _assembled(r) == 1
    r.push_substring(b"abc", 0)
    assert _assembled(r) == 2
    _available(r, b"b")
    assert _assembled(r) == 2


def test_cap_eof_after_gap():
    r = StreamReassembler(8)
    r.push_substring(b"a", 0)
    assert _assembled(r) == 1
    _available(r, b"a")
    assert not r.stream_out.eof
    r.push_substring(b"bc", 1)
    assert _assembled(r) == 3
    assert not r.stream_out.eof
    r.push_substring(b"ghi", 6, eof=True)
    assert _assembled(r) == 3
    assert not r.stream_out.eof
    r.push_substring(b"cdefg", 2)
    assert _assembled(r) == 9
    _available(r, b"bcdefghi")
    assert r.stream_out.eof


def test_cap_many_small_windows():
    r = StreamReassembler(3)
    for i in range(0, 99997, 3):
        segment = bytes((i + k) % 256 for k in (0, 1, 2, 13, 47, 9))
        r.push_substring(segment, i)
        assert _assembled(r) == i + 3
        _available(r, segment[:3])


# overlapping cases


def test_overlap_assembled_unread():
    r = StreamReassembler(1000)
    r.push_substring(b"a", 0)
    r.push_substring(b"ab", 0)
    assert _assembled(r) == 2
    _available(r, b"ab")


def test_overlap_assembled_read():
    r = StreamReassembler(1000)
    r.push_substring(b"a", 0)
    _available(r, b"a")
    r.push_substring(b"ab", 0)
    _available(r, b"b")
    assert _assembled(r) == 2


def test_overlap_unassembled_resulting_in_assembly():
    r = StreamReassembler(1000)
    r.push_substring(b"b", 1)
    _available(r, b"")
    r.push_substring(b"ab", 0)
    _available(r, b"ab")
    assert r.unassembled_bytes == 0
    assert _assembled(r) == 2


def test_overlap_unassembled_no_assembly():
    r = StreamReassembler(1000)
    r.push_substring(b"b", 1)
    _available(r, b"")
    r.push_substring(b"bc", 1)
    _available(r, b"")
    assert r.unassembled_bytes == 2
    assert _assembled(r) == 0


def test_overlap_unassembled_extending_both_sides():
    r = StreamReassembler(1000)
    r.push_substring(b"c", 2)
    _available(r, b"")
    r.push_substring(b"bcd", 1)
    _available(r, b"")
    assert r.unassembled_bytes == 3
    assert _assembled(r) == 0


def test_overlap_multiple_unassembled():
    r = StreamReassembler(1000)
    r.push_substring(b"b", 1)
    r.push_substring(b"d", 3)
    _available(r, b"")
    r.push_substring(b"bcde", 1)
    _available(r, b"")
    assert _assembled(r) == 0
    assert r.unassembled_bytes == 4


def test_submission_over_existing():
    r = StreamReassembler(1000)
    r.push_substring(b"c", 2)
    r.push_substring(b"bcd", 1)
    _available(r, b"")
    assert _assembled(r) == 0
    assert r.unassembled_bytes == 3
    assert not r.empty()
    r.push_substring(b"a", 0)
    _available(r, b"abcd")
    assert _assembled(r) == 4
    assert r.unassembled_bytes == 0
    assert r.empty()


def test_submission_within_existing():
    r = StreamReassembler(1000)
    r.push_substring(b"bcd", 1)
    r.push_substring(b"c", 2)
    _available(r, b"")
    assert _assembled(r) == 0
    assert r.unassembled_bytes == 3
    r.push_substring(b"a", 0)
    _available(r, b"abcd")
    assert _assembled(r) == 4
    assert r.unassembled_bytes == 0


# sequential cases


def test_seq_read_each():
    r = StreamReassembler(65000)
    r.push_substring(b"abcd", 0)
    assert _assembled(r) == 4
    _available(r, b"abcd")
    assert not r.stream_out.eof
    r.push_substring(b"efgh", 4)
    assert _assembled(r) == 8
    _available(r, b"efgh")
    assert not r.stream_out.eof


def test_seq_read_once():
    r = StreamReassembler(65000)
    r.push_substring(b"abcd", 0)
    assert _assembled(r) == 4
    assert not r.stream_out.eof
    r.push_substring(b"efgh", 4)
    assert _assembled(r) == 8
    _available(r, b"abcdefgh")
    assert not r.stream_out.eof


def test_seq_many_then_read():
    r = StreamReassembler(65000)
    for i in range(100):
        assert _assembled(r) == 4 * i
        r.push_substring(b"abcd", 4 * i)
        assert not r.stream_out.eof
    _available(r, b"abcd" * 100)
    assert not r.stream_out.eof


def test_seq_many_read_each():
    r = StreamReassembler(65000)
    for i in range(100):
        assert _assembled(r) == 4 * i
        r.push_substring(b"abcd", 4 * i)
        assert not r.stream_out.eof
        _available(r, b"abcd")


# window case: shuffled overlapping segments

NSEGS = 128
MAX_SEG_LEN = 2048


@pytest.mark.parametrize("seed", range(8))
def test_win_shuffled_overlapping_segments(seed):
    rd = random.Random(seed)
    r = StreamReassembler(NSEGS * MAX_SEG_LEN)
    seq_size = []
    offset = 0
    for _ in range(NSEGS):
        size = 1 + rd.getrandbits(32) % (MAX_SEG_LEN - 1)
        offs = min(offset, 1 + rd.getrandbits(32) % 1023)
        seq_size.append((offset - offs, size + offs))
        offset += size
    rd.shuffle(seq_size)
    data = rd.randbytes(offset)
    for off, sz in seq_size:
        r.push_substring(data[off : off + sz], off, off + sz == offset)
    result = r.stream_out.read(r.stream_out.buffer_size)
    assert r.stream_out.bytes_written == offset
    assert result == data
    assert r.stream_out.eof


def test_negative_index_rejected():
    r = StreamReassembler(10)
    with pytest.raises(ValueError):
        r.push_substring(b"a", -1)


def test_zero_capacity_rejected():
    with pytest.raises(ValueError):
        StreamReassembler(0)