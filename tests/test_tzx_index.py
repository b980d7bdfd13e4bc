import pytest

from zxemu.pulses import Playhead, PulseState, TapeError, TapeStream
from zxemu.tzx_index import TzxIndex


def le(value, width):
    return value.to_bytes(width, "little")


BLOCKS = {
    0x10: le(1000, 2) + le(3, 2) + b"abc",
    0x11: bytes(15) + le(2, 3) + b"xy",
    0x12: bytes(4),
    0x13: le(2, 1) + bytes(4),
    0x14: bytes(7) + le(1, 3) + b"z",
    0x15: bytes(5) + le(2, 3) + b"\x00\xff",
    0x18: le(3, 4) + bytes(3),
    0x19: le(2, 4) + bytes(2),
    0x20: le(500, 2),
    0x21: le(3, 1) + b"abc",
    0x22: b"",
    0x23: le(1, 2),
    0x24: le(2, 2),
    0x25: b"",
    0x26: le(2, 2) + bytes(4),
    0x27: b"",
    0x28: le(3, 2) + bytes(3),
    0x2A: bytes(4),
    0x2B: le(1, 4) + b"\x01",
    0x30: le(2, 1) + b"hi",
    0x31: b"\x05" + le(2, 1) + b"hi",
    0x32: le(3, 2) + bytes(3),
    0x33: le(2, 1) + bytes(6),
    0x35: bytes(16) + le(1, 4) + b"q",
    0x5A: b"XTape!\x1a\x01\x14",
}


def run(data, index=None):
    index = [] if index is None else index
    proc = TzxIndex()
    proc.init(None, index)
    stream = TapeStream(data)
    result = proc.advance(stream, Playhead())
    return result, index, stream


@pytest.mark.parametrize("block_type", sorted(BLOCKS))
def test_each_block_type_is_skipped_exactly(block_type):
    block = bytes([block_type]) + BLOCKS[block_type]
    data = block + b"\x22"
    result, index, stream = run(data)
    assert result == PulseState.COMPLETE
    assert index == [0, len(block)]
    assert stream.pos == len(data)


def test_indexes_sequence_of_blocks():
    parts = [bytes([t]) + BLOCKS[t] for t in (0x10, 0x12, 0x30, 0x22)]
    data = b"".join(parts)
    result, index, _ = run(data)
    expected = []
    pos = 0
    for part in parts:
        expected.append(pos)
        pos += len(part)
    assert result == PulseState.COMPLETE
    assert index == expected


def test_empty_stream_gives_empty_index():
    result, index, _ = run(b"")
    assert result == PulseState.COMPLETE
    assert index == []


def test_previous_index_is_cleared():
    index = [7, 8, 9]
    _, index, _ = run(b"\x22", index)
    assert index == [0]


def test_unknown_block_type_raises():
    with pytest.raises(TapeError):
        run(b"\x22\x99")


def test_truncated_length_field_raises():
    with pytest.raises(TapeError):
        run(b"\x10\xe8")


def test_body_past_end_raises():
    with pytest.raises(TapeError):
        run(b"\x21\x05ab")