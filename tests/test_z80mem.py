import random

import pytest

from zxemu.z80mem import (
    MachineType,
    SnapshotError,
    block_to_page,
    compress_block,
    compress_memory,
    decompress_block,
    decompress_memory,
)

PAGE = 0x4000
MEMORY = 0xC000


@pytest.mark.parametrize(
    "block, page",
    [(8, 5), (4, 2), (5, 0), (0, None), (11, None), (3, None)],
)
def test_block_to_page_48k(block, page):
    assert block_to_page(block, MachineType.ZX48K) == page


@pytest.mark.parametrize(
    "block, page",
    [(3, 0), (4, 1), (5, 2), (6, 3), (7, 4), (8, 5), (9, 6), (10, 7), (0, None), (11, None)],
)
def test_block_to_page_128k(block, page):
    assert block_to_page(block, MachineType.ZX128K) == page


def test_block_to_page_out_of_range():
    with pytest.raises(SnapshotError):
        block_to_page(12, MachineType.ZX128K)


def _sample_page(seed):
    rng = random.Random(seed)
    data = bytearray()
    while len(data) < PAGE:
        value = rng.choice([0x00, 0xED, 0xFF, rng.randrange(256)])
        data += bytes([value]) * rng.choice([1, 1, 2, 3, 4, 5, 6, 300])
    return bytes(data[:PAGE])


@pytest.mark.parametrize("seed", range(6))
def test_block_round_trip(seed):
    page = _sample_page(seed)
    assert decompress_block(compress_block(page)) == page


def test_zero_block_round_trip_is_small():
    page = bytes(PAGE)
    packed = compress_block(page)
    assert len(packed) < 512
    assert decompress_block(packed) == page


def test_ed_pair_is_always_encoded():
    page = b"\xed\xed" + bytes([1]) * (PAGE - 2)
    packed = compress_block(page)
    assert packed.startswith(b"\xed\xed\x02\xed")
    assert decompress_block(packed) == page


def test_short_runs_stay_literal():
    page = b"\x01\x02\x03" + bytes(PAGE - 3)
    assert compress_block(page).startswith(b"\x01\x02\x03")


def test_compress_block_wrong_size():
    with pytest.raises(SnapshotError):
        compress_block(bytes(100))


def test_decompress_block_run():
    page = decompress_block(b"\xed\xed\x05\x07\x09")
    assert len(page) == PAGE
    assert page[:6] == b"\x07" * 5 + b"\x09"
    assert page[6:] == bytes(PAGE - 6)


@pytest.mark.parametrize("seed", range(3))
def test_memory_round_trip(seed):
    memory = b"".join(_sample_page(seed * 3 + k) for k in range(3))
    assert decompress_memory(compress_memory(memory)) == memory


def test_memory_round_trip_with_end_marker():
    memory = _sample_page(42) * 3
    packed = compress_memory(memory) + b"\x00\xed\xed\x00"
    assert decompress_memory(packed) == memory


def test_decompress_memory_stops_at_marker():
    memory = decompress_memory(b"\x01\x02\x00\xed\xed\x00\x09")
    assert len(memory) == MEMORY
    assert memory[:2] == b"\x01\x02"
    assert memory[2:] == bytes(MEMORY - 2)


def test_compress_memory_wrong_size():
    with pytest.raises(SnapshotError):
        compress_memory(bytes(PAGE))