"""Memory layout and run-length coding of .Z80 snapshot files."""

from __future__ import annotations

import enum
from typing import Iterator

_MASK32 = 0xFFFFFFFF
PAGE_SIZE = 0x4000
MEMORY_SIZE = 0xC000


class MachineType(enum.Enum):
    ZX48K = 0
    ZX128K = 1


class SnapshotError(Exception):
    """Raised when snapshot data cannot be read or written."""


#                  0     1     2     3     4  5  6     7     8  9     10    11
_PAGES_48K = (None, None, None, None, 2, 0, None, None, 5, None, None, None)
_PAGES_128K = (None, None, None, 0, 1, 2, 3, 4, 5, 6, 7, None)


def block_to_page(block: int, machine: MachineType) -> int | None:
    """The RAM page a Z80 memory block maps to, or None if it holds no RAM."""
    if not 0 <= block < len(_PAGES_48K):
        raise SnapshotError(f"invalid Z80 block number {block}")
    table = _PAGES_48K if machine is MachineType.ZX48K else _PAGES_128K
    return table[block]


def _compress(data: bytes) -> bytes:
    out = bytearray()
    last_index = len(data) - 1
    last = -1
    count = 0
    for i, value in enumerate(data):
        if value == last:
            count += 1
            if count == 0xFF or i == last_index or last == 0xED:
                out += bytes((0xED, 0xED, count, last))
                last = -1
                count = 0
        else:
            if count > 4:
                out += bytes((0xED, 0xED, count, last))
            elif count > 0:
                out += bytes((last,)) * count
            if last == 0xED or i == last_index:
                out.append(value)
                last = -1
                count = 0
            else:
                last = value
                count = 1
    return bytes(out)


def compress_block(data: bytes) -> bytes:
    """Compress one 16K page as stored in a version 2/3 memory block."""
    if len(data) != PAGE_SIZE:
        raise SnapshotError(f"a page is {PAGE_SIZE} bytes, not {len(data)}")
    return _compress(bytes(data))


def compress_memory(data: bytes) -> bytes:
    """Compress the 48K from 0x4000 as stored in a version 1 snapshot."""
    if len(data) != MEMORY_SIZE:
        raise SnapshotError(f"48K memory is {MEMORY_SIZE} bytes, not {len(data)}")
    return _compress(bytes(data))


def _expand(data: bytes, size: int, stop_at_marker: bool) -> bytes:
    out = bytearray(size)
    source: Iterator[int] = iter(data)
    i = 0
    window = 0
    flags = 0
    while i < size:
        value = next(source, None)
        window = (window << 8) & _MASK32
        flags = (flags << 1) & _MASK32
        if value is not None:
            window |= value
            flags |= 1
        if flags & 0xF == 0:
            break
        if flags & 0xF == 0xF:
            if stop_at_marker and window == 0x00EDED00:
                break
            if window & 0xFFFF0000 == 0xEDED0000:
                fill = window & 0xFF
                end = min(i + ((window >> 8) & 0xFF), size)
                out[i:end] = bytes((fill,)) * (end - i)
                i = end
                flags = 0
        if flags & 0x8:
            out[i] = window >> 24
            i += 1
    return bytes(out)


def decompress_block(data: bytes) -> bytes:
    """Expand a compressed version 2/3 memory block into a 16K page."""
    return _expand(bytes(data), PAGE_SIZE, stop_at_marker=False)


def decompress_memory(data: bytes) -> bytes:
    """Expand version 1 compressed memory into the 48K from 0x4000.

    Expansion stops at the 00 ED ED 00 end marker or the end of the data.
    """
    return _expand(bytes(data), MEMORY_SIZE, stop_at_marker=True)