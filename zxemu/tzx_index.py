"""Indexing of the blocks in a TZX file."""

from __future__ import annotations

from typing import NamedTuple, Union

from .pulses import Playhead, PulseProc, PulseState, TapeError, TapeStream


class _Counted(NamedTuple):
    """A block whose body length is read from its own fields."""

    widths: tuple[int, ...]
    scale: int = 1


_Skip = Union[int, _Counted]

# How to step over the body of each block type: a fixed number of bytes, or
# a length field (after skipping any leading bytes) times a scale.
_SKIPS: dict[int, _Skip] = {
    0x10: _Counted((-2, 2)),       # standard speed data
    0x11: _Counted((-0xF, 3)),     # turbo speed data
    0x12: 4,                       # pure tone
    0x13: _Counted((1,), 2),       # pulse sequence
    0x14: _Counted((-0x7, 3)),     # pure data
    0x15: _Counted((-0x5, 3)),     # direct recording
    0x18: _Counted((4,)),          # CSW recording
    0x19: _Counted((4,)),          # generalized data
    0x20: 2,                       # pause or stop the tape
    0x21: _Counted((1,)),          # group start
    0x22: 0,                       # group end
    0x23: 2,                       # jump to block
    0x24: 2,                       # loop start
    0x25: 0,                       # loop end
    0x26: _Counted((2,), 2),       # call sequence
    0x27: 0,                       # return from sequence
    0x28: _Counted((2,)),          # select block
    0x2A: 4,                       # stop the tape in 48K mode
    0x2B: 5,                       # set signal level
    0x30: _Counted((1,)),          # text description
    0x31: _Counted((-1, 1)),       # message block
    0x32: _Counted((2,)),          # archive info
    0x33: _Counted((1,), 3),       # hardware type
    0x35: _Counted((-0x10, 4)),    # custom info
    0x5A: 9,                       # glue
}


def _skip_block(stream: TapeStream, block_type: int) -> None:
    try:
        skip = _SKIPS[block_type]
    except KeyError:
        raise TapeError(f"unknown TZX block type {block_type:02X}") from None
    try:
        if isinstance(skip, _Counted):
            (length,) = stream.decode_lsbf(skip.widths)
            stream.rseek(length * skip.scale)
        elif skip:
            stream.rseek(skip)
    except EOFError as exc:
        raise TapeError(f"truncated TZX block type {block_type:02X}") from exc


class TzxIndex(PulseProc):
    """Records the position of every block up to the end of the stream."""

    def __init__(self) -> None:
        super().__init__()
        self._index: list[int] = []

    def init(self, next_proc: PulseProc | None, index: list[int]) -> None:
        self.next_proc = next_proc
        self._index = index

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        self._index.clear()
        while True:
            try:
                block_type = stream.read_byte()
            except EOFError:
                return PulseState.COMPLETE
            self._index.append(stream.pos - 1)
            _skip_block(stream, block_type)