"""Tape pulse generators and the byte stream they read from.

A pulse processor produces one edge of the tape signal per call to
``advance``: it sets the signal level on the playhead and returns how many
T-states that level lasts.  Negative results are :class:`PulseState` codes.
A processor may hand control to another by setting ``head.top``.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Iterable, Protocol

_MASK32 = 0xFFFFFFFF


class PulseState(enum.IntEnum):
    """Control codes returned by ``advance`` in place of a duration."""

    CONTINUE = 0
    COMPLETE = -1
    ERROR = -2
    PAUSE = -4
    EOF = -5


class TapeError(Exception):
    """Raised when tape data is malformed or a stream operation fails."""


class TapeStream:
    """A seekable little-endian byte reader over tape image data.

    Reading past the end raises :class:`EOFError`.
    """

    def __init__(self, data: bytes | bytearray | memoryview) -> None:
        self._data = bytes(data)
        self._pos = 0
        self._closed = False

    def __enter__(self) -> TapeStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def pos(self) -> int:
        """Current read position."""
        return self._pos

    @property
    def closed(self) -> bool:
        return self._closed

    def _check_open(self) -> None:
        if self._closed:
            raise TapeError("stream is closed")

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes; fewer are returned at the end of data."""
        self._check_open()
        chunk = self._data[self._pos:self._pos + max(size, 0)]
        self._pos += len(chunk)
        return chunk

    def read_byte(self) -> int:
        self._check_open()
        if self._pos >= len(self._data):
            raise EOFError("end of tape data")
        value = self._data[self._pos]
        self._pos += 1
        return value

    def read_word(self) -> int:
        """Read an unsigned little-endian 16-bit value."""
        return self.decode_lsbf([2])[0]

    def decode_lsbf(self, widths: Iterable[int]) -> list[int]:
        """Read little-endian fields of the given byte widths.

        A negative width skips that many bytes without producing a value.
        """
        values = []
        for width in widths:
            size = abs(width)
            chunk = self.read(size)
            if len(chunk) < size:
                raise EOFError("end of tape data")
            if width > 0:
                values.append(int.from_bytes(chunk, "little"))
        return values

    def seek(self, position: int) -> None:
        self._check_open()
        if not 0 <= position <= len(self._data):
            raise TapeError(f"seek to {position} is outside the data")
        self._pos = position

    def rseek(self, offset: int) -> None:
        """Move the read position relative to where it is."""
        self.seek(self._pos + offset)

    def close(self) -> None:
        self._closed = True


@dataclass
class Playhead:
    """The signal level and the processor currently driving it."""

    level: bool = False
    top: PulseProc | None = None


class PulseProc:
    """Base pulse processor: completes immediately."""

    def __init__(self) -> None:
        self.next_proc: PulseProc | None = None

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        """Produce the next edge; raises TapeError or EOFError on bad data."""
        return PulseState.COMPLETE


class Tone(PulseProc):
    """A run of equal-length pulses."""

    def __init__(self) -> None:
        super().__init__()
        self._length = 0
        self._count = 0
        self._index = 0

    def init(self, next_proc: PulseProc | None, length: int, count: int) -> None:
        self.next_proc = next_proc
        self._length = length
        self._count = count
        self._index = 0

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        index = self._index
        self._index += 1
        if index:
            head.level = not head.level
            if self._index > self._count:
                return PulseState.COMPLETE
        return self._length


class PauseMillis(PulseProc):
    """Silence lasting a number of milliseconds."""

    def __init__(self) -> None:
        super().__init__()
        self._ms = 0
        self._ts_per_ms = 3555

    def init(self, next_proc: PulseProc | None, ms: int, ts_per_ms: int) -> None:
        self.next_proc = next_proc
        self._ms = ms
        self._ts_per_ms = ts_per_ms

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        if self._ms == 0:
            return PulseState.COMPLETE
        self._ms -= 1
        return self._ts_per_ms


class StdByte(PulseProc):
    """Encodes one byte, most significant bit first, as pairs of pulses."""

    def __init__(self, tone: Tone) -> None:
        super().__init__()
        self._tone = tone
        self._bits = 0x10000
        self._ts = (855, 1710)

    def init(
        self,
        next_proc: PulseProc | None,
        value: int,
        bits: int = 8,
        ts0: int = 855,
        ts1: int = 1710,
    ) -> None:
        self.next_proc = next_proc
        self._bits = value | (1 << (16 - min(bits, 8)))
        self._ts = (ts0, ts1)

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        if self._bits & 0x10000:
            return PulseState.COMPLETE
        self._tone.init(self, self._ts[(self._bits >> 7) & 1], 2)
        self._bits = (self._bits << 1) & _MASK32
        head.top = self._tone
        return PulseState.CONTINUE


class StdByteStream(PulseProc):
    """Reads bytes from the stream and plays each through a StdByte."""

    def __init__(self, byte_proc: StdByte) -> None:
        super().__init__()
        self._byte = byte_proc
        self._length = 0
        self._ts0 = 855
        self._ts1 = 1710
        self._last_bits = 8

    def init(
        self,
        next_proc: PulseProc | None,
        length: int,
        ts0: int = 855,
        ts1: int = 1710,
        last_bits: int = 8,
    ) -> None:
        self.next_proc = next_proc
        self._length = length
        self._ts0 = ts0
        self._ts1 = ts1
        self._last_bits = last_bits

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        if self._length == 0:
            return PulseState.COMPLETE
        value = stream.read_byte()
        self._length -= 1
        bits = self._last_bits if self._length == 0 else 8
        self._byte.init(self, value, bits, self._ts0, self._ts1)
        head.top = self._byte
        return PulseState.CONTINUE


class StdHeader(PulseProc):
    """Pilot tone followed by the two sync pulses."""

    def __init__(self, tone: Tone) -> None:
        super().__init__()
        self._tone = tone
        self._step = 0
        self._pilot_pulses = 0
        self._pilot_ts = 2168
        self._sync1_ts = 667
        self._sync2_ts = 735

    def init(
        self,
        next_proc: PulseProc | None,
        pilot_pulses: int,
        pilot_ts: int = 2168,
        sync1_ts: int = 667,
        sync2_ts: int = 735,
    ) -> None:
        self.next_proc = next_proc
        self._step = 3
        self._pilot_pulses = pilot_pulses
        self._pilot_ts = pilot_ts
        self._sync1_ts = sync1_ts
        self._sync2_ts = sync2_ts

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        if self._step == 0:
            return PulseState.COMPLETE
        if self._step == 3:
            self._tone.init(self, self._pilot_ts, self._pilot_pulses)
        elif self._step == 2:
            self._tone.init(self, self._sync1_ts, 1)
        else:
            self._tone.init(self, self._sync2_ts, 1)
        self._step -= 1
        head.top = self._tone
        return PulseState.CONTINUE


class BitStream(PulseProc):
    """Plays raw samples, one bit per sample, most significant bit first."""

    def __init__(self) -> None:
        super().__init__()
        self._length = 0
        self._ts_per_sample = 0
        self._last_bits = 8
        self._bits = 0x10000

    def init(
        self,
        next_proc: PulseProc | None,
        length: int,
        ts_per_sample: int,
        last_bits: int,
    ) -> None:
        self.next_proc = next_proc
        self._length = length
        self._ts_per_sample = ts_per_sample
        self._last_bits = min(last_bits, 8)
        self._bits = 0x10000

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        if self._length == 0:
            return PulseState.COMPLETE
        if self._bits & 0x10000:
            value = stream.read_byte()
            if self._length > 1 or self._last_bits == 8:
                if value in (0x00, 0xFF):
                    head.level = value == 0xFF
                    self._length -= 1
                    return self._ts_per_sample << 3
            self._length -= 1
            marker = 8 if self._length else 16 - self._last_bits
            self._bits = value | (1 << marker)

        level = bool((self._bits >> 7) & 1)
        head.level = level
        duration = 0
        while True:
            self._bits = (self._bits << 1) & _MASK32
            duration += self._ts_per_sample
            if self._bits & 0x10000 or bool((self._bits >> 7) & 1) != level:
                return duration


class PulseStream(PulseProc):
    """Plays a list of single pulses whose lengths are read as words."""

    def __init__(self, tone: Tone) -> None:
        super().__init__()
        self._tone = tone
        self._count = 0

    def init(self, next_proc: PulseProc | None, count: int) -> None:
        self.next_proc = next_proc
        self._count = count

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        if self._count == 0:
            return PulseState.COMPLETE
        length = stream.read_word()
        self._tone.init(self, length, 1)
        self._count -= 1
        head.top = self._tone
        return PulseState.CONTINUE


class _BlockCursor(Protocol):
    block_index: int


class CallStream(PulseProc):
    """Walks a call sequence, setting the owner's ``block_index`` per call.

    When the calls run out the owner's original block index is restored.
    """

    def __init__(self, owner: _BlockCursor) -> None:
        super().__init__()
        self._owner = owner
        self._count = 0
        self._saved_index = 0
        self._position = 0

    def init(self, next_proc: PulseProc | None, count: int, position: int) -> None:
        self.next_proc = next_proc
        self._count = count
        self._saved_index = self._owner.block_index
        self._position = position

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        if self._count == 0:
            self._owner.block_index = self._saved_index
            return PulseState.COMPLETE
        stream.seek(self._position)
        target = stream.read_word()
        self._position = stream.pos
        self._owner.block_index = target
        self._count -= 1
        return PulseState.COMPLETE