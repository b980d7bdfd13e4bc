"""Playback of .TAP blocks."""

from __future__ import annotations

from .pulses import (
    PauseMillis,
    Playhead,
    PulseProc,
    PulseState,
    StdByte,
    StdByteStream,
    StdHeader,
    TapeError,
    TapeStream,
)


class Tap(PulseProc):
    """Reads one TAP block header and schedules its pilot, flag, data and pause."""

    def __init__(
        self,
        header: StdHeader,
        byte: StdByte,
        data: StdByteStream,
        pause: PauseMillis,
    ) -> None:
        super().__init__()
        self._header = header
        self._byte = byte
        self._data = data
        self._pause = pause
        self._pause_ms = 1000
        self._ts_per_ms = 3555

    def init(self, next_proc: PulseProc | None, pause_ms: int, ts_per_ms: int) -> None:
        self.next_proc = next_proc
        self._pause_ms = pause_ms
        self._ts_per_ms = ts_per_ms

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        try:
            length, marker = stream.decode_lsbf([2, 1])
        except EOFError:
            return PulseState.EOF
        if length < 1:
            raise TapeError(f"TAP block length {length} is too small")
        self._header.init(self._byte, 3223 if marker else 8063)
        self._byte.init(self._data, marker)
        self._data.init(self._pause, length - 1)
        self._pause.init(self.next_proc, self._pause_ms, self._ts_per_ms)
        head.top = self._header
        return PulseState.CONTINUE