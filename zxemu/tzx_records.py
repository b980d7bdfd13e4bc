"""TZX data blocks that are played through the standard pulse generators."""

from __future__ import annotations

from .pulses import (
    BitStream,
    PauseMillis,
    Playhead,
    PulseProc,
    PulseState,
    PulseStream,
    StdByteStream,
    StdHeader,
    TapeStream,
    Tone,
)


class TzxTurbo(PulseProc):
    """ID 11: a turbo speed data block with its own pilot, sync and bit timings."""

    def __init__(self, header: StdHeader, data: StdByteStream, pause: PauseMillis) -> None:
        super().__init__()
        self._header = header
        self._data = data
        self._pause = pause
        self._ts_per_ms = 3555

    def init(self, next_proc: PulseProc | None, ts_per_ms: int) -> None:
        self.next_proc = next_proc
        self._ts_per_ms = ts_per_ms

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        (
            pilot_ts,
            sync1_ts,
            sync2_ts,
            zero_ts,
            one_ts,
            pilot_pulses,
            last_bits,
            pause_ms,
            length,
        ) = stream.decode_lsbf([2, 2, 2, 2, 2, 2, 1, 2, 3])
        self._header.init(self._data, pilot_pulses, pilot_ts, sync1_ts, sync2_ts)
        self._data.init(self._pause, length, zero_ts, one_ts, last_bits)
        self._pause.init(self.next_proc, pause_ms, self._ts_per_ms)
        head.top = self._header
        return PulseState.CONTINUE


class TzxPureTone(PulseProc):
    """ID 12: a run of pulses of one length."""

    def __init__(self, tone: Tone) -> None:
        super().__init__()
        self._tone = tone

    def init(self, next_proc: PulseProc | None) -> None:
        self.next_proc = next_proc

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        length, count = stream.decode_lsbf([2, 2])
        self._tone.init(self.next_proc, length, count)
        head.top = self._tone
        return PulseState.CONTINUE


class TzxPulseSequence(PulseProc):
    """ID 13: a sequence of pulses of individual lengths."""

    def __init__(self, pulse_stream: PulseStream) -> None:
        super().__init__()
        self._pulse_stream = pulse_stream

    def init(self, next_proc: PulseProc | None) -> None:
        self.next_proc = next_proc

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        (count,) = stream.decode_lsbf([1])
        self._pulse_stream.init(self.next_proc, count)
        head.top = self._pulse_stream
        return PulseState.CONTINUE


class TzxPureData(PulseProc):
    """ID 14: data bytes without pilot or sync."""

    def __init__(self, data: StdByteStream, pause: PauseMillis) -> None:
        super().__init__()
        self._data = data
        self._pause = pause
        self._ts_per_ms = 3555

    def init(self, next_proc: PulseProc | None, ts_per_ms: int) -> None:
        self.next_proc = next_proc
        self._ts_per_ms = ts_per_ms

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        zero_ts, one_ts, last_bits, pause_ms, length = stream.decode_lsbf([2, 2, 1, 2, 3])
        self._data.init(self._pause, length, zero_ts, one_ts, last_bits)
        self._pause.init(self.next_proc, pause_ms, self._ts_per_ms)
        head.top = self._data
        return PulseState.CONTINUE


class TzxDirectRecording(PulseProc):
    """ID 15: raw samples, one bit per sample."""

    def __init__(self, data: BitStream, pause: PauseMillis) -> None:
        super().__init__()
        self._data = data
        self._pause = pause
        self._ts_per_ms = 3555

    def init(self, next_proc: PulseProc | None, ts_per_ms: int) -> None:
        self.next_proc = next_proc
        self._ts_per_ms = ts_per_ms

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        ts_per_sample, pause_ms, last_bits, length = stream.decode_lsbf([2, 2, 1, 3])
        self._data.init(self._pause, length, ts_per_sample, last_bits)
        self._pause.init(self.next_proc, pause_ms, self._ts_per_ms)
        head.top = self._data
        return PulseState.CONTINUE