"""Generalized data blocks: symbol tables, symbol streams and their players."""

from __future__ import annotations

from .pulses import PauseMillis, Playhead, PulseProc, PulseState, TapeError, TapeStream

_MASK32 = 0xFFFFFFFF


def bits_per_symbol(count: int) -> int:
    """Bits needed to index an alphabet of ``count`` symbols (0 means 256)."""
    if count == 0:
        return 8
    for bits in range(8):
        if count <= 1 << bits:
            return bits
    return 8


class Symdefs(PulseProc):
    """Reads a symbol definition table into a shared list.

    Each symbol occupies ``max_pulses + 1`` entries: its type followed by
    its pulse lengths.
    """

    def __init__(self, table: list[int] | None = None) -> None:
        super().__init__()
        self.table: list[int] = table if table is not None else []
        self._max_pulses = 0
        self._alphabet_size = 0

    @property
    def max_pulses(self) -> int:
        return self._max_pulses

    @property
    def alphabet_size(self) -> int:
        return self._alphabet_size

    def init(self, next_proc: PulseProc | None, max_pulses: int, alphabet_size: int) -> None:
        self.next_proc = next_proc
        self._max_pulses = max_pulses
        self._alphabet_size = alphabet_size or 256

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        self.table.clear()
        for _ in range(self._alphabet_size):
            self.table.append(stream.read_byte())
            self.table.extend(stream.read_word() for _ in range(self._max_pulses))
        return PulseState.COMPLETE

    def at(self, symbol: int, pulse: int) -> int:
        """Entry ``pulse`` of ``symbol``; 0 when it lies outside the table."""
        index = pulse + symbol * (self._max_pulses + 1)
        return self.table[index] if index < len(self.table) else 0


class Symbol(PulseProc):
    """Plays the pulses of one symbol from a definition table."""

    def __init__(self, symdefs: Symdefs) -> None:
        super().__init__()
        self._symdefs = symdefs
        self._symbol = 0
        self._pulse = 0

    def init(self, next_proc: PulseProc | None, symbol: int) -> None:
        self.next_proc = next_proc
        self._symbol = symbol
        self._pulse = 0

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        defs = self._symdefs
        if self._pulse == 0:
            if self._symbol >= defs.alphabet_size:
                raise TapeError(f"symbol index {self._symbol} out of range")
            kind = defs.at(self._symbol, self._pulse)
            self._pulse += 1
            if kind == 1:
                head.level = not head.level
            elif kind == 2:
                head.level = False
            elif kind == 3:
                head.level = True
            elif kind != 0:
                raise TapeError(f"unexpected symbol type {kind}")
        else:
            head.level = not head.level
        if self._pulse > defs.max_pulses:
            return PulseState.COMPLETE
        length = defs.at(self._symbol, self._pulse)
        self._pulse += 1
        return length if length else PulseState.COMPLETE


class RleSymbols(PulseProc):
    """Plays a run-length encoded symbol stream (symbol byte, repeat word)."""

    def __init__(self, symbol: Symbol) -> None:
        super().__init__()
        self._symbol = symbol
        self._entries = 0
        self._repeats = 0
        self._current = 0

    def init(self, next_proc: PulseProc | None, count: int) -> None:
        self.next_proc = next_proc
        self._entries = count
        self._repeats = 0

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        while self._repeats == 0:
            if self._entries == 0:
                return PulseState.COMPLETE
            self._current, self._repeats = stream.decode_lsbf([1, 2])
            self._entries -= 1
        self._repeats -= 1
        self._symbol.init(self, self._current)
        head.top = self._symbol
        return PulseState.CONTINUE


class SymbolData(PulseProc):
    """Plays a packed stream of symbol indices, most significant bits first."""

    def __init__(self, symbol: Symbol) -> None:
        super().__init__()
        self._symbol = symbol
        self._count = 0
        self._bits = 1
        self._mask = 1
        self._data = 0
        self._available = 0

    def init(self, next_proc: PulseProc | None, count: int, bits_per_symbol: int) -> None:
        self.next_proc = next_proc
        self._count = count
        self._bits = bits_per_symbol
        self._mask = (1 << bits_per_symbol) - 1
        self._data = 0
        self._available = 0

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        if self._count == 0:
            return PulseState.COMPLETE
        if self._available < self._bits:
            self._data = (stream.read_byte() | (self._data << 8)) & _MASK32
            self._available += 8
        self._available -= self._bits
        index = self._mask & (self._data >> self._available)
        self._count -= 1
        self._symbol.init(self, index)
        head.top = self._symbol
        return PulseState.CONTINUE


class GeneralizedData(PulseProc):
    """Reads a generalized data block header and schedules its parts."""

    def __init__(self, pause: PauseMillis) -> None:
        super().__init__()
        self._table: list[int] = []
        self._pause = pause
        self._symdefs_pilot = Symdefs(self._table)
        self._symbol_pilot = Symbol(self._symdefs_pilot)
        self._rle = RleSymbols(self._symbol_pilot)
        self._symdefs_data = Symdefs(self._table)
        self._symbol_data = Symbol(self._symdefs_data)
        self._symbol_stream = SymbolData(self._symbol_data)
        self._ts_per_ms = 3555

    def init(self, next_proc: PulseProc | None, ts_per_ms: int) -> None:
        self.next_proc = next_proc
        self._ts_per_ms = ts_per_ms

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        (
            _block_length,
            pause_ms,
            pilot_total,
            pilot_pulses,
            pilot_alphabet,
            data_total,
            data_pulses,
            data_alphabet,
        ) = stream.decode_lsbf([4, 2, 4, 1, 1, 4, 1, 1])

        has_pilot = pilot_total > 0
        has_data = data_total > 0
        bits = bits_per_symbol(data_alphabet)
        if has_data and data_alphabet < 2:
            raise TapeError(f"not enough data symbol definitions: {data_alphabet}")

        if has_pilot:
            self._symdefs_pilot.init(self._rle, pilot_pulses, pilot_alphabet)
            self._rle.init(self._symdefs_data if has_data else self._pause, pilot_total)
        if has_data:
            self._symdefs_data.init(self._symbol_stream, data_pulses, data_alphabet)
            self._symbol_stream.init(self._pause, data_total, bits)

        self._pause.init(self.next_proc, pause_ms, self._ts_per_ms)

        if has_pilot:
            head.top = self._symdefs_pilot
        elif has_data:
            head.top = self._symdefs_data
        else:
            head.top = self._pause
        return PulseState.CONTINUE