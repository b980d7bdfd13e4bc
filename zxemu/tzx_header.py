"""TZX file signature, glue and select blocks."""

from __future__ import annotations

from typing import Callable

from .pulses import Playhead, PulseProc, PulseState, TapeError, TapeStream

_SIGNATURE = b"ZXTape!"
_GLUE = b"XTape!"
_EOF_MARKER = 0x1A


class TzxHeader(PulseProc):
    """Checks the ten-byte TZX file header."""

    def __init__(self) -> None:
        super().__init__()
        self.version: tuple[int, int] | None = None

    def init(self, next_proc: PulseProc | None) -> None:
        self.next_proc = next_proc

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        header = stream.read(10)
        if len(header) < 10:
            raise TapeError("incomplete TZX header")
        if not header.startswith(_SIGNATURE):
            raise TapeError("TZX signature not found")
        if header[7] != _EOF_MARKER:
            raise TapeError("TZX end of text marker not found")
        self.version = (header[8], header[9])
        return PulseState.COMPLETE


class TzxGlue(PulseProc):
    """Checks the nine-byte body of a glue block."""

    def __init__(self) -> None:
        super().__init__()
        self.version: tuple[int, int] | None = None

    def init(self, next_proc: PulseProc | None) -> None:
        self.next_proc = next_proc

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        body = stream.read(9)
        if len(body) < 9:
            raise TapeError("incomplete TZX glue block")
        if not body.startswith(_GLUE):
            raise TapeError("TZX glue bytes not found")
        if body[6] != _EOF_MARKER:
            raise TapeError("TZX glue end of text marker not found")
        self.version = (body[7], body[8])
        return PulseState.COMPLETE


class TzxSelect(PulseProc):
    """Reads a select block, offers its options and pauses the tape."""

    def __init__(self) -> None:
        super().__init__()
        self._offsets: list[int] = []
        self._clear_options: Callable[[], None] | None = None
        self._add_option: Callable[[str], None] | None = None
        self._show_options: Callable[[], None] | None = None

    def init(self, next_proc: PulseProc | None) -> None:
        self.next_proc = next_proc

    def set_handlers(
        self,
        clear_options: Callable[[], None] | None,
        add_option: Callable[[str], None] | None,
        show_options: Callable[[], None] | None,
    ) -> None:
        self._clear_options = clear_options
        self._add_option = add_option
        self._show_options = show_options

    def advance(self, stream: TapeStream, head: Playhead) -> int:
        (count,) = stream.decode_lsbf([-2, 1])
        self._offsets.clear()
        if self._clear_options:
            self._clear_options()
        for _ in range(count):
            offset, text_length = stream.decode_lsbf([2, 1])
            self._offsets.append(offset & 0xFFFF)
            raw = bytes(stream.read_byte() for _ in range(text_length))
            text = raw[:63].split(b"\0", 1)[0].decode("latin-1")
            if self._add_option:
                self._add_option(text)
        head.top = self.next_proc
        if self._show_options:
            self._show_options()
        return PulseState.PAUSE

    def offset(self, choice: int) -> int:
        """The relative block offset of a choice, or 1 if there is no such choice."""
        return self._offsets[choice] if 0 <= choice < len(self._offsets) else 1