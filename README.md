# zxemu

Building blocks for a ZX Spectrum emulator in pure Python, with no
third-party dependencies: tape pulse generation for `.tap` and `.tzx`
images, a model of the AY-3-8912 sound chip, and reading and writing of
`.z80` snapshot headers and memory.

## Tape pulses

Tape playback is made of pulse processors (`zxemu.pulses.PulseProc`). Each
call to `advance(stream, head)` sets the signal level on a `Playhead` and
returns how many T-states that level lasts. A negative result is a
`PulseState` code (`COMPLETE`, `ERROR`, `PAUSE`, `EOF`); `CONTINUE` means the
processor has handed control to another one by setting `head.top`. When a
processor completes, its `next_proc` takes over. Bad data raises `TapeError`,
and reading past the end of the data raises `EOFError`.

Tape data is read through `TapeStream`, a seekable little-endian byte reader
that can also be used as a context manager.

Modules:

- `zxemu.pulses` – `Tone`, `PauseMillis`, `StdByte`, `StdByteStream`,
  `StdHeader` (pilot tone and sync pulses), `BitStream` (raw samples),
  `PulseStream` and `CallStream`.
- `zxemu.tap` – `Tap` reads a TAP block header and schedules the pilot, flag
  byte, data and the pause that follows. At the end of the data it returns
  `PulseState.EOF`.
- `zxemu.tzx_header` – `TzxHeader` checks the `ZXTape!` file signature,
  `TzxGlue` checks glue blocks, and `TzxSelect` reads a select block. It
  reports the choices through handlers set with `set_handlers`, returns
  `PulseState.PAUSE`, and `offset(choice)` gives the relative block offset of
  a choice.
- `zxemu.tzx_records` – `TzxTurbo` (ID 11), `TzxPureTone` (ID 12),
  `TzxPulseSequence` (ID 13), `TzxPureData` (ID 14) and `TzxDirectRecording`
  (ID 15).
- `zxemu.symbols` – generalized data blocks (ID 19): `Symdefs`, `Symbol`,
  `RleSymbols`, `SymbolData`, `GeneralizedData` and `bits_per_symbol`.
- `zxemu.tzx_index` – `TzxIndex` records the position of every block in a
  TZX file.

### Playing a TAP file

```python
from zxemu.pulses import (
    PauseMillis, Playhead, PulseState, StdByte, StdByteStream,
    StdHeader, TapeStream, Tone,
)
from zxemu.tap import Tap

tone = Tone()
byte = StdByte(tone)
data = StdByteStream(byte)
header = StdHeader(tone)
pause = PauseMillis()
tap = Tap(header, byte, data, pause)
tap.init(tap, 1000, 3500)  # read the next block after each one; 3500 T-states per ms


def edges(stream, head):
    """Yield (level, T-states) for each edge until the tape ends."""
    while head.top is not None:
        result = head.top.advance(stream, head)
        if result == PulseState.COMPLETE:
            head.top = head.top.next_proc
        elif result < 0:
            break
        elif result > 0:
            yield head.level, result


with open("game.tap", "rb") as fh, TapeStream(fh.read()) as stream:
    for level, tstates in edges(stream, Playhead(top=tap)):
        ...
```

### Listing the blocks of a TZX file

```python
from zxemu.pulses import Playhead, TapeStream
from zxemu.tzx_header import TzxHeader
from zxemu.tzx_index import TzxIndex

with open("game.tzx", "rb") as fh, TapeStream(fh.read()) as stream:
    TzxHeader().advance(stream, Playhead())
    positions = []
    index = TzxIndex()
    index.init(None, positions)
    index.advance(stream, Playhead())
```

## AY-3-8912 sound chip

`zxemu.ay.AyChip` holds the sixteen registers. Select a register with
`write_ctrl`, then use `write_data` and `read_data` to write and read it. `step(micros32)` advances the
tone, noise and envelope generators by a number of 32nds of a microsecond.
`volumes()` returns the levels of channels A, B and C, and `mix()` returns
their sum.

## .z80 snapshots

- `zxemu.z80header` – `Z80Header` is the 30-byte register header. Its
  `version` is 0 for raw memory, 1 for compressed memory and 2 when an
  extended header follows. `ExtendedHeader` is the version 2/3 header and
  holds the program counter, machine type, paging port and AY registers. Both
  classes have `from_bytes` and `to_bytes`.
- `zxemu.z80mem` – `compress_memory` / `decompress_memory` handle the 48K of
  a version 1 snapshot. `compress_block` / `decompress_block` handle 16K
  pages. `block_to_page` maps a block number to a RAM page for a
  `MachineType`. Bad data raises `SnapshotError`.

## What this package does not do

It has no Z80 CPU, no machine model with memory paging and I/O ports, and no
display, keyboard, joystick or audio output. It has no driver that steps the
pulse processors in T-states for you, and nothing that dispatches TZX blocks
by type. Jump, loop, call sequence and pause blocks are listed by `TzxIndex`
but not acted on. Snapshot headers and memory can be encoded and decoded, but
nothing here loads them into a running machine.

## Installing and testing

```
pip install .
pip install .[test]
pytest
```