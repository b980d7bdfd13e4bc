"""The register header and extended header of .Z80 snapshot files."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from .z80mem import MachineType, SnapshotError

_MAIN = struct.Struct("<BBHHHHBBBHHHHBBHHBBB")
MAIN_HEADER_SIZE = _MAIN.size
_MAX_EXTENDED = 57
_V3_LENGTH = _MAX_EXTENDED - 2


@dataclass
class Z80Header:
    """CPU state stored in the first 30 bytes of a snapshot."""

    a: int = 0
    f: int = 0
    bc: int = 0
    hl: int = 0
    pc: int = 0
    sp: int = 0
    i: int = 0
    r: int = 0
    border: int = 0
    de: int = 0
    bc_alt: int = 0
    de_alt: int = 0
    hl_alt: int = 0
    a_alt: int = 0
    f_alt: int = 0
    iy: int = 0
    ix: int = 0
    iff1: bool = False
    iff2: bool = False
    im: int = 0
    compressed: bool = False

    @property
    def version(self) -> int:
        """0 for raw memory, 1 for compressed memory, 2 when an extended header follows."""
        if self.pc == 0:
            return 2
        return 1 if self.compressed else 0

    @classmethod
    def from_bytes(cls, data: bytes) -> Z80Header:
        if len(data) < MAIN_HEADER_SIZE:
            raise SnapshotError("incomplete Z80 header")
        (
            a, f, bc, hl, pc, sp, i, r, flags, de,
            bc_alt, de_alt, hl_alt, a_alt, f_alt, iy, ix, iff1, iff2, im,
        ) = _MAIN.unpack(bytes(data[:MAIN_HEADER_SIZE]))
        if flags == 0xFF:
            flags = 1
        return cls(
            a=a, f=f, bc=bc, hl=hl, pc=pc, sp=sp, i=i,
            r=(r & 0x7F) | ((flags & 1) << 7),
            border=(flags >> 1) & 7,
            de=de, bc_alt=bc_alt, de_alt=de_alt, hl_alt=hl_alt,
            a_alt=a_alt, f_alt=f_alt, iy=iy, ix=ix,
            iff1=bool(iff1), iff2=bool(iff2), im=im & 3,
            compressed=bool(flags & 0x20),
        )

    def to_bytes(self, version: int) -> bytes:
        """Encode for a snapshot of the given version; PC is zero from version 2."""
        flags = ((self.r >> 7) & 1) | ((self.border & 7) << 1) | ((version == 1) << 5)
        return _MAIN.pack(
            self.a & 0xFF, self.f & 0xFF, self.bc & 0xFFFF, self.hl & 0xFFFF,
            0 if version > 1 else self.pc & 0xFFFF, self.sp & 0xFFFF,
            self.i & 0xFF, self.r & 0xFF, flags, self.de & 0xFFFF,
            self.bc_alt & 0xFFFF, self.de_alt & 0xFFFF, self.hl_alt & 0xFFFF,
            self.a_alt & 0xFF, self.f_alt & 0xFF, self.iy & 0xFFFF, self.ix & 0xFFFF,
            int(self.iff1), int(self.iff2), self.im & 0xFF,
        )


@dataclass
class ExtendedHeader:
    """The version 2/3 header block that follows the main header."""

    pc: int = 0
    machine: MachineType = MachineType.ZX128K
    port_mem: int = 0
    ay_latch: int = 0
    ay_registers: tuple[int, ...] = field(default_factory=lambda: (0,) * 16)
    length: int = _V3_LENGTH

    @property
    def version(self) -> int:
        return 3 if self.length >= 54 else 2

    @property
    def size(self) -> int:
        """Bytes taken in the file, including the length word."""
        return self.length + 2

    @classmethod
    def from_bytes(cls, data: bytes) -> ExtendedHeader:
        if len(data) < 2:
            raise SnapshotError("missing Z80 extended header length")
        length = int.from_bytes(data[:2], "little")
        if length > _MAX_EXTENDED:
            raise SnapshotError(f"invalid Z80 extended header length {length}")
        body = bytes(data[2:2 + length])
        if len(body) < length:
            raise SnapshotError("incomplete Z80 extended header")
        body = body.ljust(_MAX_EXTENDED, b"\0")
        version = 3 if length >= 54 else 2
        mode = body[2]
        is_48k = mode in (0, 1) or (mode == 3 and version == 3)
        return cls(
            pc=int.from_bytes(body[0:2], "little"),
            machine=MachineType.ZX48K if is_48k else MachineType.ZX128K,
            port_mem=body[3],
            ay_latch=body[6],
            ay_registers=tuple(body[7:23]),
            length=length,
        )

    def to_bytes(self) -> bytes:
        """Encode as a version 3 extended header."""
        if len(self.ay_registers) != 16:
            raise SnapshotError("the AY chip has 16 registers")
        if self.machine is MachineType.ZX48K:
            mode, port = 0, 0xFF
        else:
            mode, port = 4, self.port_mem & 0xFF
        buf = bytearray(_MAX_EXTENDED)
        buf[0:2] = _V3_LENGTH.to_bytes(2, "little")
        buf[2:4] = (self.pc & 0xFFFF).to_bytes(2, "little")
        buf[4] = mode
        buf[5] = port
        buf[6] = 0xFF
        buf[7] = 0x04
        buf[8] = self.ay_latch & 0xFF
        buf[9:25] = bytes(v & 0xFF for v in self.ay_registers)
        buf[56] = 0xFF
        return bytes(buf)