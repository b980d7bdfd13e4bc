import pytest

from zxemu.z80header import ExtendedHeader, Z80Header
from zxemu.z80mem import MachineType, SnapshotError


def sample_header(**overrides):
    values = dict(
        a=0x12, f=0x34, bc=0x5678, hl=0x9ABC, pc=0x8000, sp=0xFF00,
        i=0x3F, r=0xA5, border=5, de=0x1122, bc_alt=0x3344, de_alt=0x5566,
        hl_alt=0x7788, a_alt=0x99, f_alt=0xAA, iy=0x5C3A, ix=0xBBCC,
        iff1=True, iff2=False, im=1,
    )
    values.update(overrides)
    return Z80Header(**values)


def test_version0_round_trip():
    header = sample_header()
    data = header.to_bytes(0)
    assert len(data) == 30
    back = Z80Header.from_bytes(data)
    assert back == header
    assert back.version == 0


def test_version1_sets_compressed_flag():
    data = sample_header().to_bytes(1)
    assert data[12] & 0x20
    back = Z80Header.from_bytes(data)
    assert back.compressed is True
    assert back.version == 1
    assert back == sample_header(compressed=True)


def test_version3_writes_zero_pc():
    data = sample_header().to_bytes(3)
    assert data[6:8] == b"\x00\x00"
    back = Z80Header.from_bytes(data)
    assert back.pc == 0
    assert back.version == 2


def test_register_byte_order():
    data = sample_header().to_bytes(0)
    assert data[0] == 0x12
    assert data[2:4] == b"\x78\x56"
    assert data[23:25] == b"\x3a\x5c"


def test_flag_byte_255_is_treated_as_one():
    data = bytearray(sample_header().to_bytes(0))
    data[11] = 0x05
    data[12] = 0xFF
    header = Z80Header.from_bytes(bytes(data))
    assert header.r == 0x85
    assert header.border == 0
    assert header.compressed is False


def test_short_header_raises():
    with pytest.raises(SnapshotError):
        Z80Header.from_bytes(bytes(29))


def test_extended_round_trip_128k():
    ext = ExtendedHeader(
        pc=0x6000, machine=MachineType.ZX128K, port_mem=0x17,
        ay_latch=7, ay_registers=tuple(range(16)),
    )
    data = ext.to_bytes()
    assert len(data) == 57
    assert data[-1] == 0xFF
    back = ExtendedHeader.from_bytes(data)
    assert back == ext
    assert back.version == 3
    assert back.size == len(data)


def test_extended_48k_is_recognised():
    ext = ExtendedHeader(pc=0x1234, machine=MachineType.ZX48K)
    data = ext.to_bytes()
    assert data[4] == 0
    back = ExtendedHeader.from_bytes(data)
    assert back.machine is MachineType.ZX48K
    assert back.pc == 0x1234


@pytest.mark.parametrize(
    "mode, length, machine",
    [
        (0, 23, MachineType.ZX48K),
        (1, 23, MachineType.ZX48K),
        (3, 23, MachineType.ZX128K),
        (3, 54, MachineType.ZX48K),
        (4, 54, MachineType.ZX128K),
    ],
)
def test_hardware_mode_depends_on_version(mode, length, machine):
    body = bytearray(length)
    body[2] = mode
    data = length.to_bytes(2, "little") + bytes(body)
    assert ExtendedHeader.from_bytes(data).machine is machine


def test_extended_too_long_raises():
    data = (58).to_bytes(2, "little") + bytes(58)
    with pytest.raises(SnapshotError):
        ExtendedHeader.from_bytes(data)


def test_extended_truncated_raises():
    data = (55).to_bytes(2, "little") + bytes(10)
    with pytest.raises(SnapshotError):
        ExtendedHeader.from_bytes(data)


def test_extended_requires_sixteen_registers():
    with pytest.raises(SnapshotError):
        ExtendedHeader(ay_registers=(0,) * 3).to_bytes()