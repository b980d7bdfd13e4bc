import pytest

from zxemu.ay import AyChip


def _write(chip, register, value):
    chip.write_ctrl(register)
    chip.write_data(value)


def test_reset_register_defaults():
    chip = AyChip()
    assert chip.read_data(7) == 0xFD
    assert chip.read_data(14) == 0xFF
    assert chip.read_data(0) == 0


def test_write_ctrl_keeps_low_nibble():
    chip = AyChip()
    chip.write_ctrl(0x17)
    assert chip.read_ctrl() == 0x07


@pytest.mark.parametrize("register", range(16))
def test_data_round_trip(register):
    chip = AyChip()
    _write(chip, register, 0x5A)
    assert chip.read_data(register) == 0x5A
    assert chip.read_data() == 0x5A


def test_silent_after_reset():
    chip = AyChip()
    assert chip.volumes() == (0, 0, 0)
    assert chip.mix() == 0


def test_full_volume_with_tones_disabled():
    chip = AyChip()
    _write(chip, 7, 0xFF)
    _write(chip, 8, 15)
    assert chip.volumes() == (0xFF, 0, 0)


def test_volume_levels_rise_monotonically():
    chip = AyChip()
    _write(chip, 7, 0xFF)
    levels = []
    for level in range(16):
        _write(chip, 9, level)
        levels.append(chip.volumes()[1])
    assert levels[0] == 0
    assert levels == sorted(levels)
    assert levels[-1] == 0xFF


def test_mix_is_sum_of_channels():
    chip = AyChip()
    _write(chip, 7, 0xFF)
    _write(chip, 8, 15)
    _write(chip, 9, 10)
    _write(chip, 10, 5)
    assert chip.mix() == sum(chip.volumes())


def test_tone_alternates_between_off_and_volume():
    chip = AyChip()
    _write(chip, 7, 0xFE)
    _write(chip, 8, 15)
    _write(chip, 0, 1)
    seen = set()
    for _ in range(50):
        chip.step(150)
        seen.add(chip.volumes()[0])
    assert seen == {0, 0xFF}


def test_reset_restores_defaults_after_writes():
    chip = AyChip()
    _write(chip, 7, 0x00)
    _write(chip, 8, 15)
    chip.reset()
    assert chip.read_data(7) == 0xFD
    assert chip.read_data(8) == 0
    assert chip.mix() == 0


def test_decay_envelope_falls_to_silence():
    chip = AyChip()
    _write(chip, 7, 0xFF)
    _write(chip, 8, 0x10)
    _write(chip, 13, 0)
    assert chip.volumes()[0] == 0xFF
    for _ in range(200):
        chip.step(10000)
    assert chip.volumes()[0] == 0


def test_envelope_output_stays_in_range():
    chip = AyChip()
    _write(chip, 7, 0xFF)
    _write(chip, 8, 0x10)
    _write(chip, 13, 8)
    for _ in range(300):
        chip.step(1000)
        assert 0 <= chip.volumes()[0] <= 0xFF


def test_noise_output_is_gated_volume():
    chip = AyChip()
    _write(chip, 7, 0x37)
    _write(chip, 8, 15)
    _write(chip, 6, 1)
    seen = set()
    for _ in range(200):
        chip.step(100)
        seen.add(chip.volumes()[0])
    assert seen <= {0, 0xFF}
    assert len(seen) == 2