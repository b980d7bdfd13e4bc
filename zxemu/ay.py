"""AY-3-8912 sound chip: tone, noise and envelope generators."""

from __future__ import annotations

_MASK32 = 0xFFFFFFFF

# Counter increment per 1/32 microsecond of emulated time.
_STEP = 230

_DECAY = list(range(15, -1, -1))
_ATTACK = list(range(16))
_LOW = [0] * 16
_HIGH = [15] * 16

_ENVELOPES = (
    _DECAY + _LOW,
    _DECAY + _LOW,
    _DECAY + _LOW,
    _DECAY + _LOW,
    _ATTACK + _LOW,
    _ATTACK + _LOW,
    _ATTACK + _LOW,
    _ATTACK + _LOW,
    _DECAY + _DECAY,
    _DECAY + _LOW,
    _DECAY + _ATTACK,
    _DECAY + _HIGH,
    _ATTACK + _ATTACK,
    _ATTACK + _HIGH,
    _ATTACK + _DECAY,
    _ATTACK + _LOW,
)

_VOLUME_MAP = (
    0x0000, 0x0000, 0x0340, 0x0340, 0x04C0, 0x04C0, 0x06F2, 0x06F2,
    0x0A44, 0x0A44, 0x0F13, 0x0F13, 0x1510, 0x1510, 0x227E, 0x227E,
    0x289F, 0x289F, 0x414E, 0x414E, 0x5B21, 0x5B21, 0x7258, 0x7258,
    0x905E, 0x905E, 0xB550, 0xB550, 0xD7A0, 0xD7A0, 0xFFFF, 0xFFFF,
)

_VOLUMES = tuple(min(0xFF, (_VOLUME_MAP[level << 1] + 128) >> 8) for level in range(16))

_ENVELOPE_VOLUMES = tuple(tuple(_VOLUMES[v] for v in shape) for shape in _ENVELOPES)


def _one_if_zero(value: int) -> int:
    return value or 1


class AyChip:
    """The sixteen registers of an AY chip and its output generators."""

    def __init__(self) -> None:
        self._latch = 0
        self.reset()

    def reset(self) -> None:
        self._reg = [0] * 16
        self._reg[7] = 0xFD
        self._reg[14] = 0xFF
        self._cnt_a = self._cnt_b = self._cnt_c = 0
        self._cnt_e = self._cnt_n = 0
        self._ind_e = 0
        self._tb = 0
        self._tb_n = 0
        self._vol_a = self._vol_b = self._vol_c = 0
        self._env = _ENVELOPE_VOLUMES[0]
        self._env_a = self._env_b = self._env_c = False
        self._noise = 0xFFFF
        self._pm_a = self._period_tone(0)
        self._pm_b = self._period_tone(1)
        self._pm_c = self._period_tone(2)
        self._pm_n = self._period_noise()
        self._pm_e = self._period_envelope()

    def _period_tone(self, channel: int) -> int:
        value = self._reg[channel * 2] | (self._reg[channel * 2 + 1] << 8)
        return _one_if_zero(value & 0x0FFF) << 15

    def _period_envelope(self) -> int:
        value = (self._reg[11] + (self._reg[12] << 8)) << 1
        return _one_if_zero(value) << 14

    def _period_noise(self) -> int:
        return _one_if_zero(self._reg[6] & 0x1F) << 16

    def step(self, micros32: int) -> None:
        """Advance the generators by ``micros32`` 32nds of a microsecond."""
        s = (micros32 * _STEP) & _MASK32
        self._cnt_a = (self._cnt_a + s) & _MASK32
        self._cnt_b = (self._cnt_b + s) & _MASK32
        self._cnt_c = (self._cnt_c + s) & _MASK32
        self._cnt_e = (self._cnt_e + (s >> 1)) & _MASK32
        self._cnt_n = (self._cnt_n + s) & _MASK32

        toggles, self._cnt_a = divmod(self._cnt_a, self._pm_a)
        if toggles & 1:
            self._tb ^= 1
        toggles, self._cnt_b = divmod(self._cnt_b, self._pm_b)
        if toggles & 1:
            self._tb ^= 2
        toggles, self._cnt_c = divmod(self._cnt_c, self._pm_c)
        if toggles & 1:
            self._tb ^= 4
        ticks, self._cnt_e = divmod(self._cnt_e, self._pm_e)
        self._ind_e += ticks
        if self._ind_e > 0x1F:
            repeat = (self._reg[13] & 9) == 8
            self._ind_e = self._ind_e & 0x1F if repeat else 0x1F

        while self._cnt_n >= self._pm_n:
            self._cnt_n -= self._pm_n
            n = self._noise
            self._noise = (n >> 1) | ((((n >> 3) ^ n) & 1) << 16)
        self._tb_n = _MASK32 if self._noise & 1 else 0

    def write_ctrl(self, value: int) -> None:
        """Latch the register that the next data access uses."""
        self._latch = value & 0xF

    def read_ctrl(self) -> int:
        return self._latch

    def write_data(self, value: int) -> None:
        value &= 0xFF
        reg = self._latch
        self._reg[reg] = value
        if reg in (0, 1):
            self._pm_a = self._period_tone(0)
        elif reg in (2, 3):
            self._pm_b = self._period_tone(1)
        elif reg in (4, 5):
            self._pm_c = self._period_tone(2)
        elif reg == 6:
            self._pm_n = self._period_noise()
        elif reg == 8:
            self._vol_a = _VOLUMES[value & 0xF]
            self._env_a = bool(value & 0x10)
        elif reg == 9:
            self._vol_b = _VOLUMES[value & 0xF]
            self._env_b = bool(value & 0x10)
        elif reg == 10:
            self._vol_c = _VOLUMES[value & 0xF]
            self._env_c = bool(value & 0x10)
        elif reg in (11, 12):
            self._pm_e = self._period_envelope()
        elif reg == 13:
            self._env = _ENVELOPE_VOLUMES[value & 0xF]
            self._ind_e = 0

    def read_data(self, register: int | None = None) -> int:
        """Read a register; the latched one when none is given."""
        return self._reg[self._latch if register is None else register]

    def volumes(self) -> tuple[int, int, int]:
        """Current output levels of channels A, B and C."""
        mixer = self._reg[7]
        bits = (self._tb | mixer) & (self._tb_n | (mixer >> 3))
        envelope = self._env[self._ind_e]
        a = (bits & 1) * (envelope if self._env_a else self._vol_a)
        b = ((bits >> 1) & 1) * (envelope if self._env_b else self._vol_b)
        c = ((bits >> 2) & 1) * (envelope if self._env_c else self._vol_c)
        return a, b, c

    def mix(self) -> int:
        """Sum of the three channel levels."""
        return sum(self.volumes())