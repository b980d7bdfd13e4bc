"""ZX Spectrum tape pulse generators, AY sound chip model and .z80 snapshot coding."""

__version__ = "0.1.0"