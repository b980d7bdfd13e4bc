[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "zxemu"
version = "0.1.0"
description = "ZX Spectrum tape pulse generators (TAP/TZX), AY sound chip model and .z80 snapshot header and memory coding"
requires-python = ">=3.10"
dependencies = []
keywords = ["zx-spectrum", "emulator", "tap", "tzx", "z80", "ay-3-8912", "tape"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Emulators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["zxemu"]

[tool.pytest.ini_options]
addopts = "-ra"
