"""Version of the installed ClinicEase distribution.

``clinicease/VERSION`` is the single source: ``pyproject.toml`` reads it at
build time, and a source checkout that was never installed reads it directly.
"""

from __future__ import annotations
from importlib import metadata
from pathlib import Path

DISTRIBUTION = "clinicease"
VERSION_FILE = Path(__file__).resolve().parent / "VERSION"
UNKNOWN_VERSION = "0.0.0"


def read_version() -> str:
    try:
        return metadata.version(DISTRIBUTION)
    except metadata.PackageNotFoundError:
        pass
    try:
        return VERSION_FILE.read_text(encoding="utf-8").strip() or UNKNOWN_VERSION
    except OSError:
        return UNKNOWN_VERSION


__version__ = read_version()
