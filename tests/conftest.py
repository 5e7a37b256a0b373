from __future__ import annotations

import io
from datetime import datetime
from pathlib import Path

import pytest

from clinicease.manager import ManagementSystem
from clinicease.models import Patient
from clinicease.ui.console import Console

FIXED_NOW = datetime(2025, 3, 20, 9, 30, 42)


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path: Path):
    for key in ('CLINICEASE_DATA_DIR', 'CLINICEASE_PRESCRIPTIONS_DIR', 'CLINICEASE_LOG_LEVEL', 'CLINICEASE_LOG_FILE'):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def john() -> Patient:
    return Patient("S1234567A", "John Doe", "1990-01-01", "M", "123 Main St", "81234567", [])


@pytest.fixture
def jane() -> Patient:
    return Patient("T7654321B", "Jane Tan", "1985-06-15", "F", "45 Orchard Rd", "91234567", ["Asthma"])


@pytest.fixture
def system(data_dir: Path, now: datetime) -> ManagementSystem:
    return ManagementSystem(data_dir, clock=lambda: now)


@pytest.fixture
def console_session():
    """Build a Console fed with the given lines; returns it with its captured output."""
    def _make(lines: list[str]) -> tuple[Console, io.StringIO]:
        stdin = io.StringIO("".join(line + "\n" for line in lines))
        stdout = io.StringIO()
        return Console(stdin, stdout), stdout
    return _make
