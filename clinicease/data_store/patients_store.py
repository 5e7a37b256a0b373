from __future__ import annotations
from pathlib import Path
from typing import Iterable

from ..models.patient import Patient
from .text_file import (
    FIELD_SEP,
    LoadResult,
    append_line,
    join_list,
    parse_lines,
    read_lines,
    split_fields,
    split_list,
    write_lines,
)

PATIENTS_FILE = 'patient_data.txt'
_FIELD_COUNT = 7


def to_line(p: Patient) -> str:
    return FIELD_SEP.join([
        p.id, p.name, p.dob, p.gender, p.address, p.contact, join_list(p.medical_history),
    ])


def from_line(line: str) -> Patient:
    pid, name, dob, gender, address, contact, history = split_fields(line, _FIELD_COUNT)
    if not pid.strip():
        raise ValueError("empty patient id")
    return Patient(
        id=pid.strip(),
        name=name.strip(),
        dob=dob.strip(),
        gender=gender.strip(),
        address=address.strip(),
        contact=contact.strip(),
        medical_history=split_list(history),
    )


def load_patients(path: Path) -> LoadResult[Patient]:
    return parse_lines(path, read_lines(path), from_line)


def append_patient(path: Path, p: Patient) -> None:
    append_line(path, to_line(p))


def save_patients(path: Path, patients: Iterable[Patient]) -> None:
    write_lines(path, (to_line(p) for p in patients))
