from __future__ import annotations
from datetime import datetime
from pathlib import Path

from ..models.prescription import DATETIME_FORMAT, Prescription
from .text_file import (
    FIELD_SEP,
    LoadResult,
    append_line,
    join_list,
    parse_lines,
    parse_sequence,
    read_lines,
    split_fields,
    split_list,
)

PRESCRIPTIONS_FILE = 'prescription_data.txt'
_FIELD_COUNT = 6


def to_line(p: Prescription) -> str:
    return FIELD_SEP.join([
        p.patient_id,
        str(p.sequence),
        p.date_time.strftime(DATETIME_FORMAT),
        join_list(p.symptoms),
        join_list(p.medicines),
        p.notes,
    ])


def from_line(line: str) -> Prescription:
    patient_id, seq, when, symptoms, medicines, notes = split_fields(line, _FIELD_COUNT)
    if not patient_id.strip():
        raise ValueError("empty patient id")
    return Prescription(
        patient_id=patient_id.strip(),
        sequence=parse_sequence(seq),
        date_time=datetime.strptime(when.strip(), DATETIME_FORMAT),
        symptoms=split_list(symptoms),
        medicines=split_list(medicines),
        notes=notes.strip(),
    )


def load_prescriptions(path: Path) -> LoadResult[Prescription]:
    result = parse_lines(path, read_lines(path), from_line)
    result.last_sequence = max((p.sequence for p in result.records), default=0)
    return result


def append_prescription(path: Path, p: Prescription) -> None:
    append_line(path, to_line(p))
