from __future__ import annotations
from datetime import datetime
from pathlib import Path
from typing import Iterable, List

from ..models.appointment import INPUT_FORMAT, Appointment, format_id
from .text_file import (
    FIELD_SEP,
    LoadResult,
    append_line,
    parse_lines,
    parse_sequence,
    read_lines,
    split_fields,
    write_lines,
)

APPOINTMENTS_FILE = 'appointment_data.txt'
COUNTER_PREFIX = 'countId:'
_FIELD_COUNT = 5


def to_line(a: Appointment) -> str:
    done = 'true' if a.done else 'false'
    return FIELD_SEP.join([
        str(a.number), done, a.nric, a.date_time.strftime(INPUT_FORMAT), a.description,
    ])


def from_line(line: str) -> Appointment:
    seq, done, nric, when, description = split_fields(line, _FIELD_COUNT)
    done = done.strip().lower()
    if done not in ('true', 'false'):
        raise ValueError(f"invalid done flag {done!r}")
    return Appointment(
        id=format_id(parse_sequence(seq)),
        nric=nric.strip(),
        date_time=datetime.strptime(when.strip(), INPUT_FORMAT),
        description=description.strip(),
        done=done == 'true',
    )


def load_appointments(path: Path) -> LoadResult[Appointment]:
    """Load appointments and the last assigned number.

    The optional ``countId:`` header keeps numbering monotonic after the
    highest appointment has been deleted.
    """
    lines = read_lines(path)
    counter = 0
    body: List[str] = []
    for line in lines:
        if line.startswith(COUNTER_PREFIX):
            try:
                counter = max(counter, int(line[len(COUNTER_PREFIX):].strip()))
            except ValueError:
                pass
            continue
        body.append(line)
    result = parse_lines(path, body, from_line)
    numbers = [a.number for a in result.records]
    result.last_sequence = max([counter, *numbers])
    return result


def append_appointment(path: Path, a: Appointment) -> None:
    append_line(path, to_line(a))


def save_appointments(path: Path, appointments: Iterable[Appointment], last_number: int) -> None:
    lines = [f"{COUNTER_PREFIX}{last_number}"]
    lines.extend(to_line(a) for a in appointments)
    write_lines(path, lines)
