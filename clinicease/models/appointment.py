from __future__ import annotations
from dataclasses import dataclass
import datetime as dt
import re

ID_PREFIX = "A"
ID_RE = re.compile(r"^A([0-9]+)$", re.IGNORECASE)

# dt/ and t/ are typed separately on the command line, stored joined
INPUT_FORMAT = "%Y-%m-%d %H%M"
DISPLAY_FORMAT = "%d %b %Y %H:%M"


def format_id(number: int) -> str:
    return f"{ID_PREFIX}{number}"


def id_number(appointment_id: str) -> int:
    """Numeric suffix of an appointment id ("A12" -> 12)."""
    match = ID_RE.match(appointment_id.strip())
    if not match:
        raise ValueError(f"Invalid appointment id: {appointment_id!r}")
    return int(match.group(1))


@dataclass
class Appointment:
    id: str
    nric: str
    date_time: dt.datetime
    description: str
    done: bool = False

    @property
    def number(self) -> int:
        return id_number(self.id)

    @property
    def date(self) -> dt.date:
        return self.date_time.date()

    @property
    def time(self) -> dt.time:
        return self.date_time.time()

    def describe(self) -> str:
        status = "X" if self.done else " "
        when = self.date_time.strftime(DISPLAY_FORMAT)
        return f"[{status}] {self.id} - {self.nric} - {when} - {self.description}"
