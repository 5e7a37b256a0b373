from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import List

DATETIME_FORMAT = "%Y-%m-%d %H:%M"


@dataclass(frozen=True)
class Prescription:
    """Prescription issued to a patient; never modified once created."""

    patient_id: str
    sequence: int
    date_time: datetime
    symptoms: List[str] = field(default_factory=list)
    medicines: List[str] = field(default_factory=list)
    notes: str = ""

    @property
    def id(self) -> str:
        return f"{self.patient_id}-{self.sequence}"

    @property
    def issued_at(self) -> str:
        return self.date_time.strftime(DATETIME_FORMAT)

    def describe(self) -> str:
        lines = [f"Prescription [{self.id}] ({self.issued_at})", f"Patient ID: {self.patient_id}"]
        for title, items in (("Symptoms", self.symptoms), ("Medicines", self.medicines)):
            if not items:
                lines.append(f"{title}: None")
                continue
            lines.append(f"{title}:")
            lines.extend(f"- {item}" for item in items)
        lines.append(f"Notes: {self.notes or 'None'}")
        return "\n".join(lines)
