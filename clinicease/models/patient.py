from __future__ import annotations
from dataclasses import dataclass, field
from typing import List


@dataclass
class Patient:
    id: str
    name: str
    dob: str  # ISO YYYY-MM-DD
    gender: str
    address: str
    contact: str
    medical_history: List[str] = field(default_factory=list)

    def history_text(self) -> str:
        return ", ".join(self.medical_history) if self.medical_history else "None"

    def describe(self) -> str:
        return "\n".join([
            f"Patient NRIC: {self.id}",
            f"Name: {self.name}",
            f"Date of Birth: {self.dob}",
            f"Gender: {self.gender}",
            f"Address: {self.address}",
            f"Contact: {self.contact}",
            f"Medical History: {self.history_text()}",
        ])
