"""Typed command values produced by the parser, one per verb."""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from .models import Patient


@dataclass(frozen=True)
class Exit:
    pass


@dataclass(frozen=True)
class Help:
    pass


@dataclass(frozen=True)
class AddPatient:
    patient: Patient


@dataclass(frozen=True)
class DeletePatient:
    nric: str


@dataclass(frozen=True)
class ViewPatient:
    nric: str


@dataclass(frozen=True)
class ListPatients:
    pass


@dataclass(frozen=True)
class StoreHistory:
    name: str
    nric: str
    entries: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class ViewHistory:
    by_nric: bool
    value: str


@dataclass(frozen=True)
class EditPatient:
    nric: str
    name: Optional[str] = None
    dob: Optional[str] = None
    gender: Optional[str] = None
    address: Optional[str] = None
    contact: Optional[str] = None


@dataclass(frozen=True)
class EditHistory:
    nric: str
    old: str
    new: str


@dataclass(frozen=True)
class AddAppointment:
    nric: str
    date_time: datetime
    description: str


@dataclass(frozen=True)
class DeleteAppointment:
    appointment_id: str


@dataclass(frozen=True)
class ListAppointments:
    pass


@dataclass(frozen=True)
class SortAppointments:
    key: str  # "date" or "id"


@dataclass(frozen=True)
class MarkAppointment:
    appointment_id: str


@dataclass(frozen=True)
class UnmarkAppointment:
    appointment_id: str


@dataclass(frozen=True)
class FindAppointment:
    nric: str


@dataclass(frozen=True)
class AddPrescription:
    patient_id: str
    symptoms: List[str] = field(default_factory=list)
    medicines: List[str] = field(default_factory=list)
    notes: str = ""


@dataclass(frozen=True)
class ViewPrescription:
    prescription_id: str


@dataclass(frozen=True)
class ViewAllPrescriptions:
    patient_id: str


@dataclass(frozen=True)
class ExportPrescription:
    prescription_id: str
