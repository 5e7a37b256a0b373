"""In-memory record store that owns patients, appointments and prescriptions.

Every mutation is written through to the text files in the data directory
before it becomes visible in memory, so a failed write leaves the store as it
was. Creations append a single line; everything else rewrites the file.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence
import logging

from .data_store import appointments_store, patients_store, prescriptions_store
from .data_store.text_file import split_list
from .errors import DuplicatePatientIdError
from .models import Appointment, Patient, Prescription
from .models.appointment import format_id

logger = logging.getLogger('clinicease.store')

SORT_KEYS = ('date', 'id')
EDITABLE_PATIENT_FIELDS = ('name', 'dob', 'gender', 'address', 'contact')


def sort_by_date_time(appointments: List[Appointment]) -> None:
    appointments.sort(key=lambda a: a.date_time)


def sort_by_id(appointments: List[Appointment]) -> None:
    appointments.sort(key=lambda a: a.number)


@dataclass
class LoadReport:
    """Skipped-line counts per file from a best-effort load."""

    skipped: Dict[str, int] = field(default_factory=dict)

    @property
    def total_skipped(self) -> int:
        return sum(self.skipped.values())


class ManagementSystem:

    def __init__(
        self,
        data_dir: str | Path,
        patients: Optional[Sequence[Patient]] = None,
        appointments: Optional[Sequence[Appointment]] = None,
        prescriptions: Optional[Sequence[Prescription]] = None,
        *,
        last_appointment_number: int = 0,
        next_prescription_sequence: int = 1,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.data_dir = Path(data_dir)
        self._patients: List[Patient] = list(patients or [])
        self._appointments: List[Appointment] = list(appointments or [])
        self._prescriptions: List[Prescription] = list(prescriptions or [])
        numbers = [a.number for a in self._appointments]
        self._last_appointment_number = max([last_appointment_number, *numbers])
        sequences = [p.sequence for p in self._prescriptions]
        self._next_prescription_sequence = max([next_prescription_sequence, *(s + 1 for s in sequences)])
        self._clock = clock
        self.load_report = LoadReport()

    @classmethod
    def load(cls, data_dir: str | Path, **kwargs) -> "ManagementSystem":
        """Build a store from the files in ``data_dir``; raises StorageError if unreadable."""
        root = Path(data_dir)
        patients = patients_store.load_patients(root / patients_store.PATIENTS_FILE)
        appointments = appointments_store.load_appointments(root / appointments_store.APPOINTMENTS_FILE)
        prescriptions = prescriptions_store.load_prescriptions(root / prescriptions_store.PRESCRIPTIONS_FILE)
        system = cls(
            root,
            patients.records,
            appointments.records,
            prescriptions.records,
            last_appointment_number=appointments.last_sequence,
            next_prescription_sequence=prescriptions.last_sequence + 1,
            **kwargs,
        )
        system.load_report = LoadReport(skipped={
            patients_store.PATIENTS_FILE: patients.skipped,
            appointments_store.APPOINTMENTS_FILE: appointments.skipped,
            prescriptions_store.PRESCRIPTIONS_FILE: prescriptions.skipped,
        })
        logger.info(
            "Loaded %d patients, %d appointments, %d prescriptions (%d lines skipped)",
            len(system._patients), len(system._appointments), len(system._prescriptions),
            system.load_report.total_skipped,
        )
        return system

    @property
    def patients_path(self) -> Path:
        return self.data_dir / patients_store.PATIENTS_FILE

    @property
    def appointments_path(self) -> Path:
        return self.data_dir / appointments_store.APPOINTMENTS_FILE

    @property
    def prescriptions_path(self) -> Path:
        return self.data_dir / prescriptions_store.PRESCRIPTIONS_FILE

    @property
    def patients(self) -> List[Patient]:
        return list(self._patients)

    @property
    def appointments(self) -> List[Appointment]:
        return list(self._appointments)

    @property
    def prescriptions(self) -> List[Prescription]:
        return list(self._prescriptions)

    @property
    def next_prescription_sequence(self) -> int:
        return self._next_prescription_sequence

    # Patients
    def add_patient(self, patient: Patient) -> Patient:
        if self.view_patient(patient.id) is not None:
            raise DuplicatePatientIdError(patient.id)
        patients_store.append_patient(self.patients_path, patient)
        self._patients.append(patient)
        logger.info("Added patient %s", patient.id)
        return patient

    def view_patient(self, nric: str) -> Optional[Patient]:
        for patient in self._patients:
            if patient.id == nric:
                return patient
        return None

    def delete_patient(self, nric: str) -> Optional[Patient]:
        patient = self.view_patient(nric)
        if patient is None:
            return None
        remaining = [p for p in self._patients if p is not patient]
        patients_store.save_patients(self.patients_path, remaining)
        self._patients = remaining
        logger.info("Deleted patient %s", nric)
        return patient

    def find_patients_by_name(self, name: str) -> List[Patient]:
        wanted = name.strip().lower()
        return [p for p in self._patients if p.name.lower() == wanted]

    def _replace_patient(self, old: Patient, new: Patient) -> Patient:
        updated = [new if p is old else p for p in self._patients]
        patients_store.save_patients(self.patients_path, updated)
        self._patients = updated
        return new

    def edit_patient(self, nric: str, **fields: Optional[str]) -> Optional[Patient]:
        """Overwrite the given fields; None values leave the field untouched."""
        unknown = set(fields) - set(EDITABLE_PATIENT_FIELDS)
        if unknown:
            raise ValueError(f"Cannot edit patient fields: {', '.join(sorted(unknown))}")
        patient = self.view_patient(nric)
        if patient is None:
            return None
        changes = {k: v for k, v in fields.items() if v is not None}
        if not changes:
            return patient
        logger.info("Edited patient %s: %s", nric, ', '.join(sorted(changes)))
        return self._replace_patient(patient, replace(patient, **changes))

    def store_history(self, nric: str, entries: Sequence[str]) -> Optional[Patient]:
        patient = self.view_patient(nric)
        if patient is None:
            return None
        history = [*patient.medical_history, *entries]
        logger.info("Stored %d history entries for %s", len(entries), nric)
        return self._replace_patient(patient, replace(patient, medical_history=history))

    def edit_history(self, nric: str, old: str, new: str) -> bool:
        """Replace the first history entry equal to ``old``; False if there is none.

        ``new`` may list several comma-separated entries; they are spliced in
        at the position of the replaced one.
        """
        replacements = split_list(new)
        if not replacements:
            raise ValueError("replacement history entry cannot be empty")
        patient = self.view_patient(nric)
        if patient is None:
            return False
        wanted = old.strip().lower()
        history = list(patient.medical_history)
        for index, entry in enumerate(history):
            if entry.strip().lower() == wanted:
                history[index:index + 1] = replacements
                self._replace_patient(patient, replace(patient, medical_history=history))
                logger.info("Edited history entry %d for %s", index, nric)
                return True
        return False

    # Appointments
    def _find_appointment(self, appointment_id: str) -> Optional[Appointment]:
        wanted = appointment_id.strip().upper()
        for appointment in self._appointments:
            if appointment.id.upper() == wanted:
                return appointment
        return None

    def _save_appointments(self, appointments: List[Appointment]) -> None:
        appointments_store.save_appointments(
            self.appointments_path, appointments, self._last_appointment_number,
        )
        self._appointments = appointments

    def add_appointment(self, nric: str, date_time: datetime, description: str) -> Appointment:
        number = self._last_appointment_number + 1
        appointment = Appointment(format_id(number), nric, date_time, description)
        appointments_store.append_appointment(self.appointments_path, appointment)
        self._last_appointment_number = number
        self._appointments.append(appointment)
        logger.info("Added appointment %s for %s", appointment.id, nric)
        return appointment

    def delete_appointment(self, appointment_id: str) -> Optional[Appointment]:
        appointment = self._find_appointment(appointment_id)
        if appointment is None:
            return None
        self._save_appointments([a for a in self._appointments if a is not appointment])
        logger.info("Deleted appointment %s", appointment.id)
        return appointment

    def sort_appointments(self, key: str) -> List[Appointment]:
        if key not in SORT_KEYS:
            raise ValueError(f"Unknown sort key {key!r}")
        ordered = list(self._appointments)
        if key == 'date':
            sort_by_date_time(ordered)
        else:
            sort_by_id(ordered)
        self._save_appointments(ordered)
        return list(ordered)

    def _set_done(self, appointment_id: str, done: bool) -> Optional[Appointment]:
        appointment = self._find_appointment(appointment_id)
        if appointment is None:
            return None
        if appointment.done != done:
            updated = replace(appointment, done=done)
            self._save_appointments([updated if a is appointment else a for a in self._appointments])
            appointment = updated
            logger.info("Appointment %s done=%s", appointment.id, done)
        return appointment

    def mark_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self._set_done(appointment_id, True)

    def unmark_appointment(self, appointment_id: str) -> Optional[Appointment]:
        return self._set_done(appointment_id, False)

    def find_appointments(self, nric: str) -> List[Appointment]:
        return [a for a in self._appointments if a.nric == nric]

    # Prescriptions
    def add_prescription(
        self,
        patient_id: str,
        symptoms: Sequence[str],
        medicines: Sequence[str],
        notes: str = "",
    ) -> Optional[Prescription]:
        """Issue a prescription; returns None without recording anything for an unknown patient."""
        if self.view_patient(patient_id) is None:
            logger.info("Prescription skipped: unknown patient %s", patient_id)
            return None
        prescription = Prescription(
            patient_id=patient_id,
            sequence=self._next_prescription_sequence,
            date_time=self._clock().replace(second=0, microsecond=0),
            symptoms=list(symptoms),
            medicines=list(medicines),
            notes=notes,
        )
        prescriptions_store.append_prescription(self.prescriptions_path, prescription)
        self._next_prescription_sequence += 1
        self._prescriptions.append(prescription)
        logger.info("Added prescription %s", prescription.id)
        return prescription

    def find_prescription(self, prescription_id: str) -> Optional[Prescription]:
        for prescription in self._prescriptions:
            if prescription.id == prescription_id:
                return prescription
        return None

    def prescriptions_for_patient(self, patient_id: str) -> List[Prescription]:
        return [p for p in self._prescriptions if p.patient_id == patient_id]
