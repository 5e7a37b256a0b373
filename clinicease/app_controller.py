from __future__ import annotations
from pathlib import Path
from typing import Callable, Dict, List, Optional
import logging

from . import commands as cmd
from .errors import ClinicEaseError, StorageError
from .export.html_report import write_prescription_html
from .export.pdf_report import build_prescription_pdf, pdf_filename
from .manager import ManagementSystem
from .models import Appointment, Patient
from .parser import USAGE, parse
from .ui.console import Console
from .version import __version__

logger = logging.getLogger('clinicease.app')


def open_system(data_dir: str | Path, console: Console) -> ManagementSystem:
    """Load saved records; an unreadable data directory starts an empty store."""
    try:
        system = ManagementSystem.load(data_dir)
    except StorageError as exc:
        logger.error("Could not load data from %s: %s", data_dir, exc)
        console.show_error(f"Could not load data: {exc}")
        return ManagementSystem(data_dir)
    skipped = system.load_report.total_skipped
    if skipped:
        details = ", ".join(f"{name}: {count}" for name, count in system.load_report.skipped.items() if count)
        console.show_error(f"Skipped {skipped} unreadable saved line(s) ({details}).")
    return system


def _appointment_list(title: str, appointments: List[Appointment]) -> str:
    lines = [title]
    lines.extend(f"{i}. {a.describe()}" for i, a in enumerate(appointments, start=1))
    return "\n".join(lines)


class AppController:
    """Executes parsed commands against the store and renders the results."""

    def __init__(self, system: ManagementSystem, console: Console, prescriptions_dir: str | Path) -> None:
        self.system = system
        self.ui = console
        self.prescriptions_dir = Path(prescriptions_dir)
        self._handlers: Dict[type, Callable] = {
            cmd.Help: self._help,
            cmd.AddPatient: self._add_patient,
            cmd.DeletePatient: self._delete_patient,
            cmd.ViewPatient: self._view_patient,
            cmd.ListPatients: self._list_patients,
            cmd.StoreHistory: self._store_history,
            cmd.ViewHistory: self._view_history,
            cmd.EditPatient: self._edit_patient,
            cmd.EditHistory: self._edit_history,
            cmd.AddAppointment: self._add_appointment,
            cmd.DeleteAppointment: self._delete_appointment,
            cmd.ListAppointments: self._list_appointments,
            cmd.SortAppointments: self._sort_appointments,
            cmd.MarkAppointment: self._mark_appointment,
            cmd.UnmarkAppointment: self._unmark_appointment,
            cmd.FindAppointment: self._find_appointment,
            cmd.AddPrescription: self._add_prescription,
            cmd.ViewPrescription: self._view_prescription,
            cmd.ViewAllPrescriptions: self._view_all_prescriptions,
            cmd.ExportPrescription: self._export_prescription,
        }

    def execute(self, command: object) -> bool:
        """Run one command; returns False once the session should end."""
        if isinstance(command, cmd.Exit):
            return False
        self._handlers[type(command)](command)
        return True

    def handle_line(self, line: str) -> bool:
        try:
            return self.execute(parse(line))
        except ClinicEaseError as exc:
            logger.info("Command failed: %s", exc)
            self.ui.show_error(str(exc))
            return True

    def run(self) -> None:
        self.ui.show_welcome(__version__)
        while True:
            line = self.ui.read_command()
            if line is None or not self.handle_line(line):
                break
        self.ui.show_goodbye()

    # -------- patients --------
    def _help(self, _command: cmd.Help) -> None:
        self.ui.show_info("Available commands:\n" + "\n".join(f"  {usage}" for usage in USAGE.values()))

    def _add_patient(self, command: cmd.AddPatient) -> None:
        patient = self.system.add_patient(command.patient)
        self.ui.show_info(f"Patient added successfully:\n{patient.describe()}")

    def _delete_patient(self, command: cmd.DeletePatient) -> None:
        patient = self.system.delete_patient(command.nric)
        if patient is None:
            self.ui.show_info(f"Patient with NRIC {command.nric} not found.")
        else:
            self.ui.show_info(f"Patient removed: {patient.name} ({patient.id})")

    def _view_patient(self, command: cmd.ViewPatient) -> None:
        patient = self.system.view_patient(command.nric)
        if patient is None:
            self.ui.show_info(f"Patient with NRIC {command.nric} not found.")
        else:
            self.ui.show_info(patient.describe())

    def _list_patients(self, _command: cmd.ListPatients) -> None:
        patients = self.system.patients
        if not patients:
            self.ui.show_info("No patients found.")
            return
        lines = ["Patient list:"]
        lines.extend(f"{i}. {p.name} ({p.id})" for i, p in enumerate(patients, start=1))
        self.ui.show_info("\n".join(lines))

    def _store_history(self, command: cmd.StoreHistory) -> None:
        patient = self.system.store_history(command.nric, command.entries)
        if patient is None:
            self.ui.show_info(f"Patient with NRIC {command.nric} not found.")
        else:
            self.ui.show_info(f"Medical history updated for {patient.name} ({patient.id}):\n{patient.history_text()}")

    def _view_history(self, command: cmd.ViewHistory) -> None:
        matches: List[Patient]
        if command.by_nric:
            patient = self.system.view_patient(command.value)
            matches = [patient] if patient else []
        else:
            matches = self.system.find_patients_by_name(command.value)
        if not matches:
            self.ui.show_info(f"No patient found for '{command.value}'.")
            return
        lines = [f"Medical history of {p.name} ({p.id}): {p.history_text()}" for p in matches]
        self.ui.show_info("\n".join(lines))

    def _edit_patient(self, command: cmd.EditPatient) -> None:
        patient = self.system.edit_patient(
            command.nric,
            name=command.name,
            dob=command.dob,
            gender=command.gender,
            address=command.address,
            contact=command.contact,
        )
        if patient is None:
            self.ui.show_info(f"Patient with NRIC {command.nric} not found.")
        else:
            self.ui.show_info(f"Patient details updated:\n{patient.describe()}")

    def _edit_history(self, command: cmd.EditHistory) -> None:
        if self.system.view_patient(command.nric) is None:
            self.ui.show_info(f"Patient with NRIC {command.nric} not found.")
        elif self.system.edit_history(command.nric, command.old, command.new):
            self.ui.show_info(f"Medical history updated: '{command.old}' -> '{command.new}'")
        else:
            self.ui.show_info(f"No history entry '{command.old}' for patient {command.nric}.")

    # -------- appointments --------
    def _add_appointment(self, command: cmd.AddAppointment) -> None:
        appointment = self.system.add_appointment(command.nric, command.date_time, command.description)
        count = len(self.system.appointments)
        self.ui.show_info(f"Appointment added:\n{appointment.describe()}\nNow you have {count} appointment(s).")

    def _delete_appointment(self, command: cmd.DeleteAppointment) -> None:
        appointment = self.system.delete_appointment(command.appointment_id)
        if appointment is None:
            self.ui.show_info(f"Appointment {command.appointment_id} not found.")
        else:
            self.ui.show_info(f"Appointment removed:\n{appointment.describe()}")

    def _list_appointments(self, _command: cmd.ListAppointments) -> None:
        appointments = self.system.appointments
        if not appointments:
            self.ui.show_info("No appointments found.")
        else:
            self.ui.show_info(_appointment_list("Here are your appointments:", appointments))

    def _sort_appointments(self, command: cmd.SortAppointments) -> None:
        ordered = self.system.sort_appointments(command.key)
        label = "date and time" if command.key == 'date' else "appointment ID"
        if not ordered:
            self.ui.show_info("No appointments to sort.")
        else:
            self.ui.show_info(_appointment_list(f"Appointments sorted by {label}:", ordered))

    def _mark_appointment(self, command: cmd.MarkAppointment) -> None:
        self._report_mark(self.system.mark_appointment(command.appointment_id), command.appointment_id, "done")

    def _unmark_appointment(self, command: cmd.UnmarkAppointment) -> None:
        self._report_mark(self.system.unmark_appointment(command.appointment_id), command.appointment_id, "not done")

    def _report_mark(self, appointment: Optional[Appointment], appointment_id: str, state: str) -> None:
        if appointment is None:
            self.ui.show_info(f"Appointment {appointment_id} not found.")
        else:
            self.ui.show_info(f"Appointment marked as {state}:\n{appointment.describe()}")

    def _find_appointment(self, command: cmd.FindAppointment) -> None:
        found = self.system.find_appointments(command.nric)
        if not found:
            self.ui.show_info(f"No appointments found for NRIC {command.nric}.")
        else:
            self.ui.show_info(_appointment_list(f"Appointments for {command.nric}:", found))

    # -------- prescriptions --------
    def _add_prescription(self, command: cmd.AddPrescription) -> None:
        prescription = self.system.add_prescription(
            command.patient_id, command.symptoms, command.medicines, command.notes,
        )
        if prescription is None:
            self.ui.show_info(f"Patient with ID {command.patient_id} not found.")
            return
        self.ui.show_info(
            f"Successfully added prescription:\n{prescription.describe()}\n\n"
            f"Use 'view-prescription {prescription.id}' to generate a printable copy."
        )

    def _view_prescription(self, command: cmd.ViewPrescription) -> None:
        found = self._prescription_with_patient(command.prescription_id)
        if found is None:
            return
        prescription, patient = found
        path = write_prescription_html(prescription, patient, self.prescriptions_dir)
        logger.info("Wrote %s", path)
        self.ui.show_info(
            f"Prescription details:\n{prescription.describe()}\n\n"
            f"Prescription HTML file generated at: {path.resolve()}\n"
            "Open this file in a web browser to view and print the prescription."
        )

    def _export_prescription(self, command: cmd.ExportPrescription) -> None:
        found = self._prescription_with_patient(command.prescription_id)
        if found is None:
            return
        prescription, patient = found
        path = build_prescription_pdf(self.prescriptions_dir / pdf_filename(prescription), prescription, patient)
        logger.info("Wrote %s", path)
        self.ui.show_info(f"Prescription PDF generated at: {path.resolve()}")

    def _prescription_with_patient(self, prescription_id: str):
        prescription = self.system.find_prescription(prescription_id)
        if prescription is None:
            self.ui.show_info(f"Prescription with ID {prescription_id} not found.")
            return None
        patient = self.system.view_patient(prescription.patient_id)
        if patient is None:
            self.ui.show_info(f"Patient with ID {prescription.patient_id} not found.")
            return None
        return prescription, patient

    def _view_all_prescriptions(self, command: cmd.ViewAllPrescriptions) -> None:
        patient = self.system.view_patient(command.patient_id)
        if patient is None:
            self.ui.show_info(f"Patient with ID {command.patient_id} not found.")
            return
        prescriptions = self.system.prescriptions_for_patient(patient.id)
        if not prescriptions:
            self.ui.show_info(f"No prescriptions found for patient {patient.name} ({patient.id}).")
            return
        lines = [f"Prescriptions for patient {patient.name} ({patient.id}):", ""]
        for prescription in prescriptions:
            lines.extend([prescription.describe(), ""])
        lines.append(f"Total prescriptions: {len(prescriptions)}")
        lines.append("Use 'view-prescription PRESCRIPTION_ID' to view details and generate HTML.")
        self.ui.show_info("\n".join(lines))
