from __future__ import annotations

import pytest

from clinicease.main import main

ADD_JOHN = "add-patient n/John Doe ic/S1234567A dob/1990-01-01 g/M p/81234567 a/123 Main St"


@pytest.fixture
def run(console_session, tmp_path):
    data = tmp_path / "data"
    rx = tmp_path / "rx"

    def _run(*lines: str) -> str:
        console, out = console_session(list(lines))
        assert main(["--data-dir", str(data), "--prescriptions-dir", str(rx)], console=console) == 0
        return out.getvalue()

    _run.data = data
    _run.rx = rx
    return _run


def test_prescription_scenario(run):
    out = run(
        ADD_JOHN,
        "add-prescription ic/S1234567A s/Fever,Cough m/Paracetamol nt/rest",
        "view-prescription S1234567A-1",
        "bye",
    )
    assert "Patient added successfully" in out
    assert "Prescription [S1234567A-1]" in out
    assert "- Fever\n- Cough" in out
    assert "Notes: rest" in out
    html = run.rx / "prescription_S1234567A-1.html"
    assert html.is_file()
    assert "Prescription HTML file generated at" in out


def test_records_persist_between_sessions(run):
    run(ADD_JOHN, "add-prescription ic/S1234567A s/Fever m/Paracetamol", "add-appointment ic/S1234567A dt/2025-03-20 t/0930 dsc/Checkup")
    out = run(
        "view-all-prescriptions S1234567A",
        "add-prescription ic/S1234567A s/Cough m/Lozenges",
        "list-appointment",
        "view-patient S1234567A",
    )
    assert "Total prescriptions: 1" in out
    assert "Prescription [S1234567A-2]" in out
    assert "A1 - S1234567A - 20 Mar 2025 09:30 - Checkup" in out
    assert "Name: John Doe" in out
    assert "Goodbye" in out


def test_errors_do_not_end_the_session(run):
    out = run(
        "fly-away",
        "add-patient n/John",
        ADD_JOHN,
        ADD_JOHN,
        "list-patient",
        "bye",
    )
    assert "Error: Unknown command 'fly-away'" in out
    assert "Error: Missing ic/, dob/, g/, p/, a/." in out
    assert "Error: A patient with NRIC S1234567A already exists." in out
    assert "1. John Doe (S1234567A)" in out


def test_not_found_is_informational(run):
    out = run(
        "delete-patient S0000000Z",
        "add-prescription ic/S0000000Z s/Fever m/Paracetamol",
        "mark-appointment A9",
        "view-prescription S0000000Z-1",
        "bye",
    )
    assert "Patient with NRIC S0000000Z not found." in out
    assert "Patient with ID S0000000Z not found." in out
    assert "Appointment A9 not found." in out
    assert "Prescription with ID S0000000Z-1 not found." in out
    assert "Error" not in out
    assert not (run.data / "prescription_data.txt").exists()


def test_history_and_appointment_commands(run):
    out = run(
        ADD_JOHN,
        "store-history n/John Doe ic/S1234567A h/Diabetes, Hypertension",
        "edit-history ic/S1234567A old/hypertension new/High blood pressure",
        "view-history John Doe",
        "edit-patient ic/S1234567A p/99998888",
        "add-appointment ic/S1234567A dt/2025-03-25 t/1900 dsc/Checkup",
        "add-appointment ic/S1234567A dt/2025-03-24 t/1200 dsc/CT scan",
        "sort-appointment byDate",
        "mark-appointment a2",
        "find-appointment S1234567A",
        "delete-appointment A1",
        "bye",
    )
    assert "Medical history of John Doe (S1234567A): Diabetes, High blood pressure" in out
    assert "Contact: 99998888" in out
    assert "Appointments sorted by date and time:\n1. [ ] A2" in out
    assert "Appointment marked as done:\n[X] A2" in out
    assert "Appointment removed:\n[ ] A1" in out


def test_export_prescription_pdf(run):
    out = run(ADD_JOHN, "add-prescription ic/S1234567A s/Fever m/Paracetamol", "export-prescription S1234567A-1")
    assert (run.rx / "prescription_S1234567A-1.pdf").read_bytes().startswith(b"%PDF")
    assert "Prescription PDF generated at" in out


def test_corrupt_saved_lines_are_reported(run):
    run.data.mkdir()
    (run.data / "patient_data.txt").write_text(
        "S1234567A|John Doe|1990-01-01|M|123 Main St|81234567|\nbroken line\n", encoding="utf-8",
    )
    out = run("list-patient", "bye")
    assert "Skipped 1 unreadable saved line(s) (patient_data.txt: 1)" in out
    assert "1. John Doe (S1234567A)" in out


def test_unreadable_data_starts_empty(run):
    (run.data / "patient_data.txt").mkdir(parents=True)
    out = run("list-patient", "bye")
    assert "Error: Could not load data" in out
    assert "No patients found." in out


def test_help_lists_commands(run):
    out = run("help")
    assert "add-prescription ic/NRIC s/SYMPTOMS m/MEDICINES [nt/NOTES]" in out
    assert "sort-appointment byDate | sort-appointment byId" in out
