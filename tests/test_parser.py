from __future__ import annotations

from datetime import datetime

import pytest

from clinicease import commands as cmd
from clinicease.errors import InvalidInputFormatError, UnknownCommandError
from clinicease.parser import parse, scan_fields


def test_add_patient_extracts_every_field():
    command = parse("add-patient n/John Doe ic/S1234567A dob/1990-01-01 g/M p/81234567 a/123 Main St")
    assert isinstance(command, cmd.AddPatient)
    p = command.patient
    assert (p.id, p.name, p.dob, p.gender, p.contact, p.address) == (
        "S1234567A", "John Doe", "1990-01-01", "M", "81234567", "123 Main St",
    )
    assert p.medical_history == []


def test_field_order_does_not_matter():
    a = parse("add-patient n/John Doe ic/S1234567A dob/1990-01-01 g/M p/81234567 a/123 Main St h/Asthma, Flu")
    b = parse("add-patient h/Asthma,Flu a/123 Main St p/81234567 g/M dob/1990-01-01 ic/S1234567A n/John Doe")
    assert a == b
    assert a.patient.medical_history == ["Asthma", "Flu"]


def test_verb_and_prefixes_are_case_insensitive():
    command = parse("ADD-Patient N/John IC/S1234567A DOB/1990-01-01 G/M P/81234567 A/Street 1")
    assert command.patient.id == "S1234567A"
    assert command.patient.address == "Street 1"


def test_missing_required_field_names_usage():
    with pytest.raises(InvalidInputFormatError) as info:
        parse("add-patient n/John Doe ic/S1234567A g/M p/81234567 a/123 Main St")
    message = str(info.value)
    assert "dob/" in message
    assert "add-patient n/NAME ic/NRIC" in message


def test_empty_value_counts_as_absent():
    with pytest.raises(InvalidInputFormatError):
        parse("add-prescription ic/S1234567A s/ m/Paracetamol")


def test_unknown_verb():
    with pytest.raises(UnknownCommandError):
        parse("launch-rocket now")


def test_prefix_inside_word_does_not_split_value():
    values = scan_fields("dsc/Review cat/scan at/clinic t/0900 a/Blk 5/Apt 3", ("dsc/", "t/", "a/"))
    assert values == {"dsc/": "Review cat/scan at/clinic", "t/": "0900", "a/": "Blk 5/Apt 3"}


def test_longer_prefix_wins_over_shorter_one():
    values = scan_fields("ic/S1 old/fever new/flu nt/take rest", ("ic/", "old/", "new/", "nt/", "n/", "t/"))
    assert values["old/"] == "fever"
    assert values["new/"] == "flu"
    assert values["nt/"] == "take rest"
    assert values["n/"] is None
    assert values["t/"] is None


def test_repeated_prefix_keeps_first_occurrence():
    assert scan_fields("n/Alice n/Bob ic/S1", ("n/", "ic/")) == {"n/": "Alice n/Bob", "ic/": "S1"}


def test_pipe_in_value_is_rejected():
    with pytest.raises(InvalidInputFormatError):
        parse("add-appointment ic/S1234567A dt/2025-03-20 t/0900 dsc/X-ray | ECG")


def test_invalid_birthdate_rejected():
    with pytest.raises(InvalidInputFormatError):
        parse("add-patient n/John ic/S1234567A dob/01-01-1990 g/M p/8123 a/Street")


def test_add_appointment_combines_date_and_time():
    command = parse("add-appointment ic/S1234567A dt/2025-03-20 t/1930 dsc/Medical checkup")
    assert command == cmd.AddAppointment("S1234567A", datetime(2025, 3, 20, 19, 30), "Medical checkup")


@pytest.mark.parametrize("line", [
    "add-appointment ic/S1234567A dt/2025-13-20 t/1930 dsc/Checkup",
    "add-appointment ic/S1234567A dt/2025-03-20 t/7pm dsc/Checkup",
    "add-appointment ic/S1234567A dt/2025-03-20 dsc/Checkup",
])
def test_add_appointment_rejects_bad_date_time(line):
    with pytest.raises(InvalidInputFormatError):
        parse(line)


def test_appointment_ids_are_validated_and_upper_cased():
    assert parse("delete-appointment a12") == cmd.DeleteAppointment("A12")
    assert parse("mark-appointment A3") == cmd.MarkAppointment("A3")
    assert parse("unmark-appointment a3") == cmd.UnmarkAppointment("A3")
    for line in ("delete-appointment 12", "mark-appointment", "unmark-appointment B1"):
        with pytest.raises(InvalidInputFormatError):
            parse(line)


def test_sort_keys():
    assert parse("sort-appointment byDate") == cmd.SortAppointments("date")
    assert parse("sort-appointment BYID") == cmd.SortAppointments("id")
    with pytest.raises(InvalidInputFormatError):
        parse("sort-appointment byName")


def test_view_history_detects_nric_or_name():
    assert parse("view-history S1234567A") == cmd.ViewHistory(True, "S1234567A")
    assert parse("view-history ic/S1234567A") == cmd.ViewHistory(True, "S1234567A")
    assert parse("view-history John Doe") == cmd.ViewHistory(False, "John Doe")
    with pytest.raises(InvalidInputFormatError):
        parse("view-history")


def test_edit_patient_only_requires_nric():
    command = parse("edit-patient ic/S1234567A p/99998888")
    assert command == cmd.EditPatient(nric="S1234567A", contact="99998888")
    with pytest.raises(InvalidInputFormatError):
        parse("edit-patient n/John")


def test_edit_history_needs_old_and_new():
    assert parse("edit-history ic/S1234567A old/Flu new/Influenza A") == cmd.EditHistory(
        "S1234567A", "Flu", "Influenza A",
    )
    with pytest.raises(InvalidInputFormatError):
        parse("edit-history ic/S1234567A old/Flu")


def test_add_prescription_splits_lists():
    command = parse("add-prescription ic/S1234567A s/Fever, Cough,, m/Paracetamol nt/rest")
    assert command == cmd.AddPrescription("S1234567A", ["Fever", "Cough"], ["Paracetamol"], "rest")
    assert parse("add-prescription ic/S1234567A s/Fever m/Paracetamol").notes == ""


def test_bare_argument_commands():
    assert parse("delete-patient S1234567A") == cmd.DeletePatient("S1234567A")
    assert parse("view-patient S1234567A") == cmd.ViewPatient("S1234567A")
    assert parse("find-appointment S1234567A") == cmd.FindAppointment("S1234567A")
    assert parse("view-prescription S1234567A-1") == cmd.ViewPrescription("S1234567A-1")
    assert parse("view-all-prescriptions S1234567A") == cmd.ViewAllPrescriptions("S1234567A")
    assert parse("export-prescription S1234567A-1") == cmd.ExportPrescription("S1234567A-1")
    assert parse("list-patient") == cmd.ListPatients()
    assert parse("bye") == cmd.Exit()
    with pytest.raises(InvalidInputFormatError):
        parse("view-patient   ")


def test_edit_history_rejects_empty_replacement():
    with pytest.raises(InvalidInputFormatError):
        parse("edit-history ic/S1234567A old/Flu new/ , ")


def test_appointment_ids_only_accept_ascii_digits():
    with pytest.raises(InvalidInputFormatError):
        parse("mark-appointment A١٢")
    assert parse("view-history S١٢٣٤٥٦٧A") == cmd.ViewHistory(
        False, "S١٢٣٤٥٦٧A",
    )
