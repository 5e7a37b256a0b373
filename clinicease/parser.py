"""Turn one input line into a typed command.

Field-based commands are described by a small grammar: an ordered tuple of
``Field(token, key, required)``. ``scan_fields`` finds every recognised prefix
token that sits at the start of the text or right after whitespace; a field's
value runs up to the next such token of a *different* kind, so ``dt/`` inside
``dsc/...`` text or ``t/`` glued to a word never split a value.
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Dict, List, Optional, Tuple
import logging
import re

from . import commands as cmd
from .data_store.text_file import FIELD_SEP, split_list
from .errors import InvalidInputFormatError, UnknownCommandError
from .models import Patient
from .models.appointment import ID_RE, INPUT_FORMAT

logger = logging.getLogger('clinicease.parser')

PREFIXES = ('n/', 'ic/', 'dob/', 'g/', 'p/', 'a/', 'dt/', 't/', 'dsc/', 'h/', 'old/', 'new/', 's/', 'm/', 'nt/')

# longest first so "new/" and "nt/" win over "n/" at the same offset
_PREFIX_RE = re.compile(
    r'(?:(?<=\s)|^)(' + '|'.join(re.escape(p) for p in sorted(PREFIXES, key=len, reverse=True)) + ')',
    re.IGNORECASE,
)
_NRIC_RE = re.compile(r'^[A-Za-z][0-9]{7}[A-Za-z]$')


@dataclass(frozen=True)
class Field:
    token: str
    key: str
    required: bool = True


@dataclass(frozen=True)
class Grammar:
    usage: str
    fields: Tuple[Field, ...]


ADD_PATIENT = Grammar(
    'add-patient n/NAME ic/NRIC dob/BIRTHDATE g/GENDER p/PHONE a/ADDRESS [h/HISTORY,...]',
    (
        Field('n/', 'name'),
        Field('ic/', 'nric'),
        Field('dob/', 'dob'),
        Field('g/', 'gender'),
        Field('p/', 'contact'),
        Field('a/', 'address'),
        Field('h/', 'history', required=False),
    ),
)
STORE_HISTORY = Grammar(
    'store-history n/NAME ic/NRIC h/MEDICAL_HISTORY',
    (Field('n/', 'name'), Field('ic/', 'nric'), Field('h/', 'history')),
)
EDIT_PATIENT = Grammar(
    'edit-patient ic/NRIC [n/NAME] [dob/BIRTHDATE] [g/GENDER] [a/ADDRESS] [p/PHONE]',
    (
        Field('ic/', 'nric'),
        Field('n/', 'name', required=False),
        Field('dob/', 'dob', required=False),
        Field('g/', 'gender', required=False),
        Field('a/', 'address', required=False),
        Field('p/', 'contact', required=False),
    ),
)
EDIT_HISTORY = Grammar(
    'edit-history ic/NRIC old/OLD_HISTORY new/NEW_HISTORY',
    (Field('ic/', 'nric'), Field('old/', 'old'), Field('new/', 'new')),
)
ADD_APPOINTMENT = Grammar(
    'add-appointment ic/NRIC dt/DATE t/TIME dsc/DESCRIPTION',
    (Field('ic/', 'nric'), Field('dt/', 'date'), Field('t/', 'time'), Field('dsc/', 'description')),
)
ADD_PRESCRIPTION = Grammar(
    'add-prescription ic/NRIC s/SYMPTOMS m/MEDICINES [nt/NOTES]',
    (
        Field('ic/', 'nric'),
        Field('s/', 'symptoms'),
        Field('m/', 'medicines'),
        Field('nt/', 'notes', required=False),
    ),
)

USAGE: Dict[str, str] = {
    'add-patient': ADD_PATIENT.usage,
    'delete-patient': 'delete-patient NRIC',
    'view-patient': 'view-patient NRIC',
    'list-patient': 'list-patient',
    'store-history': STORE_HISTORY.usage,
    'view-history': 'view-history NRIC | view-history NAME | view-history ic/NRIC',
    'edit-patient': EDIT_PATIENT.usage,
    'edit-history': EDIT_HISTORY.usage,
    'add-appointment': ADD_APPOINTMENT.usage,
    'delete-appointment': 'delete-appointment APPOINTMENT_ID',
    'list-appointment': 'list-appointment',
    'sort-appointment': 'sort-appointment byDate | sort-appointment byId',
    'mark-appointment': 'mark-appointment APPOINTMENT_ID',
    'unmark-appointment': 'unmark-appointment APPOINTMENT_ID',
    'find-appointment': 'find-appointment NRIC',
    'add-prescription': ADD_PRESCRIPTION.usage,
    'view-prescription': 'view-prescription PRESCRIPTION_ID',
    'view-all-prescriptions': 'view-all-prescriptions NRIC',
    'export-prescription': 'export-prescription PRESCRIPTION_ID',
    'help': 'help',
    'bye': 'bye',
}


def _usage_error(verb: str, reason: str) -> InvalidInputFormatError:
    return InvalidInputFormatError(f"{reason} Please use: {USAGE[verb]}")


def scan_fields(text: str, tokens: Tuple[str, ...] | List[str]) -> Dict[str, Optional[str]]:
    """Map each token to its trimmed value, or None when absent or empty."""
    found = [(m.start(), m.end(), m.group(1).lower()) for m in _PREFIX_RE.finditer(text)]
    values: Dict[str, Optional[str]] = {}
    for token in tokens:
        token = token.lower()
        first = next((occ for occ in found if occ[2] == token), None)
        if first is None:
            values[token] = None
            continue
        value_start = first[1]
        value_end = next(
            (start for start, _end, other in found if start >= value_start and other != token),
            len(text),
        )
        value = text[value_start:value_end].strip()
        values[token] = value or None
    return values


def parse_fields(verb: str, text: str, grammar: Grammar) -> Dict[str, Optional[str]]:
    raw = scan_fields(text, [f.token for f in grammar.fields])
    values = {f.key: raw[f.token] for f in grammar.fields}
    missing = [f.token for f in grammar.fields if f.required and values[f.key] is None]
    if missing:
        raise _usage_error(verb, f"Missing {', '.join(missing)}.")
    for key, value in values.items():
        if value is not None and FIELD_SEP in value:
            raise _usage_error(verb, f"Field '{key}' cannot contain '{FIELD_SEP}'.")
    return values


def _require_arg(verb: str, rest: str, what: str) -> str:
    value = rest.strip()
    if not value:
        raise _usage_error(verb, f"{what} cannot be empty!")
    return value


def _appointment_id(verb: str, rest: str) -> str:
    value = rest.strip()
    if not ID_RE.match(value):
        raise _usage_error(verb, "Invalid appointment ID.")
    return value.upper()


def _check_dob(verb: str, value: Optional[str]) -> None:
    if value is None:
        return
    try:
        date.fromisoformat(value)
    except ValueError:
        raise _usage_error(verb, f"Invalid birthdate {value!r}, expected yyyy-MM-dd.") from None


def _parse_add_patient(verb: str, rest: str) -> cmd.AddPatient:
    v = parse_fields(verb, rest, ADD_PATIENT)
    _check_dob(verb, v['dob'])
    return cmd.AddPatient(Patient(
        id=v['nric'],
        name=v['name'],
        dob=v['dob'],
        gender=v['gender'],
        address=v['address'],
        contact=v['contact'],
        medical_history=split_list(v['history'] or ''),
    ))


def _parse_store_history(verb: str, rest: str) -> cmd.StoreHistory:
    v = parse_fields(verb, rest, STORE_HISTORY)
    entries = split_list(v['history'])
    if not entries:
        raise _usage_error(verb, "Medical history cannot be empty!")
    return cmd.StoreHistory(name=v['name'], nric=v['nric'], entries=entries)


def _parse_view_history(verb: str, rest: str) -> cmd.ViewHistory:
    text = rest.strip()
    if text.lower().startswith('ic/'):
        nric = scan_fields(text, ('ic/',))['ic/']
        if nric is None:
            raise _usage_error(verb, "NRIC cannot be empty!")
        return cmd.ViewHistory(by_nric=True, value=nric)
    value = _require_arg(verb, text, "NRIC or name")
    return cmd.ViewHistory(by_nric=bool(_NRIC_RE.match(value)), value=value)


def _parse_edit_patient(verb: str, rest: str) -> cmd.EditPatient:
    v = parse_fields(verb, rest, EDIT_PATIENT)
    _check_dob(verb, v['dob'])
    return cmd.EditPatient(**v)


def _parse_edit_history(verb: str, rest: str) -> cmd.EditHistory:
    v = parse_fields(verb, rest, EDIT_HISTORY)
    if not split_list(v['new']):
        raise _usage_error(verb, "New medical history cannot be empty!")
    return cmd.EditHistory(**v)


def _parse_add_appointment(verb: str, rest: str) -> cmd.AddAppointment:
    v = parse_fields(verb, rest, ADD_APPOINTMENT)
    try:
        when = datetime.strptime(f"{v['date']} {v['time']}", INPUT_FORMAT)
    except ValueError:
        raise _usage_error(verb, "Invalid date/time format, expected dt/yyyy-MM-dd and t/HHmm.") from None
    return cmd.AddAppointment(nric=v['nric'], date_time=when, description=v['description'])


def _parse_sort(verb: str, rest: str) -> cmd.SortAppointments:
    key = {'bydate': 'date', 'byid': 'id'}.get(rest.strip().lower())
    if key is None:
        raise _usage_error(verb, "Unknown sort order.")
    return cmd.SortAppointments(key)


def _parse_add_prescription(verb: str, rest: str) -> cmd.AddPrescription:
    v = parse_fields(verb, rest, ADD_PRESCRIPTION)
    return cmd.AddPrescription(
        patient_id=v['nric'],
        symptoms=split_list(v['symptoms']),
        medicines=split_list(v['medicines']),
        notes=v['notes'] or '',
    )


_PARSERS: Dict[str, Callable[[str, str], object]] = {
    'bye': lambda verb, rest: cmd.Exit(),
    'help': lambda verb, rest: cmd.Help(),
    'add-patient': _parse_add_patient,
    'delete-patient': lambda verb, rest: cmd.DeletePatient(_require_arg(verb, rest, "NRIC")),
    'view-patient': lambda verb, rest: cmd.ViewPatient(_require_arg(verb, rest, "NRIC")),
    'list-patient': lambda verb, rest: cmd.ListPatients(),
    'store-history': _parse_store_history,
    'view-history': _parse_view_history,
    'edit-patient': _parse_edit_patient,
    'edit-history': _parse_edit_history,
    'add-appointment': _parse_add_appointment,
    'delete-appointment': lambda verb, rest: cmd.DeleteAppointment(_appointment_id(verb, rest)),
    'list-appointment': lambda verb, rest: cmd.ListAppointments(),
    'sort-appointment': _parse_sort,
    'mark-appointment': lambda verb, rest: cmd.MarkAppointment(_appointment_id(verb, rest)),
    'unmark-appointment': lambda verb, rest: cmd.UnmarkAppointment(_appointment_id(verb, rest)),
    'find-appointment': lambda verb, rest: cmd.FindAppointment(_require_arg(verb, rest, "NRIC")),
    'add-prescription': _parse_add_prescription,
    'view-prescription': lambda verb, rest: cmd.ViewPrescription(_require_arg(verb, rest, "Prescription ID")),
    'view-all-prescriptions': lambda verb, rest: cmd.ViewAllPrescriptions(_require_arg(verb, rest, "Patient ID")),
    'export-prescription': lambda verb, rest: cmd.ExportPrescription(_require_arg(verb, rest, "Prescription ID")),
}


def parse(line: str) -> object:
    """Parse a raw input line; raises UnknownCommandError or InvalidInputFormatError."""
    parts = line.strip().split(None, 1)
    if not parts:
        raise UnknownCommandError("Unknown command. Please try again.")
    verb = parts[0].lower()
    rest = parts[1] if len(parts) > 1 else ''
    handler = _PARSERS.get(verb)
    if handler is None:
        raise UnknownCommandError(f"Unknown command '{parts[0]}'. Type 'help' to list commands.")
    command = handler(verb, rest)
    logger.debug("Parsed %s -> %s", verb, type(command).__name__)
    return command
