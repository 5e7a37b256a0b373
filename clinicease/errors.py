"""Errors surfaced to the user as a one-line message by the command loop."""

from __future__ import annotations


class ClinicEaseError(Exception):
    """Base class for every error the command loop reports and survives."""


class InvalidInputFormatError(ClinicEaseError):
    """Command line is missing a required field or a field is malformed."""


class UnknownCommandError(ClinicEaseError):
    """First word of the input is not a known command."""


class DuplicatePatientIdError(ClinicEaseError):
    """A patient with the same NRIC is already registered."""

    def __init__(self, patient_id: str) -> None:
        self.patient_id = patient_id
        super().__init__(f"A patient with NRIC {patient_id} already exists.")


class StorageError(ClinicEaseError):
    """Data directory or one of its files cannot be read or written."""
