from .patient import Patient
from .appointment import Appointment
from .prescription import Prescription

__all__ = ["Patient", "Appointment", "Prescription"]
