# Order matters: clinics first (no deps), then users (refs clinics),
# then business tables that ref both.
from src.models.clinic_db import Clinic
from src.models.user_db import User, USER_TYPES
from src.models.patient_db import Patient, GENDERS, PATIENT_STATUSES
from src.models.appointments_db import Appointment, APPOINTMENT_STATUSES, APPOINTMENT_TYPES
from src.models.documents_db import Document, DOCUMENT_TYPES, ASSIGNED_TO_TYPES
from src.models.medicines_db import Medicine

__all__ = [
    "Clinic",
    "User",
    "Patient",
    "Appointment",
    "Document",
    "Medicine",
    "USER_TYPES",
    "GENDERS",
    "PATIENT_STATUSES",
    "APPOINTMENT_STATUSES",
    "APPOINTMENT_TYPES",
    "DOCUMENT_TYPES",
    "ASSIGNED_TO_TYPES",
]
