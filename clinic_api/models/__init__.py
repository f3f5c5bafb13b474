from clinic_api.models.patient_db import Patient
from clinic_api.models.doctor_db import Doctor
from clinic_api.models.clinic_db import Clinic, WorkAt
from clinic_api.models.work_shift_db import WorkShift, DAYS_OF_WEEK
from clinic_api.models.appointments_db import (
    Appointment,
    appointment_attendees,
    STATUS_SCHEDULED,
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    VALID_STATUSES,
)
from clinic_api.models.medicine_db import Medicine
from clinic_api.models.user_db import User, ROLES

__all__ = [
    "Patient",
    "Doctor",
    "Clinic",
    "WorkAt",
    "WorkShift",
    "DAYS_OF_WEEK",
    "Appointment",
    "appointment_attendees",
    "STATUS_SCHEDULED",
    "STATUS_CANCELLED",
    "STATUS_COMPLETED",
    "VALID_STATUSES",
    "Medicine",
    "User",
    "ROLES",
]
