"""
Request payloads.

Update models list the only fields a client may change; unknown keys are
rejected instead of being merged into the stored record.
"""
import re
from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from clinic_api.errors import ValidationFailure
from clinic_api.models import DAYS_OF_WEEK, ROLES


def parse_payload(model, payload):
    """Validate a JSON body against ``model`` or raise ``invalid_request``."""
    try:
        return model.model_validate(payload or {})
    except ValidationError as e:
        first = e.errors()[0]
        where = ".".join(str(p) for p in first.get("loc", ())) or "body"
        raise ValidationFailure(
            ValidationFailure.INVALID_REQUEST, f"{where}: {first.get('msg')}"
        ) from e


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid", populate_by_name=True)


# -------------------------------
# APPOINTMENTS
# -------------------------------

class AppointmentCreate(_Strict):
    doctor_id: str = Field(alias="doctorId", min_length=1)
    patient_id: str = Field(alias="patientId", min_length=1)
    clinic_id: str = Field(alias="clinicId", min_length=1)
    # format checked by the booking flow so it reports invalid_date
    appointment_date: str = Field(alias="appointmentDate")
    # positivity checked by the booking flow so it reports invalid_duration
    duration: int = Field(strict=True)


class StatusUpdate(_Strict):
    new_status: str = Field(alias="newStatus")


class AddDoctor(_Strict):
    appointment_id: str = Field(alias="appointmentId", min_length=1)
    doctor_id: str = Field(alias="doctorId", min_length=1)


# -------------------------------
# CLINICS & DOCTORS
# -------------------------------

class ClinicCreate(_Strict):
    name: str = Field(min_length=1)
    address: Optional[str] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    open_time: str = Field(alias="openTime")
    close_time: str = Field(alias="closeTime")


class ClinicUpdate(_Strict):
    name: Optional[str] = Field(None, min_length=1)
    address: Optional[str] = None
    phone_number: Optional[str] = Field(None, alias="phoneNumber")
    open_time: Optional[str] = Field(None, alias="openTime")
    close_time: Optional[str] = Field(None, alias="closeTime")


class WorkAtAssign(_Strict):
    start_date: date = Field(alias="startDate")


class DoctorCreate(_Strict):
    name: str = Field(min_length=1)
    specialization: Optional[str] = None
    phone: Optional[str] = None


class DoctorUpdate(_Strict):
    name: Optional[str] = Field(None, min_length=1)
    specialization: Optional[str] = None
    phone: Optional[str] = None


# -------------------------------
# WORK SHIFTS
# -------------------------------

class WorkShiftIn(_Strict):
    doctor_id: str = Field(alias="doctorId", min_length=1)
    day: str
    start_time: str = Field(alias="startTime")
    end_time: str = Field(alias="endTime")

    @field_validator("day")
    @classmethod
    def validate_day(cls, v):
        day = v.strip().title()
        if day not in DAYS_OF_WEEK:
            raise ValueError(f"day must be one of {', '.join(DAYS_OF_WEEK)}")
        return day


# -------------------------------
# MEDICINES
# -------------------------------

class MedicineCreate(_Strict):
    medication_id: str = Field(alias="MedicationID", min_length=1)
    name: str = Field(alias="Name", min_length=1)
    dosage: Optional[str] = Field(None, alias="Dosage")
    administration: Optional[str] = Field(None, alias="Administration")
    side_effects: Optional[str] = Field(None, alias="SideEffects")
    quantity: int = Field(0, alias="Quantity", ge=0)


class MedicineUpdate(_Strict):
    name: Optional[str] = Field(None, alias="Name", min_length=1)
    dosage: Optional[str] = Field(None, alias="Dosage")
    administration: Optional[str] = Field(None, alias="Administration")
    side_effects: Optional[str] = Field(None, alias="SideEffects")
    quantity: Optional[int] = Field(None, alias="Quantity", ge=0)


# -------------------------------
# PATIENTS & USERS
# -------------------------------

class PatientIn(_Strict):
    name: str
    phone: str
    email: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        # Must contain at least 2 letters and no digits/special chars
        if not re.match(r"^[A-Za-z\s]{2,50}$", v.strip()):
            raise ValueError("Invalid name format. Only letters allowed.")
        return v.strip().title()

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v):
        clean = re.sub(r"[^\d]", "", v)

        # Allow + only if it was originally at the start
        if v.strip().startswith("+"):
            clean = "+" + clean

        if not re.match(r"^\+?\d{10,15}$", clean):
            raise ValueError("Phone number must contain 10–15 digits.")
        return clean


class RegisterIn(_Strict):
    username: str = Field(min_length=3, max_length=80)
    password: str = Field(min_length=6)
    role: str = "Patients"

    @field_validator("role")
    @classmethod
    def validate_role(cls, v):
        if v not in ROLES:
            raise ValueError(f"role must be one of {', '.join(ROLES)}")
        return v


class LoginIn(_Strict):
    username: str
    password: str


def changed_fields(update: BaseModel) -> dict:
    """Only the non-null attributes the client actually sent."""
    return update.model_dump(exclude_unset=True, exclude_none=True)
