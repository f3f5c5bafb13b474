"""
Appointment lifecycle: booking, status changes, deletion and attendees.

Booking runs existence, opening-hours, work-shift and conflict checks in
that order, stopping at the first failure, and writes in the same storage
session. Without BOOKING_LOCKS_ENABLED two concurrent bookings for the same
doctor or patient can both pass the conflict checks.
"""
import logging
import uuid

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from clinic_api.errors import NotFound, StorageError, ValidationFailure
from clinic_api.models import STATUS_SCHEDULED, VALID_STATUSES
from clinic_api.services.availability import (
    check_clinic_opening_hours,
    check_doctor_work_shift,
)
from clinic_api.services.conflicts import has_doctor_conflict, has_patient_conflict
from clinic_api.services.db_context import db_context
from clinic_api.services.existence import missing_entities
from clinic_api.services.graph_store import (
    create_node,
    detach_delete,
    get_node,
    graph_session,
    update_node,
)
from clinic_api.services.intervals import appointment_interval, to_utc_naive, utc_now_iso
from clinic_api.services.redis_service import booking_lock


logger = logging.getLogger(__name__)


def _require_appointment(appointment_id: str):
    appt = get_node("Appointment", appointment_id)
    if appt is None:
        raise NotFound("Appointment", appointment_id, message="Appointment not found")
    return appt


# -------------------------------
# BOOKING
# -------------------------------

def create_appointment(
    doctor_id: str,
    patient_id: str,
    clinic_id: str,
    appointment_date: str,
    duration: int,
) -> dict:
    """
    Book a new Scheduled appointment.

    Raises ValidationFailure (invalid_date, invalid_duration,
    outside_clinic_hours, outside_work_shift, doctor_conflict,
    patient_conflict), NotFound when a referenced record is missing and
    StorageError on persistence failures.
    """
    interval = appointment_interval(appointment_date, duration)

    try:
        with db_context(), booking_lock(f"doctor:{doctor_id}", f"patient:{patient_id}"):
            with graph_session():
                missing = missing_entities(doctor_id, patient_id, clinic_id)
                if missing:
                    raise NotFound(
                        "/".join(missing),
                        doctor_id,
                        patient_id,
                        clinic_id,
                        message=f"{', '.join(missing)} does not exist.",
                    )

                if not check_clinic_opening_hours(clinic_id, appointment_date, duration):
                    raise ValidationFailure(
                        ValidationFailure.OUTSIDE_CLINIC_HOURS,
                        "Appointment time is outside clinic opening hours.",
                    )

                if not check_doctor_work_shift(doctor_id, appointment_date, duration):
                    raise ValidationFailure(
                        ValidationFailure.OUTSIDE_WORK_SHIFT,
                        "Appointment time does not fit doctor work shifts.",
                    )

                if has_doctor_conflict(doctor_id, appointment_date, duration):
                    raise ValidationFailure(
                        ValidationFailure.DOCTOR_CONFLICT,
                        "Doctor's schedule conflicts with an existing appointment.",
                    )

                if has_patient_conflict(patient_id, appointment_date, duration):
                    raise ValidationFailure(
                        ValidationFailure.PATIENT_CONFLICT,
                        "Patient's schedule conflicts with an existing appointment.",
                    )

                now = utc_now_iso()
                appt = create_node(
                    "Appointment",
                    id=str(uuid.uuid4()),
                    patient_id=patient_id,
                    clinic_id=clinic_id,
                    appointment_date=appointment_date,
                    duration=duration,
                    status=STATUS_SCHEDULED,
                    created_at=now,
                    updated_at=now,
                    starts_at=to_utc_naive(interval.start),
                    ends_at=to_utc_naive(interval.end),
                    doctors=[get_node("Doctor", doctor_id)],
                )
                record = appt.to_record()

        logger.info(
            f"[create_appointment] Booked {record['id']} doctor={doctor_id} "
            f"patient={patient_id} clinic={clinic_id} at {appointment_date} for {duration}m"
        )
        return record
    except SQLAlchemyError as e:
        logger.exception(
            f"[create_appointment] Failed for doctor_id={doctor_id}, patient_id={patient_id}, "
            f"clinic_id={clinic_id}, date={appointment_date}: {e}"
        )
        raise StorageError("create_appointment") from e


def check_appointment_slot(
    doctor_id: str,
    patient_id: str,
    clinic_id: str,
    appointment_date: str,
    duration: int,
) -> dict:
    """Run every booking check without writing and report each outcome."""
    appointment_interval(appointment_date, duration)
    try:
        with graph_session():
            missing = missing_entities(doctor_id, patient_id, clinic_id)
            if missing:
                raise NotFound("/".join(missing), message=f"{', '.join(missing)} does not exist.")
            return {
                "withinClinicHours": check_clinic_opening_hours(clinic_id, appointment_date, duration),
                "withinWorkShift": check_doctor_work_shift(doctor_id, appointment_date, duration),
                "doctorConflict": has_doctor_conflict(doctor_id, appointment_date, duration),
                "patientConflict": has_patient_conflict(patient_id, appointment_date, duration),
            }
    except SQLAlchemyError as e:
        logger.exception(f"[check_appointment_slot] Failed for doctor_id={doctor_id}, date={appointment_date}: {e}")
        raise StorageError("check_appointment_slot") from e


# -------------------------------
# LIFECYCLE
# -------------------------------

def get_appointment(appointment_id: str) -> dict:
    try:
        with graph_session():
            return _require_appointment(appointment_id).to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[get_appointment] Failed for appointment_id={appointment_id}: {e}")
        raise StorageError("get_appointment") from e


def update_appointment_status(appointment_id: str, new_status: str) -> dict:
    """
    Overwrite Status and UpdatedAt.

    Any status may move to any other unless STRICT_STATUS_TRANSITIONS is
    set, in which case Cancelled and Completed are final.
    """
    if new_status not in VALID_STATUSES:
        raise ValidationFailure(
            ValidationFailure.INVALID_STATUS,
            f"Invalid status. Valid statuses are: {', '.join(VALID_STATUSES)}",
        )

    try:
        with graph_session():
            appt = _require_appointment(appointment_id)

            strict = current_app.config.get("STRICT_STATUS_TRANSITIONS", False)
            if strict and appt.status != STATUS_SCHEDULED and new_status != appt.status:
                raise ValidationFailure(
                    ValidationFailure.INVALID_TRANSITION,
                    f"Cannot move a {appt.status} appointment to {new_status}.",
                )

            update_node(
                "Appointment",
                appointment_id,
                {"status": new_status, "updated_at": utc_now_iso()},
            )
            record = appt.to_record()

        logger.info(f"[update_appointment_status] {appointment_id} -> {new_status}")
        return record
    except SQLAlchemyError as e:
        logger.exception(
            f"[update_appointment_status] Failed for appointment_id={appointment_id}, status={new_status}: {e}"
        )
        raise StorageError("update_appointment_status") from e


def delete_appointment(appointment_id: str) -> None:
    """Hard delete; a missing id is NotFound, not a silent success."""
    try:
        with graph_session():
            deleted = detach_delete("Appointment", appointment_id)
    except SQLAlchemyError as e:
        logger.exception(f"[delete_appointment] Error deleting appointment {appointment_id}: {e}")
        raise StorageError("delete_appointment") from e

    if not deleted:
        raise NotFound("Appointment", appointment_id, message="Appointment not found")


# -------------------------------
# ATTENDEES & RELATED RECORDS
# -------------------------------

def add_doctor_to_appointment(appointment_id: str, doctor_id: str) -> dict:
    """Attach another attending doctor after re-checking their shift and calendar."""
    try:
        with db_context(), booking_lock(f"doctor:{doctor_id}"):
            with graph_session():
                appt = get_node("Appointment", appointment_id)
                doctor = get_node("Doctor", doctor_id)
                if appt is None or doctor is None:
                    raise NotFound(
                        "Appointment/Doctor",
                        appointment_id,
                        doctor_id,
                        message="Appointment or doctor not found.",
                    )

                if doctor in appt.doctors:
                    raise ValidationFailure(
                        ValidationFailure.ALREADY_ATTENDING,
                        "Doctor already attends this appointment.",
                    )

                if not check_doctor_work_shift(doctor_id, appt.appointment_date, appt.duration):
                    raise ValidationFailure(
                        ValidationFailure.OUTSIDE_WORK_SHIFT,
                        "Appointment time does not fit doctor work shifts.",
                    )

                if has_doctor_conflict(
                    doctor_id, appt.appointment_date, appt.duration, exclude_id=appt.id
                ):
                    raise ValidationFailure(
                        ValidationFailure.DOCTOR_CONFLICT,
                        "Doctor's schedule conflicts with an existing appointment.",
                    )

                appt.doctors.append(doctor)
                record = appt.to_record()

        logger.info(f"[add_doctor_to_appointment] doctor={doctor_id} now attends {appointment_id}")
        return record
    except SQLAlchemyError as e:
        logger.exception(
            f"[add_doctor_to_appointment] Failed for appointment_id={appointment_id}, doctor_id={doctor_id}: {e}"
        )
        raise StorageError("add_doctor_to_appointment") from e


def get_appointment_doctors(appointment_id: str) -> list[dict]:
    try:
        with graph_session():
            return [d.to_record() for d in _require_appointment(appointment_id).doctors]
    except SQLAlchemyError as e:
        logger.exception(f"[get_appointment_doctors] Failed for appointment_id={appointment_id}: {e}")
        raise StorageError("get_appointment_doctors") from e


def get_appointment_patients(appointment_id: str) -> list[dict]:
    try:
        with graph_session():
            return [_require_appointment(appointment_id).patient.to_record()]
    except SQLAlchemyError as e:
        logger.exception(f"[get_appointment_patients] Failed for appointment_id={appointment_id}: {e}")
        raise StorageError("get_appointment_patients") from e


def get_appointment_clinic(appointment_id: str) -> dict:
    try:
        with graph_session():
            return _require_appointment(appointment_id).clinic.to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[get_appointment_clinic] Failed for appointment_id={appointment_id}: {e}")
        raise StorageError("get_appointment_clinic") from e
