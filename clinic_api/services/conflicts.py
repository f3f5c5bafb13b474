"""Overlap checks against existing Scheduled appointments."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from clinic_api.errors import StorageError
from clinic_api.models import Appointment, Doctor, STATUS_SCHEDULED
from clinic_api.services.graph_store import graph_session
from clinic_api.services.intervals import (
    Interval,
    appointment_interval,
    overlaps,
    to_utc_naive,
)


logger = logging.getLogger(__name__)


def _overlapping(query, interval: Interval, exclude_id: str | None) -> list:
    proposed = Interval(to_utc_naive(interval.start), to_utc_naive(interval.end))
    candidates = (
        query.filter(Appointment.status == STATUS_SCHEDULED)
        .filter(Appointment.starts_at < proposed.end)
        .all()
    )
    return [
        a for a in candidates
        if a.id != exclude_id and overlaps(Interval(a.starts_at, a.ends_at), proposed)
    ]


def has_doctor_conflict(
    doctor_id: str, appointment_date: str, duration: int, exclude_id: str | None = None
) -> bool:
    interval = appointment_interval(appointment_date, duration)
    try:
        with graph_session() as session:
            query = (
                session.query(Appointment)
                .join(Appointment.doctors)
                .filter(Doctor.id == doctor_id)
            )
            return bool(_overlapping(query, interval, exclude_id))
    except SQLAlchemyError as e:
        logger.exception(
            f"[has_doctor_conflict] Failed for doctor_id={doctor_id}, date={appointment_date}: {e}"
        )
        raise StorageError("has_doctor_conflict") from e


def has_patient_conflict(
    patient_id: str, appointment_date: str, duration: int, exclude_id: str | None = None
) -> bool:
    interval = appointment_interval(appointment_date, duration)
    try:
        with graph_session() as session:
            query = session.query(Appointment).filter(Appointment.patient_id == patient_id)
            return bool(_overlapping(query, interval, exclude_id))
    except SQLAlchemyError as e:
        logger.exception(
            f"[has_patient_conflict] Failed for patient_id={patient_id}, date={appointment_date}: {e}"
        )
        raise StorageError("has_patient_conflict") from e
