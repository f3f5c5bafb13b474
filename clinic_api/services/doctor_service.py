import logging

from sqlalchemy.exc import SQLAlchemyError

from clinic_api.errors import NotFound, StorageError, ValidationFailure
from clinic_api.models import Doctor
from clinic_api.services.graph_store import (
    create_node,
    detach_delete,
    get_node,
    graph_session,
    update_node,
)


logger = logging.getLogger(__name__)


def _require_doctor(doctor_id: str) -> Doctor:
    doctor = get_node("Doctor", doctor_id)
    if doctor is None:
        raise NotFound("Doctor", doctor_id, message="Doctor not found")
    return doctor


def create_doctor(name: str, specialization: str | None, phone: str | None) -> dict:
    try:
        with graph_session():
            record = create_node(
                "Doctor", name=name, specialization=specialization, phone=phone
            ).to_record()
        logger.info(f"[create_doctor] Created doctor {record['id']} ({name})")
        return record
    except SQLAlchemyError as e:
        logger.exception(f"[create_doctor] Failed for name={name}: {e}")
        raise StorageError("create_doctor") from e


def list_doctors() -> list[dict]:
    try:
        with graph_session() as session:
            return [d.to_record() for d in session.query(Doctor).order_by(Doctor.name).all()]
    except SQLAlchemyError as e:
        logger.exception(f"[list_doctors] Failed: {e}")
        raise StorageError("list_doctors") from e


def get_doctor(doctor_id: str) -> dict:
    try:
        with graph_session():
            return _require_doctor(doctor_id).to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[get_doctor] Failed for doctor_id={doctor_id}: {e}")
        raise StorageError("get_doctor") from e


def update_doctor(doctor_id: str, changes: dict) -> dict:
    try:
        with graph_session():
            doctor = _require_doctor(doctor_id)
            update_node("Doctor", doctor_id, changes)
            return doctor.to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[update_doctor] Failed for doctor_id={doctor_id}: {e}")
        raise StorageError("update_doctor") from e


def delete_doctor(doctor_id: str) -> None:
    """Remove a doctor with their shifts and clinic links; refused while attending appointments."""
    try:
        with graph_session():
            doctor = _require_doctor(doctor_id)
            if doctor.appointments:
                raise ValidationFailure(
                    ValidationFailure.IN_USE,
                    f"Doctor still attends {len(doctor.appointments)} appointment(s).",
                )
            detach_delete("Doctor", doctor_id)
        logger.info(f"[delete_doctor] Deleted doctor {doctor_id}")
    except SQLAlchemyError as e:
        logger.exception(f"[delete_doctor] Error deleting doctor {doctor_id}: {e}")
        raise StorageError("delete_doctor") from e


def get_clinics_by_doctor(doctor_id: str) -> list[dict]:
    try:
        with graph_session():
            doctor = _require_doctor(doctor_id)
            return [
                {**link.clinic.to_record(), "startDate": link.formatted_start_date()}
                for link in doctor.clinic_links
            ]
    except SQLAlchemyError as e:
        logger.exception(f"[get_clinics_by_doctor] Failed for doctor_id={doctor_id}: {e}")
        raise StorageError("get_clinics_by_doctor") from e
