import logging

from sqlalchemy.exc import SQLAlchemyError

from clinic_api.errors import NotFound, StorageError, ValidationFailure
from clinic_api.models import Appointment, Clinic, WorkAt
from clinic_api.services.graph_store import (
    create_node,
    detach_delete,
    get_node,
    graph_session,
    update_node,
)
from clinic_api.services.intervals import clock_interval


logger = logging.getLogger("clinic_service")


def _require_clinic(clinic_id: str) -> Clinic:
    clinic = get_node("Clinic", clinic_id)
    if clinic is None:
        raise NotFound("Clinic", clinic_id, message="Clinic not found")
    return clinic


# -------------------------------
# CLINIC HELPERS
# -------------------------------

def create_clinic(name: str, address: str | None, phone_number: str | None,
                  open_time: str, close_time: str) -> dict:
    """Create a clinic; opening hours must be HH:mm with open before close."""
    clock_interval(open_time, close_time)
    try:
        with graph_session():
            clinic = create_node(
                "Clinic",
                name=name,
                address=address,
                phone_number=phone_number,
                open_time=open_time,
                close_time=close_time,
            )
            record = clinic.to_record()
        logger.info(f"[create_clinic] Created clinic {record['id']} ({name})")
        return record
    except SQLAlchemyError as e:
        logger.exception(f"[create_clinic] Failed for name={name}: {e}")
        raise StorageError("create_clinic") from e


def list_clinics() -> list[dict]:
    try:
        with graph_session() as session:
            return [c.to_record() for c in session.query(Clinic).order_by(Clinic.name).all()]
    except SQLAlchemyError as e:
        logger.exception(f"[list_clinics] Failed: {e}")
        raise StorageError("list_clinics") from e


def get_clinic(clinic_id: str) -> dict:
    try:
        with graph_session():
            return _require_clinic(clinic_id).to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[get_clinic] Failed for clinic_id={clinic_id}: {e}")
        raise StorageError("get_clinic") from e


def update_clinic(clinic_id: str, changes: dict) -> dict:
    """Apply allow-listed changes; the resulting hours must still be valid."""
    try:
        with graph_session():
            clinic = _require_clinic(clinic_id)
            clock_interval(
                changes.get("open_time", clinic.open_time),
                changes.get("close_time", clinic.close_time),
            )
            update_node("Clinic", clinic_id, changes)
            return clinic.to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[update_clinic] Failed for clinic_id={clinic_id}: {e}")
        raise StorageError("update_clinic") from e


def delete_clinic(clinic_id: str) -> None:
    """Delete a clinic and its WORK_AT links; refused while it hosts appointments."""
    try:
        with graph_session() as session:
            if get_node("Clinic", clinic_id) is None:
                raise NotFound("Clinic", clinic_id, message="Clinic not found")
            hosted = session.query(Appointment).filter(Appointment.clinic_id == clinic_id).count()
            if hosted:
                raise ValidationFailure(
                    ValidationFailure.IN_USE,
                    f"Clinic still hosts {hosted} appointment(s).",
                )
            detach_delete("Clinic", clinic_id)
        logger.info(f"[delete_clinic] Deleted clinic {clinic_id}")
    except SQLAlchemyError as e:
        logger.exception(f"[delete_clinic] Error deleting clinic {clinic_id}: {e}")
        raise StorageError("delete_clinic") from e


# -------------------------------
# WORK_AT HELPERS
# -------------------------------

def get_doctors_by_clinic(clinic_id: str) -> list[dict]:
    try:
        with graph_session():
            clinic = _require_clinic(clinic_id)
            return [
                {**link.doctor.to_record(), "startDate": link.formatted_start_date()}
                for link in clinic.doctor_links
            ]
    except SQLAlchemyError as e:
        logger.exception(f"[get_doctors_by_clinic] Failed for clinic_id={clinic_id}: {e}")
        raise StorageError("get_doctors_by_clinic") from e


def assign_doctor_to_clinic(doctor_id: str, clinic_id: str, start_date) -> dict:
    """
    Create the WORK_AT link, or rebind it to a new start date when the
    doctor already works at the clinic.
    """
    try:
        with graph_session() as session:
            _require_clinic(clinic_id)
            if get_node("Doctor", doctor_id) is None:
                raise NotFound("Doctor", doctor_id, message="Doctor not found")

            link = session.get(WorkAt, (doctor_id, clinic_id))
            if link is None:
                link = WorkAt(doctor_id=doctor_id, clinic_id=clinic_id, start_date=start_date)
                session.add(link)
            else:
                link.start_date = start_date
            session.flush()
            record = {
                "doctorId": doctor_id,
                "clinicId": clinic_id,
                "startDate": link.formatted_start_date(),
            }
        logger.info(f"[assign_doctor_to_clinic] doctor={doctor_id} clinic={clinic_id} since {start_date}")
        return record
    except SQLAlchemyError as e:
        logger.exception(
            f"[assign_doctor_to_clinic] Failed for doctor_id={doctor_id}, clinic_id={clinic_id}: {e}"
        )
        raise StorageError("assign_doctor_to_clinic") from e


def update_work_start_date(doctor_id: str, clinic_id: str, start_date) -> dict:
    try:
        with graph_session() as session:
            link = session.get(WorkAt, (doctor_id, clinic_id))
            if link is None:
                raise NotFound(
                    "WorkAt", doctor_id, clinic_id,
                    message="Doctor does not work at this clinic",
                )
            link.start_date = start_date
            session.flush()
            return {
                "doctorId": doctor_id,
                "clinicId": clinic_id,
                "startDate": link.formatted_start_date(),
            }
    except SQLAlchemyError as e:
        logger.exception(
            f"[update_work_start_date] Failed for doctor_id={doctor_id}, clinic_id={clinic_id}: {e}"
        )
        raise StorageError("update_work_start_date") from e


def delete_work_relationship(doctor_id: str, clinic_id: str) -> None:
    try:
        with graph_session() as session:
            link = session.get(WorkAt, (doctor_id, clinic_id))
            if link is None:
                raise NotFound(
                    "WorkAt", doctor_id, clinic_id,
                    message="Doctor does not work at this clinic",
                )
            session.delete(link)
        logger.info(f"[delete_work_relationship] doctor={doctor_id} left clinic={clinic_id}")
    except SQLAlchemyError as e:
        logger.exception(
            f"[delete_work_relationship] Failed for doctor_id={doctor_id}, clinic_id={clinic_id}: {e}"
        )
        raise StorageError("delete_work_relationship") from e
