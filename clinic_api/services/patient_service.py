import logging

from sqlalchemy.exc import SQLAlchemyError

from clinic_api.errors import NotFound, StorageError, ValidationFailure
from clinic_api.models import Patient
from clinic_api.services.graph_store import create_node, detach_delete, get_node, graph_session


logger = logging.getLogger(__name__)


def get_patient_by_phone(phone: str) -> dict | None:
    """Phone is the natural key for patient identity."""
    try:
        with graph_session() as session:
            p = session.query(Patient).filter_by(phone=phone).first()
            return p.to_record() if p else None
    except SQLAlchemyError as e:
        logger.exception(f"[get_patient_by_phone] Failed for phone={phone}: {e}")
        raise StorageError("get_patient_by_phone") from e


def create_patient(name: str, phone: str, email: str | None = None) -> dict:
    """Create a new patient only if the phone is not registered yet."""
    try:
        with graph_session() as session:
            if session.query(Patient).filter_by(phone=phone).first():
                raise ValidationFailure(
                    ValidationFailure.ALREADY_EXISTS,
                    f"A patient with phone {phone} already exists.",
                )
            p = create_node("Patient", name=name.strip().title(), phone=phone, email=email)
            record = p.to_record()
        logger.info(f"[create_patient] Created patient {record['id']}")
        return record
    except SQLAlchemyError as e:
        logger.exception(f"[create_patient] Failed for phone={phone}, name={name}: {e}")
        raise StorageError("create_patient") from e


def get_patient(patient_id: str) -> dict:
    try:
        with graph_session():
            p = get_node("Patient", patient_id)
            if p is None:
                raise NotFound("Patient", patient_id, message="Patient not found")
            return p.to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[get_patient] Failed for patient_id={patient_id}: {e}")
        raise StorageError("get_patient") from e


def delete_patient(patient_id: str) -> None:
    """Delete a patient record; refused while they still have appointments."""
    try:
        with graph_session():
            p = get_node("Patient", patient_id)
            if p is None:
                raise NotFound("Patient", patient_id, message="Patient not found")
            if p.appointments:
                raise ValidationFailure(
                    ValidationFailure.IN_USE,
                    f"Patient still has {len(p.appointments)} appointment(s).",
                )
            detach_delete("Patient", patient_id)
        logger.info(f"[delete_patient] Deleted patient {patient_id}")
    except SQLAlchemyError as e:
        logger.exception(f"[delete_patient] Error deleting patient {patient_id}: {e}")
        raise StorageError("delete_patient") from e
