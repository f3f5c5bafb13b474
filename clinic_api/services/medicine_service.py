import logging

from sqlalchemy.exc import SQLAlchemyError

from clinic_api.errors import NotFound, StorageError, ValidationFailure
from clinic_api.models import Medicine
from clinic_api.services.graph_store import (
    create_node,
    detach_delete,
    get_node,
    graph_session,
    update_node,
)


logger = logging.getLogger(__name__)


def create_medicine(medication_id: str, name: str, dosage: str | None = None,
                    administration: str | None = None, side_effects: str | None = None,
                    quantity: int = 0) -> dict:
    try:
        with graph_session():
            if get_node("Medicine", medication_id) is not None:
                raise ValidationFailure(
                    ValidationFailure.ALREADY_EXISTS,
                    f"Medicine {medication_id} already exists.",
                )
            return create_node(
                "Medicine",
                medication_id=medication_id,
                name=name,
                dosage=dosage,
                administration=administration,
                side_effects=side_effects,
                quantity=quantity,
            ).to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[create_medicine] Failed for medication_id={medication_id}: {e}")
        raise StorageError("create_medicine") from e


def list_medicines() -> list[dict]:
    try:
        with graph_session() as session:
            return [m.to_record() for m in session.query(Medicine).order_by(Medicine.name).all()]
    except SQLAlchemyError as e:
        logger.exception(f"[list_medicines] Failed: {e}")
        raise StorageError("list_medicines") from e


def get_medicine(medication_id: str) -> dict:
    try:
        with graph_session():
            medicine = get_node("Medicine", medication_id)
            if medicine is None:
                raise NotFound("Medicine", medication_id, message="Medicine not found")
            return medicine.to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[get_medicine] Failed for medication_id={medication_id}: {e}")
        raise StorageError("get_medicine") from e


def update_medicine(medication_id: str, changes: dict) -> dict:
    try:
        with graph_session():
            medicine = get_node("Medicine", medication_id)
            if medicine is None:
                raise NotFound("Medicine", medication_id, message="Medicine not found")
            update_node("Medicine", medication_id, changes)
            return medicine.to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[update_medicine] Failed for medication_id={medication_id}: {e}")
        raise StorageError("update_medicine") from e


def delete_medicine(medication_id: str) -> None:
    try:
        with graph_session():
            deleted = detach_delete("Medicine", medication_id)
    except SQLAlchemyError as e:
        logger.exception(f"[delete_medicine] Error deleting medicine {medication_id}: {e}")
        raise StorageError("delete_medicine") from e

    if not deleted:
        raise NotFound("Medicine", medication_id, message="Medicine not found")
