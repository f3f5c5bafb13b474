"""Doctor work shifts: weekly, same-day, non-overlapping per doctor and day."""
import logging

from sqlalchemy.exc import SQLAlchemyError

from clinic_api.errors import NotFound, StorageError, ValidationFailure
from clinic_api.models import WorkShift
from clinic_api.services.graph_store import (
    create_node,
    detach_delete,
    get_node,
    graph_session,
    update_node,
)
from clinic_api.services.intervals import clock_interval, overlaps


logger = logging.getLogger(__name__)


def has_work_shift_conflict(doctor_id: str, day: str, start_time: str, end_time: str,
                            exclude_id: str | None = None) -> bool:
    proposed = clock_interval(start_time, end_time)
    with graph_session() as session:
        shifts = (
            session.query(WorkShift)
            .filter(WorkShift.doctor_id == doctor_id, WorkShift.day == day)
            .all()
        )
        return any(
            overlaps(clock_interval(ws.start_time, ws.end_time), proposed)
            for ws in shifts
            if ws.id != exclude_id
        )


def _reject_conflict(doctor_id, day, start_time, end_time, exclude_id=None):
    if has_work_shift_conflict(doctor_id, day, start_time, end_time, exclude_id):
        raise ValidationFailure(
            ValidationFailure.WORK_SHIFT_CONFLICT,
            "Work shift conflict exists for the given time period.",
        )


def create_work_shift(doctor_id: str, day: str, start_time: str, end_time: str) -> dict:
    clock_interval(start_time, end_time)
    try:
        with graph_session():
            if get_node("Doctor", doctor_id) is None:
                raise NotFound("Doctor", doctor_id, message="Doctor not found")
            _reject_conflict(doctor_id, day, start_time, end_time)
            record = create_node(
                "WorkShift",
                doctor_id=doctor_id,
                day=day,
                start_time=start_time,
                end_time=end_time,
            ).to_record()
        logger.info(f"[create_work_shift] doctor={doctor_id} {day} {start_time}-{end_time}")
        return record
    except SQLAlchemyError as e:
        logger.exception(f"[create_work_shift] Failed for doctor_id={doctor_id}, day={day}: {e}")
        raise StorageError("create_work_shift") from e


def update_work_shift(work_shift_id: str, doctor_id: str, day: str,
                      start_time: str, end_time: str) -> dict:
    """Move a shift; it may not be handed to another doctor."""
    clock_interval(start_time, end_time)
    try:
        with graph_session():
            shift = get_node("WorkShift", work_shift_id)
            if shift is None:
                raise NotFound("WorkShift", work_shift_id, message="Work shift not found")
            if shift.doctor_id != doctor_id:
                raise ValidationFailure(
                    ValidationFailure.INVALID_REQUEST,
                    "Work shift belongs to a different doctor.",
                )
            _reject_conflict(doctor_id, day, start_time, end_time, exclude_id=work_shift_id)
            update_node(
                "WorkShift",
                work_shift_id,
                {"day": day, "start_time": start_time, "end_time": end_time},
            )
            return shift.to_record()
    except SQLAlchemyError as e:
        logger.exception(f"[update_work_shift] Failed for work_shift_id={work_shift_id}: {e}")
        raise StorageError("update_work_shift") from e


def delete_work_shift(work_shift_id: str) -> None:
    try:
        with graph_session():
            deleted = detach_delete("WorkShift", work_shift_id)
    except SQLAlchemyError as e:
        logger.exception(f"[delete_work_shift] Error deleting work shift {work_shift_id}: {e}")
        raise StorageError("delete_work_shift") from e

    if not deleted:
        raise NotFound("WorkShift", work_shift_id, message="Work shift not found")


def get_work_shifts_by_day(doctor_id: str, day: str) -> list[dict]:
    try:
        with graph_session() as session:
            shifts = (
                session.query(WorkShift)
                .filter(WorkShift.doctor_id == doctor_id, WorkShift.day == day)
                .order_by(WorkShift.start_time)
                .all()
            )
            return [ws.to_record() for ws in shifts]
    except SQLAlchemyError as e:
        logger.exception(f"[get_work_shifts_by_day] Failed for doctor_id={doctor_id}, day={day}: {e}")
        raise StorageError("get_work_shifts_by_day") from e
