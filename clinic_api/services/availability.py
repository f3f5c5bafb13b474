"""
Opening-hours and work-shift checks.

Both compare wall-clock time in the configured clinic timezone, with
inclusive bounds: start >= window start and end <= window end. An
interval that ends on a later calendar day than it starts never fits.
"""
import logging
from datetime import time

import pytz
from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from clinic_api.errors import NotFound, StorageError
from clinic_api.models import DAYS_OF_WEEK, WorkShift
from clinic_api.services.graph_store import get_node, graph_session
from clinic_api.services.intervals import Interval, appointment_interval, parse_clock


logger = logging.getLogger(__name__)


def clinic_timezone():
    name = current_app.config.get("CLINIC_TIMEZONE", "UTC")
    try:
        return pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        logger.warning(f"[clinic_timezone] Unknown timezone {name!r}, using UTC")
        return pytz.UTC


def day_of_week(interval: Interval, tz) -> str:
    return DAYS_OF_WEEK[interval.start.astimezone(tz).weekday()]


def fits_window(interval: Interval, window_start: time, window_end: time, tz) -> bool:
    start = interval.start.astimezone(tz)
    end = interval.end.astimezone(tz)
    if end.date() != start.date():
        return False
    return start.time() >= window_start and end.time() <= window_end


def within_clinic_hours(open_time: str, close_time: str, interval: Interval, tz) -> bool:
    return fits_window(interval, parse_clock(open_time), parse_clock(close_time), tz)


def within_work_shift(shifts, interval: Interval, tz) -> bool:
    day = day_of_week(interval, tz)
    return any(
        fits_window(interval, parse_clock(ws.start_time), parse_clock(ws.end_time), tz)
        for ws in shifts
        if ws.day == day
    )


def check_clinic_opening_hours(clinic_id: str, appointment_date: str, duration: int) -> bool:
    """True when [date, date + duration) sits inside the clinic's opening hours."""
    interval = appointment_interval(appointment_date, duration)
    try:
        with graph_session():
            clinic = get_node("Clinic", clinic_id)
            if clinic is None:
                raise NotFound("Clinic", clinic_id)
            return within_clinic_hours(
                clinic.open_time, clinic.close_time, interval, clinic_timezone()
            )
    except SQLAlchemyError as e:
        logger.exception(
            f"[check_clinic_opening_hours] Failed for clinic_id={clinic_id}, date={appointment_date}: {e}"
        )
        raise StorageError("check_clinic_opening_hours") from e


def check_doctor_work_shift(doctor_id: str, appointment_date: str, duration: int) -> bool:
    """True when one of the doctor's shifts on that weekday contains the interval."""
    interval = appointment_interval(appointment_date, duration)
    try:
        with graph_session() as session:
            tz = clinic_timezone()
            shifts = (
                session.query(WorkShift)
                .filter(WorkShift.doctor_id == doctor_id)
                .filter(WorkShift.day == day_of_week(interval, tz))
                .all()
            )
            return within_work_shift(shifts, interval, tz)
    except SQLAlchemyError as e:
        logger.exception(
            f"[check_doctor_work_shift] Failed for doctor_id={doctor_id}, date={appointment_date}: {e}"
        )
        raise StorageError("check_doctor_work_shift") from e
