"""
Time-interval helpers.

All overlap decisions go through ``overlaps()`` on half-open intervals
``[start, start + duration)``.
"""
import re
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone

from clinic_api.errors import ValidationFailure

# e.g. 2024-12-01T14:30:00Z or 2024-12-01T14:30:00.000+07:00
ISO_DATETIME_RE = re.compile(
    r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])"
    r"T([01]\d|2[0-3]):([0-5]\d):([0-5]\d)(\.\d+)?"
    r"(Z|[+-](0\d|1[0-3]):[0-5]\d)$"
)
CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# Anchor day for comparing bare clock ranges
_CLOCK_ANCHOR = date(2000, 1, 3)


@dataclass(frozen=True)
class Interval:
    start: datetime
    end: datetime


def make_interval(start: datetime, duration_minutes: int) -> Interval:
    return Interval(start, start + timedelta(minutes=duration_minutes))


def overlaps(a: Interval, b: Interval) -> bool:
    return a.start < b.end and a.end > b.start


def is_valid_iso_datetime(text) -> bool:
    return isinstance(text, str) and bool(ISO_DATETIME_RE.match(text))


def parse_appointment_date(text) -> datetime:
    """Parse a timezone-aware ISO-8601 timestamp or raise ``invalid_date``."""
    if not is_valid_iso_datetime(text):
        raise ValidationFailure(
            ValidationFailure.INVALID_DATE,
            "Invalid date format. Date must be in ISO 8601 format (e.g., 2024-12-01T14:30:00Z).",
        )
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        # matches the pattern but is not a calendar date (e.g. Feb 30)
        raise ValidationFailure(
            ValidationFailure.INVALID_DATE,
            f"{text} is not a valid calendar date-time.",
        ) from None


def appointment_interval(appointment_date: str, duration: int) -> Interval:
    start = parse_appointment_date(appointment_date)
    if isinstance(duration, bool) or not isinstance(duration, int) or duration <= 0:
        raise ValidationFailure(
            ValidationFailure.INVALID_DURATION,
            "Duration must be a positive number of minutes.",
        )
    return make_interval(start, duration)


def is_valid_clock(text) -> bool:
    return isinstance(text, str) and bool(CLOCK_RE.match(text))


def parse_clock(text) -> time:
    if not is_valid_clock(text):
        raise ValidationFailure(
            ValidationFailure.INVALID_TIME_FORMAT,
            "Invalid time format. Use HH:mm format between 00:00 and 23:59.",
        )
    hours, minutes = text.split(":")
    return time(int(hours), int(minutes))


def clock_interval(start_hhmm: str, end_hhmm: str) -> Interval:
    """Same-day clock range as an interval, rejecting start >= end."""
    start, end = parse_clock(start_hhmm), parse_clock(end_hhmm)
    if start >= end:
        raise ValidationFailure(
            ValidationFailure.INVALID_TIME_RANGE,
            f"Start time {start_hhmm} must be before end time {end_hhmm}.",
        )
    return Interval(
        datetime.combine(_CLOCK_ANCHOR, start),
        datetime.combine(_CLOCK_ANCHOR, end),
    )


def to_utc_naive(moment: datetime) -> datetime:
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()
