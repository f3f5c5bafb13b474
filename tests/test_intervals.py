from datetime import datetime, timedelta, timezone

import pytest

from clinic_api.errors import ValidationFailure
from clinic_api.services.intervals import (
    appointment_interval,
    clock_interval,
    make_interval,
    overlaps,
    parse_appointment_date,
    parse_clock,
)


def _at(hour, minute=0):
    return datetime(2024, 12, 2, hour, minute, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "a, b",
    [
        ((_at(10), 30), (_at(10, 15), 30)),
        ((_at(10), 30), (_at(10, 30), 30)),
        ((_at(9), 180), (_at(10), 15)),
        ((_at(8), 30), (_at(11), 30)),
    ],
)
def test_overlap_is_symmetric(a, b):
    first, second = make_interval(*a), make_interval(*b)
    assert overlaps(first, second) == overlaps(second, first)


def test_interval_overlaps_itself():
    interval = make_interval(_at(10), 1)
    assert overlaps(interval, interval)


def test_touching_intervals_do_not_overlap():
    assert not overlaps(make_interval(_at(10), 30), make_interval(_at(10, 30), 30))
    assert overlaps(make_interval(_at(10), 31), make_interval(_at(10, 30), 30))


def test_make_interval_is_half_open_end():
    interval = make_interval(_at(10), 45)
    assert interval.end - interval.start == timedelta(minutes=45)


def test_parse_appointment_date_keeps_offset():
    parsed = parse_appointment_date("2024-12-02T10:00:00.000+07:00")
    assert parsed.utcoffset() == timedelta(hours=7)
    assert parse_appointment_date("2024-12-02T10:00:00Z") == _at(10)
    assert parse_appointment_date("2024-12-02T10:00:00-13:59").utcoffset() == -timedelta(hours=13, minutes=59)


@pytest.mark.parametrize(
    "value",
    [
        "2024-12-02 10:00:00", "2024-12-02T10:00:00", "02/12/2024", "", None,
        "2024-02-30T10:00:00Z", "2024-12-02T10:00:00+14:00",
    ],
)
def test_parse_appointment_date_rejects_malformed(value):
    with pytest.raises(ValidationFailure) as exc:
        parse_appointment_date(value)
    assert exc.value.reason == ValidationFailure.INVALID_DATE


@pytest.mark.parametrize("duration", [0, -15, True, "30", None])
def test_appointment_interval_requires_positive_minutes(duration):
    with pytest.raises(ValidationFailure) as exc:
        appointment_interval("2024-12-02T10:00:00Z", duration)
    assert exc.value.reason == ValidationFailure.INVALID_DURATION


def test_appointment_interval_checks_date_first():
    with pytest.raises(ValidationFailure) as exc:
        appointment_interval("not a date", 0)
    assert exc.value.reason == ValidationFailure.INVALID_DATE


def test_parse_clock():
    assert parse_clock("09:05").hour == 9
    for bad in ("9:05", "24:00", "12:60", "noon"):
        with pytest.raises(ValidationFailure):
            parse_clock(bad)


def test_clock_interval_requires_start_before_end():
    with pytest.raises(ValidationFailure) as exc:
        clock_interval("12:00", "09:00")
    assert exc.value.reason == ValidationFailure.INVALID_TIME_RANGE
    with pytest.raises(ValidationFailure):
        clock_interval("09:00", "09:00")
