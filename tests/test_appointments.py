import pytest
from sqlalchemy.exc import OperationalError

from clinic_api.errors import NotFound, StorageError, ValidationFailure
from clinic_api.models import Appointment
from clinic_api.services import appointment_service as svc
from clinic_api.services.existence import (
    appointment_exists,
    clinic_exists,
    doctor_exists,
    missing_entities,
    patient_exists,
)
from extensions import db

MONDAY = "2024-12-02"


def _book(schedule, clock, duration=30, **overrides):
    args = {
        "doctor_id": schedule["doctor_id"],
        "patient_id": schedule["patient_id"],
        "clinic_id": schedule["clinic_id"],
        "appointment_date": f"{MONDAY}T{clock}:00Z",
        "duration": duration,
    }
    args.update(overrides)
    return svc.create_appointment(**args)


def _reason(exc_info):
    return exc_info.value.reason


def test_books_inside_hours_and_shift(schedule):
    appt = _book(schedule, "10:00")

    assert appt["Status"] == "Scheduled"
    assert appt["duration"] == 30
    assert appt["AppointmentDate"] == f"{MONDAY}T10:00:00Z"
    assert appt["CreatedAt"] == appt["UpdatedAt"]

    stored = db.session.get(Appointment, appt["id"])
    assert [d.id for d in stored.doctors] == [schedule["doctor_id"]]
    assert stored.patient_id == schedule["patient_id"]
    assert stored.clinic_id == schedule["clinic_id"]


def test_overlapping_booking_for_same_doctor_is_rejected(schedule, make_patient):
    _book(schedule, "10:00")
    with pytest.raises(ValidationFailure) as exc:
        _book(schedule, "10:15", patient_id=make_patient(name="Bob"))
    assert _reason(exc) == ValidationFailure.DOCTOR_CONFLICT


def test_back_to_back_bookings_do_not_conflict(schedule, make_patient):
    _book(schedule, "10:00", 30)
    second = _book(schedule, "10:30", 30, patient_id=make_patient(name="Bob"))
    assert second["Status"] == "Scheduled"


def test_one_minute_overlap_conflicts(schedule, make_patient):
    _book(schedule, "10:00", 31)
    with pytest.raises(ValidationFailure) as exc:
        _book(schedule, "10:30", 30, patient_id=make_patient(name="Bob"))
    assert _reason(exc) == ValidationFailure.DOCTOR_CONFLICT


def test_patient_conflict_across_doctors(schedule, make_doctor):
    _book(schedule, "10:00")
    other_doctor = make_doctor(name="Dr. Grey")
    with pytest.raises(ValidationFailure) as exc:
        _book(schedule, "10:10", doctor_id=other_doctor)
    assert _reason(exc) == ValidationFailure.PATIENT_CONFLICT


def test_cancelled_and_completed_appointments_never_block(schedule):
    first = _book(schedule, "10:00")
    svc.update_appointment_status(first["id"], "Cancelled")
    second = _book(schedule, "10:00")
    svc.update_appointment_status(second["id"], "Completed")

    third = _book(schedule, "10:00")
    assert third["Status"] == "Scheduled"


def test_before_opening_is_outside_clinic_hours(schedule, make_doctor):
    early_doctor = make_doctor(name="Dr. Early", shifts=(("Monday", "07:00", "12:00"),))
    with pytest.raises(ValidationFailure) as exc:
        _book(schedule, "08:00", doctor_id=early_doctor)
    assert _reason(exc) == ValidationFailure.OUTSIDE_CLINIC_HOURS


def test_outside_doctor_shift(schedule):
    with pytest.raises(ValidationFailure) as exc:
        _book(schedule, "13:00")
    assert _reason(exc) == ValidationFailure.OUTSIDE_WORK_SHIFT


def test_missing_patient_is_not_found(schedule):
    with pytest.raises(NotFound) as exc:
        _book(schedule, "10:00", patient_id="ghost")
    assert exc.value.kind == "Patient"


def test_malformed_date_is_rejected_before_lookup(app):
    with pytest.raises(ValidationFailure) as exc:
        svc.create_appointment("d", "p", "c", "2024-12-02 10:00", 30)
    assert _reason(exc) == ValidationFailure.INVALID_DATE


def test_non_positive_duration_is_rejected(schedule):
    with pytest.raises(ValidationFailure) as exc:
        _book(schedule, "10:00", 0)
    assert _reason(exc) == ValidationFailure.INVALID_DURATION


def test_get_appointment_is_stable(schedule):
    appt = _book(schedule, "10:00")
    assert svc.get_appointment(appt["id"]) == svc.get_appointment(appt["id"]) == appt


def test_update_status(schedule):
    appt = _book(schedule, "10:00")
    updated = svc.update_appointment_status(appt["id"], "Completed")
    assert updated["Status"] == "Completed"
    assert updated["CreatedAt"] == appt["CreatedAt"]
    assert svc.get_appointment(appt["id"])["Status"] == "Completed"

    # permissive by default
    assert svc.update_appointment_status(appt["id"], "Scheduled")["Status"] == "Scheduled"


def test_update_status_rejects_unknown_value_before_lookup(app):
    with pytest.raises(ValidationFailure) as exc:
        svc.update_appointment_status("whatever", "Postponed")
    assert _reason(exc) == ValidationFailure.INVALID_STATUS


def test_update_status_of_missing_appointment(app):
    with pytest.raises(NotFound):
        svc.update_appointment_status("missing-id", "Cancelled")


def test_strict_transitions_keep_final_states(app, schedule):
    app.config["STRICT_STATUS_TRANSITIONS"] = True
    appt = _book(schedule, "10:00")
    svc.update_appointment_status(appt["id"], "Cancelled")

    with pytest.raises(ValidationFailure) as exc:
        svc.update_appointment_status(appt["id"], "Scheduled")
    assert _reason(exc) == ValidationFailure.INVALID_TRANSITION
    # re-applying the same status is allowed
    assert svc.update_appointment_status(appt["id"], "Cancelled")["Status"] == "Cancelled"


def test_delete_then_get_is_not_found(schedule):
    appt = _book(schedule, "10:00")
    svc.delete_appointment(appt["id"])

    with pytest.raises(NotFound):
        svc.get_appointment(appt["id"])
    with pytest.raises(NotFound):
        svc.delete_appointment(appt["id"])


def test_add_doctor_accumulates_attendees(schedule, make_doctor):
    appt = _book(schedule, "10:00")
    second = make_doctor(name="Dr. Grey")

    result = svc.add_doctor_to_appointment(appt["id"], second)
    assert result["id"] == appt["id"]

    doctors = {d["id"] for d in svc.get_appointment_doctors(appt["id"])}
    assert doctors == {schedule["doctor_id"], second}


def test_add_doctor_rechecks_shift_and_calendar(schedule, make_doctor, make_patient):
    appt = _book(schedule, "10:00")

    off_duty = make_doctor(name="Dr. Off", shifts=(("Tuesday", "09:00", "12:00"),))
    with pytest.raises(ValidationFailure) as exc:
        svc.add_doctor_to_appointment(appt["id"], off_duty)
    assert _reason(exc) == ValidationFailure.OUTSIDE_WORK_SHIFT

    busy = make_doctor(name="Dr. Busy")
    _book(schedule, "10:15", doctor_id=busy, patient_id=make_patient(name="Carol"))
    with pytest.raises(ValidationFailure) as exc:
        svc.add_doctor_to_appointment(appt["id"], busy)
    assert _reason(exc) == ValidationFailure.DOCTOR_CONFLICT

    with pytest.raises(ValidationFailure) as exc:
        svc.add_doctor_to_appointment(appt["id"], schedule["doctor_id"])
    assert _reason(exc) == ValidationFailure.ALREADY_ATTENDING


def test_add_doctor_to_missing_appointment(schedule):
    with pytest.raises(NotFound):
        svc.add_doctor_to_appointment("missing", schedule["doctor_id"])


def test_related_records(schedule):
    appt = _book(schedule, "10:00")
    assert svc.get_appointment_clinic(appt["id"])["id"] == schedule["clinic_id"]
    assert [p["id"] for p in svc.get_appointment_patients(appt["id"])] == [schedule["patient_id"]]
    with pytest.raises(NotFound):
        svc.get_appointment_clinic("missing")


def test_check_slot_reports_each_rule(schedule):
    _book(schedule, "10:00")
    result = svc.check_appointment_slot(
        schedule["doctor_id"], schedule["patient_id"], schedule["clinic_id"],
        f"{MONDAY}T10:15:00Z", 30,
    )
    assert result == {
        "withinClinicHours": True,
        "withinWorkShift": True,
        "doctorConflict": True,
        "patientConflict": True,
    }


def test_storage_failure_becomes_storage_error(schedule, monkeypatch):
    def broken(*args, **kwargs):
        raise OperationalError("INSERT INTO appointments", {}, Exception("database is locked"))

    monkeypatch.setattr(svc, "create_node", broken)
    with pytest.raises(StorageError):
        _book(schedule, "10:00")
    assert db.session.query(Appointment).count() == 0


def test_existence_gate(schedule):
    appt = _book(schedule, "10:00")
    assert doctor_exists(schedule["doctor_id"])
    assert patient_exists(schedule["patient_id"])
    assert clinic_exists(schedule["clinic_id"])
    assert appointment_exists(appt["id"])
    assert not appointment_exists("missing")
    assert not doctor_exists("")

    assert missing_entities("x", schedule["patient_id"], "y") == ["Doctor", "Clinic"]
    assert missing_entities(schedule["doctor_id"], schedule["patient_id"], schedule["clinic_id"]) == []
