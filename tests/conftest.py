import uuid

import pytest
from flask import Flask

from clinic_api.app_factory import create_app
from clinic_api.models import Clinic, Doctor, Patient, WorkShift
from config import TestConfig
from extensions import db

# 2024-12-02 is a Monday
MONDAY = "2024-12-02"


@pytest.fixture
def app() -> Flask:
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app: Flask):
    return app.test_client()


@pytest.fixture
def auth_client(client):
    client.post(
        "/auth/register",
        json={"username": "reception", "password": "s3cret-pass", "role": "admin"},
    )
    resp = client.post("/auth/login", json={"username": "reception", "password": "s3cret-pass"})
    assert resp.status_code == 200
    return client


def insert_clinic(open_time="09:00", close_time="17:00", name="Central Clinic") -> str:
    clinic_id = str(uuid.uuid4())
    db.session.add(Clinic(
        id=clinic_id, name=name, address="1 Main St", phone_number="0281234567",
        open_time=open_time, close_time=close_time,
    ))
    db.session.commit()
    return clinic_id


def insert_doctor(name="Dr. House", shifts=(("Monday", "09:00", "12:00"),)) -> str:
    doctor_id = str(uuid.uuid4())
    db.session.add(Doctor(id=doctor_id, name=name, specialization="Diagnostics", phone="0900000000"))
    for day, start, end in shifts:
        db.session.add(WorkShift(doctor_id=doctor_id, day=day, start_time=start, end_time=end))
    db.session.commit()
    return doctor_id


def insert_patient(name="Alice", phone=None) -> str:
    patient_id = str(uuid.uuid4())
    db.session.add(Patient(id=patient_id, name=name, phone=phone or uuid.uuid4().hex[:12]))
    db.session.commit()
    return patient_id


@pytest.fixture
def schedule(app):
    """Clinic open 09:00-17:00, a doctor on Monday 09:00-12:00 and one patient."""
    return {
        "clinic_id": insert_clinic(),
        "doctor_id": insert_doctor(),
        "patient_id": insert_patient(),
    }


@pytest.fixture
def make_clinic(app):
    return insert_clinic


@pytest.fixture
def make_doctor(app):
    return insert_doctor


@pytest.fixture
def make_patient(app):
    return insert_patient
