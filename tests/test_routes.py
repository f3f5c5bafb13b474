MONDAY = "2024-12-02"


def _appointment_body(schedule, clock="10:00", duration=30):
    return {
        "doctorId": schedule["doctor_id"],
        "patientId": schedule["patient_id"],
        "clinicId": schedule["clinic_id"],
        "appointmentDate": f"{MONDAY}T{clock}:00Z",
        "duration": duration,
    }


# -------------------------------
# AUTH
# -------------------------------

def test_protected_routes_need_a_token(client, schedule):
    resp = client.post("/appointments", json=_appointment_body(schedule))
    assert resp.status_code == 401

    resp = client.get("/profile", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 403


def test_register_login_profile_logout(client):
    resp = client.post(
        "/auth/register", json={"username": "drhouse", "password": "vicodin1", "role": "Doctors"}
    )
    assert resp.status_code == 201
    assert "password" not in resp.get_json()["user"]

    bad = client.post("/auth/login", json={"username": "drhouse", "password": "wrong"})
    assert bad.status_code == 401

    token = client.post("/auth/login", json={"username": "drhouse", "password": "vicodin1"}).get_json()["token"]
    assert client.get("/profile").get_json() == {"username": "drhouse", "role": "Doctors"}

    client.post("/auth/logout")
    assert client.get("/profile").status_code == 401
    # the token still works as a bearer header
    resp = client.get("/profile", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 200


def test_duplicate_username_is_rejected(client):
    body = {"username": "nurse", "password": "secret99"}
    assert client.post("/auth/register", json=body).status_code == 201
    resp = client.post("/auth/register", json=body)
    assert resp.status_code == 400
    assert resp.get_json()["reason"] == "already_exists"


# -------------------------------
# APPOINTMENTS
# -------------------------------

def test_appointment_lifecycle_over_http(auth_client, schedule):
    resp = auth_client.post("/appointments", json=_appointment_body(schedule))
    assert resp.status_code == 201
    appt = resp.get_json()
    assert appt["Status"] == "Scheduled"

    resp = auth_client.put(f"/appointments/{appt['id']}/status", json={"newStatus": "Completed"})
    assert resp.status_code == 200
    assert resp.get_json()["Status"] == "Completed"

    assert auth_client.delete(f"/appointments/{appt['id']}").status_code == 204
    assert auth_client.get(f"/appointments/{appt['id']}").status_code == 404


def test_booking_failures_carry_reason(auth_client, schedule):
    auth_client.post("/appointments", json=_appointment_body(schedule))

    resp = auth_client.post("/appointments", json=_appointment_body(schedule, "10:15"))
    assert resp.status_code == 400
    assert resp.get_json()["reason"] == "doctor_conflict"

    resp = auth_client.post("/appointments", json=_appointment_body(schedule, "08:00"))
    assert resp.get_json()["reason"] == "outside_clinic_hours"

    body = _appointment_body(schedule)
    body["appointmentDate"] = "tomorrow at ten"
    assert auth_client.post("/appointments", json=body).get_json()["reason"] == "invalid_date"

    body = _appointment_body(schedule, duration=-30)
    assert auth_client.post("/appointments", json=body).get_json()["reason"] == "invalid_duration"

    body = _appointment_body(schedule, duration="30")
    assert auth_client.post("/appointments", json=body).get_json()["reason"] == "invalid_request"


def test_date_is_checked_before_duration(auth_client, schedule):
    body = _appointment_body(schedule, duration=0)
    body["appointmentDate"] = "bad"
    for path in ("/appointments", "/appointments/check"):
        resp = auth_client.post(path, json=body)
        assert resp.status_code == 400
        assert resp.get_json()["reason"] == "invalid_date"

    body = _appointment_body(schedule, duration=0)
    for path in ("/appointments", "/appointments/check"):
        assert auth_client.post(path, json=body).get_json()["reason"] == "invalid_duration"


def test_missing_entity_is_404(auth_client, schedule):
    body = _appointment_body(schedule)
    body["clinicId"] = "nowhere"
    assert auth_client.post("/appointments", json=body).status_code == 404


def test_status_update_validation(auth_client, schedule):
    resp = auth_client.put("/appointments/missing/status", json={"newStatus": "Cancelled"})
    assert resp.status_code == 404

    resp = auth_client.put("/appointments/missing/status", json={"newStatus": "Lost"})
    assert resp.status_code == 400
    assert resp.get_json()["reason"] == "invalid_status"


def test_add_doctor_and_related_lists(auth_client, schedule, make_doctor):
    appt = auth_client.post("/appointments", json=_appointment_body(schedule)).get_json()
    second = make_doctor(name="Dr. Grey")

    resp = auth_client.post("/appointments/add-doctor", json={"appointmentId": appt["id"], "doctorId": second})
    assert resp.status_code == 200
    assert resp.get_json()["appointment"]["id"] == appt["id"]

    doctors = auth_client.get(f"/appointments/{appt['id']}/doctors").get_json()
    assert {d["id"] for d in doctors} == {schedule["doctor_id"], second}
    assert auth_client.get(f"/appointments/{appt['id']}/clinic").get_json()["openTime"] == "09:00"
    assert len(auth_client.get(f"/appointments/{appt['id']}/patients").get_json()) == 1


def test_check_endpoint_writes_nothing(auth_client, schedule):
    resp = auth_client.post("/appointments/check", json=_appointment_body(schedule))
    assert resp.status_code == 200
    assert resp.get_json()["available"] is True

    resp = auth_client.post("/appointments/check", json=_appointment_body(schedule))
    assert resp.get_json()["doctorConflict"] is False


def test_storage_error_is_generic_500(auth_client, schedule, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from clinic_api.services import appointment_service

    def broken(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(appointment_service, "get_node", broken)
    resp = auth_client.get("/appointments/anything")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}
