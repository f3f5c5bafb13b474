from flask import Blueprint, jsonify, request

from clinic_api.schemas import AddDoctor, AppointmentCreate, StatusUpdate, parse_payload
from clinic_api.services import appointment_service
from clinic_api.services.auth_service import login_required


appointments_bp = Blueprint("appointments", __name__, url_prefix="/appointments")


@appointments_bp.route("", methods=["POST"])
@login_required()
def add_appointment():
    """
    Book an appointment after clinic-hours, work-shift and conflict checks.
    """
    body = parse_payload(AppointmentCreate, request.get_json(silent=True))
    appointment = appointment_service.create_appointment(
        body.doctor_id,
        body.patient_id,
        body.clinic_id,
        body.appointment_date,
        body.duration,
    )
    return jsonify(appointment), 201


@appointments_bp.route("/check", methods=["POST"])
@login_required()
def check_appointment():
    """
    Dry run of the booking checks; nothing is written.
    """
    body = parse_payload(AppointmentCreate, request.get_json(silent=True))
    result = appointment_service.check_appointment_slot(
        body.doctor_id,
        body.patient_id,
        body.clinic_id,
        body.appointment_date,
        body.duration,
    )
    result["available"] = (
        result["withinClinicHours"]
        and result["withinWorkShift"]
        and not result["doctorConflict"]
        and not result["patientConflict"]
    )
    return jsonify(result), 200


@appointments_bp.route("/<appointment_id>", methods=["GET"])
@login_required()
def get_appointment(appointment_id: str):
    return jsonify(appointment_service.get_appointment(appointment_id)), 200


@appointments_bp.route("/<appointment_id>/status", methods=["PUT"])
@login_required()
def update_appointment_status(appointment_id: str):
    body = parse_payload(StatusUpdate, request.get_json(silent=True))
    updated = appointment_service.update_appointment_status(appointment_id, body.new_status)
    return jsonify(updated), 200


@appointments_bp.route("/<appointment_id>", methods=["DELETE"])
@login_required()
def delete_appointment(appointment_id: str):
    appointment_service.delete_appointment(appointment_id)
    return "", 204


@appointments_bp.route("/<appointment_id>/doctors", methods=["GET"])
@login_required()
def get_doctors(appointment_id: str):
    return jsonify(appointment_service.get_appointment_doctors(appointment_id)), 200


@appointments_bp.route("/<appointment_id>/patients", methods=["GET"])
@login_required()
def get_patients(appointment_id: str):
    return jsonify(appointment_service.get_appointment_patients(appointment_id)), 200


@appointments_bp.route("/<appointment_id>/clinic", methods=["GET"])
@login_required()
def get_clinic(appointment_id: str):
    return jsonify(appointment_service.get_appointment_clinic(appointment_id)), 200


@appointments_bp.route("/add-doctor", methods=["POST"])
@login_required()
def add_doctor_to_appointment():
    """
    Add another attending doctor to an existing appointment.
    """
    body = parse_payload(AddDoctor, request.get_json(silent=True))
    appointment = appointment_service.add_doctor_to_appointment(body.appointment_id, body.doctor_id)
    return jsonify({
        "message": "Doctor added to appointment successfully.",
        "appointment": appointment,
    }), 200
