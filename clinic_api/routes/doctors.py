from flask import Blueprint, jsonify, request

from clinic_api.schemas import DoctorCreate, DoctorUpdate, changed_fields, parse_payload
from clinic_api.services import doctor_service
from clinic_api.services.auth_service import login_required


doctors_bp = Blueprint("doctors", __name__, url_prefix="/doctors")


@doctors_bp.route("", methods=["POST"])
@login_required()
def add_doctor():
    body = parse_payload(DoctorCreate, request.get_json(silent=True))
    return jsonify(doctor_service.create_doctor(body.name, body.specialization, body.phone)), 201


@doctors_bp.route("", methods=["GET"])
def get_doctors():
    return jsonify(doctor_service.list_doctors()), 200


@doctors_bp.route("/<doctor_id>", methods=["GET"])
def get_doctor(doctor_id: str):
    return jsonify(doctor_service.get_doctor(doctor_id)), 200


@doctors_bp.route("/<doctor_id>", methods=["PUT"])
@login_required()
def update_doctor(doctor_id: str):
    body = parse_payload(DoctorUpdate, request.get_json(silent=True))
    return jsonify(doctor_service.update_doctor(doctor_id, changed_fields(body))), 200


@doctors_bp.route("/<doctor_id>", methods=["DELETE"])
@login_required()
def delete_doctor(doctor_id: str):
    doctor_service.delete_doctor(doctor_id)
    return jsonify({"message": "Doctor deleted successfully"}), 200


@doctors_bp.route("/<doctor_id>/clinics", methods=["GET"])
def list_clinics_by_doctor(doctor_id: str):
    return jsonify(doctor_service.get_clinics_by_doctor(doctor_id)), 200
