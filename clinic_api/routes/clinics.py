from flask import Blueprint, jsonify, request

from clinic_api.schemas import (
    ClinicCreate,
    ClinicUpdate,
    WorkAtAssign,
    changed_fields,
    parse_payload,
)
from clinic_api.services import clinic_service
from clinic_api.services.auth_service import login_required


clinics_bp = Blueprint("clinics", __name__, url_prefix="/clinics")


@clinics_bp.route("", methods=["POST"])
@login_required()
def create_clinic():
    body = parse_payload(ClinicCreate, request.get_json(silent=True))
    clinic = clinic_service.create_clinic(
        body.name, body.address, body.phone_number, body.open_time, body.close_time
    )
    return jsonify(clinic), 201


@clinics_bp.route("", methods=["GET"])
def get_all_clinics():
    return jsonify(clinic_service.list_clinics()), 200


@clinics_bp.route("/<clinic_id>", methods=["GET"])
def fetch_clinic_by_id(clinic_id: str):
    return jsonify(clinic_service.get_clinic(clinic_id)), 200


@clinics_bp.route("/<clinic_id>", methods=["PUT"])
@login_required()
def update_clinic(clinic_id: str):
    body = parse_payload(ClinicUpdate, request.get_json(silent=True))
    return jsonify(clinic_service.update_clinic(clinic_id, changed_fields(body))), 200


@clinics_bp.route("/<clinic_id>", methods=["DELETE"])
@login_required()
def delete_clinic(clinic_id: str):
    clinic_service.delete_clinic(clinic_id)
    return jsonify({"message": "Clinic deleted successfully"}), 200


@clinics_bp.route("/<clinic_id>/doctors", methods=["GET"])
def get_doctors_by_clinic(clinic_id: str):
    return jsonify(clinic_service.get_doctors_by_clinic(clinic_id)), 200


@clinics_bp.route("/<clinic_id>/workAt-clinic/<doctor_id>", methods=["POST"])
@login_required()
def assign_doctor_to_clinic(clinic_id: str, doctor_id: str):
    body = parse_payload(WorkAtAssign, request.get_json(silent=True))
    link = clinic_service.assign_doctor_to_clinic(doctor_id, clinic_id, body.start_date)
    return jsonify(link), 201


@clinics_bp.route("/<clinic_id>/workAt-clinic/<doctor_id>", methods=["PUT"])
@login_required()
def update_work_start_date(clinic_id: str, doctor_id: str):
    body = parse_payload(WorkAtAssign, request.get_json(silent=True))
    return jsonify(clinic_service.update_work_start_date(doctor_id, clinic_id, body.start_date)), 200


@clinics_bp.route("/<clinic_id>/workAt-clinic/<doctor_id>", methods=["DELETE"])
@login_required()
def delete_work_clinic(clinic_id: str, doctor_id: str):
    clinic_service.delete_work_relationship(doctor_id, clinic_id)
    return jsonify({"message": "Work relationship deleted successfully"}), 200
