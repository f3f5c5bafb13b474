from flask import Blueprint, jsonify, request

from clinic_api.schemas import PatientIn, parse_payload
from clinic_api.services import patient_service
from clinic_api.services.auth_service import login_required


patients_bp = Blueprint("patients", __name__, url_prefix="/patients")


@patients_bp.route("", methods=["POST"])
@login_required()
def save_patient():
    body = parse_payload(PatientIn, request.get_json(silent=True))
    return jsonify(patient_service.create_patient(body.name, body.phone, body.email)), 201


@patients_bp.route("/<patient_id>", methods=["GET"])
@login_required()
def get_patient(patient_id: str):
    return jsonify(patient_service.get_patient(patient_id)), 200


@patients_bp.route("/<patient_id>", methods=["DELETE"])
@login_required()
def delete_patient_route(patient_id: str):
    patient_service.delete_patient(patient_id)
    return jsonify({"message": "Patient deleted successfully"}), 200
