from flask import Blueprint, jsonify, request

from clinic_api.schemas import MedicineCreate, MedicineUpdate, changed_fields, parse_payload
from clinic_api.services import medicine_service
from clinic_api.services.auth_service import login_required


medicines_bp = Blueprint("medicines", __name__, url_prefix="/medicines")


@medicines_bp.route("", methods=["GET"])
@login_required()
def get_all():
    return jsonify(medicine_service.list_medicines()), 200


@medicines_bp.route("", methods=["POST"])
@login_required()
def add():
    body = parse_payload(MedicineCreate, request.get_json(silent=True))
    medicine = medicine_service.create_medicine(
        body.medication_id,
        body.name,
        dosage=body.dosage,
        administration=body.administration,
        side_effects=body.side_effects,
        quantity=body.quantity,
    )
    return jsonify(medicine), 201


@medicines_bp.route("/<medication_id>", methods=["GET"])
@login_required()
def get_one(medication_id: str):
    return jsonify(medicine_service.get_medicine(medication_id)), 200


@medicines_bp.route("/<medication_id>", methods=["PUT"])
@login_required()
def update(medication_id: str):
    body = parse_payload(MedicineUpdate, request.get_json(silent=True))
    return jsonify(medicine_service.update_medicine(medication_id, changed_fields(body))), 200


@medicines_bp.route("/<medication_id>", methods=["DELETE"])
@login_required()
def delete(medication_id: str):
    medicine_service.delete_medicine(medication_id)
    return jsonify({"message": "Medicine deleted successfully"}), 200
