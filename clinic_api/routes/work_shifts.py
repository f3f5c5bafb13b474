from flask import Blueprint, jsonify, request

from clinic_api.schemas import WorkShiftIn, parse_payload
from clinic_api.services import work_shift_service
from clinic_api.services.auth_service import login_required


work_shifts_bp = Blueprint("work_shifts", __name__, url_prefix="/workshifts")


@work_shifts_bp.route("", methods=["POST"])
@login_required()
def add_work_shift():
    body = parse_payload(WorkShiftIn, request.get_json(silent=True))
    shift = work_shift_service.create_work_shift(
        body.doctor_id, body.day, body.start_time, body.end_time
    )
    return jsonify(shift), 201


@work_shifts_bp.route("/<work_shift_id>", methods=["PUT"])
@login_required()
def update_work_shift(work_shift_id: str):
    body = parse_payload(WorkShiftIn, request.get_json(silent=True))
    shift = work_shift_service.update_work_shift(
        work_shift_id, body.doctor_id, body.day, body.start_time, body.end_time
    )
    return jsonify(shift), 200


@work_shifts_bp.route("/<work_shift_id>", methods=["DELETE"])
@login_required()
def delete_work_shift(work_shift_id: str):
    work_shift_service.delete_work_shift(work_shift_id)
    return jsonify({"message": "Work shift deleted successfully"}), 200


@work_shifts_bp.route("/<doctor_id>/<day>", methods=["GET"])
@login_required()
def get_work_shifts_by_day(doctor_id: str, day: str):
    return jsonify(work_shift_service.get_work_shifts_by_day(doctor_id, day.strip().title())), 200
