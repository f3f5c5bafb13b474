from flask import Blueprint, g, jsonify, request

from clinic_api.schemas import LoginIn, RegisterIn, parse_payload
from clinic_api.services import auth_service
from clinic_api.services.auth_service import login_required


auth_bp = Blueprint("auth", __name__)


@auth_bp.route("/auth/register", methods=["POST"])
def register():
    body = parse_payload(RegisterIn, request.get_json(silent=True))
    user = auth_service.register_user(body.username, body.password, body.role)
    return jsonify({"message": "User created", "user": user}), 201


@auth_bp.route("/auth/login", methods=["POST"])
def login():
    body = parse_payload(LoginIn, request.get_json(silent=True))
    token = auth_service.login_user(body.username, body.password)
    return jsonify({"message": "Logged in", "token": token}), 200


@auth_bp.route("/auth/logout", methods=["POST"])
def logout():
    auth_service.logout_user()
    return jsonify({"message": "Logged out"}), 200


@auth_bp.route("/profile", methods=["GET"])
@login_required()
def profile():
    return jsonify({"username": g.user.get("username"), "role": g.user.get("role")}), 200
