from flask import Blueprint, jsonify, request
from flask_login import current_user, login_user, logout_user

from consignments.extensions import limiter
from consignments.services import AuthService

api_auth_bp = Blueprint("api_auth", __name__)


def _session_payload(user):
    data = user.to_dict()
    if user.owner:
        data["owner_id"] = user.owner.id
    if user.renter:
        data["renter_id"] = user.renter.id
    return data


@api_auth_bp.post("/signup")
@limiter.limit("10 per hour")
def signup():
    payload = request.get_json(silent=True) or {}
    user = AuthService.register_user(
        full_name=payload.get("full_name"),
        email=payload.get("email"),
        password=payload.get("password"),
        role=payload.get("role"),
        phone=payload.get("phone"),
        business_name=payload.get("business_name"),
    )
    login_user(user)
    return jsonify({"success": True, "user": _session_payload(user)}), 201


@api_auth_bp.post("/login")
@limiter.limit("10 per minute")
def login():
    payload = request.get_json(silent=True) or {}
    user = AuthService.authenticate_user(payload.get("email"), payload.get("password"))
    login_user(user, remember=bool(payload.get("remember")))
    return jsonify({"success": True, "user": _session_payload(user)})


@api_auth_bp.post("/logout")
def logout():
    logout_user()
    return jsonify({"success": True})


@api_auth_bp.get("/me")
def me():
    if not current_user.is_authenticated:
        return jsonify({"user": None}), 401
    return jsonify({"user": _session_payload(current_user)})
