"""
Auth Blueprint — login, account registration, password endpoints.

  POST /api/auth/login              — username or email + password → access token
  POST /api/auth/register           — create a user (admin)
  GET  /api/auth/me                 — current identity
  POST /api/auth/change-password    — change own password
  POST /api/auth/validate-password  — strength check
  POST /api/auth/generate-password  — random policy-compliant password
"""

from flask import Blueprint, g, jsonify, request

from gcg_hub.middleware.jwt_auth import require_admin, require_auth
from gcg_hub.middleware.rate_limiter import limiter, login_rate_limit
from gcg_hub.services import auth_service, user_service
from gcg_hub.services.jwt_service import token_response
from gcg_hub.utils.crypto import generate_password
from gcg_hub.utils.errors import E, api_error

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


@auth_bp.route("/login", methods=["POST"])
@limiter.limit(login_rate_limit)
def login():
    """
    Body: { "username": "<username or email>", "password": "..." }
    """
    data = request.get_json(silent=True) or {}
    token, identity = auth_service.authenticate(data.get("username", ""), data.get("password", ""))
    body = token_response(token)
    body["message"] = "Login successful"
    body["user"] = identity.to_dict()
    return jsonify(body), 200


@auth_bp.route("/register", methods=["POST"])
@require_admin
def register():
    data = request.get_json(silent=True) or {}
    user = user_service.register_user(data)
    return jsonify({"message": "User created successfully", "user": user.to_dict()}), 201


@auth_bp.route("/me", methods=["GET"])
@require_auth
def me():
    return jsonify({"user": g.identity.to_dict()}), 200


@auth_bp.route("/change-password", methods=["POST"])
@require_auth
def change_password():
    data = request.get_json(silent=True) or {}
    auth_service.change_password(
        g.identity,
        data.get("current_password", ""),
        data.get("new_password", ""),
    )
    return jsonify({"message": "Password changed successfully"}), 200


@auth_bp.route("/validate-password", methods=["POST"])
def validate_password():
    data = request.get_json(silent=True) or {}
    password = data.get("password")
    if not password:
        return api_error(E.VALIDATION_REQUIRED, "Password is required", details={"password": "missing"})
    return jsonify(auth_service.check_password_strength(password)), 200


@auth_bp.route("/generate-password", methods=["POST"])
def generate_password_route():
    password = generate_password()
    result = auth_service.check_password_strength(password)
    return jsonify({
        "password": password,
        "strength": result["strength"],
        "message": "Password generated successfully",
    }), 200
