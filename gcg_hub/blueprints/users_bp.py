"""
Users Blueprint.

  GET    /api/users              — list (admin)
  GET    /api/users/profile/me   — own profile
  PUT    /api/users/profile/me   — edit own profile
  GET    /api/users/<id>         — self or admin
  PUT    /api/users/<id>         — self or admin; role change admin only
  DELETE /api/users/<id>         — admin, never self
"""

from flask import Blueprint, g, jsonify, request

from gcg_hub.middleware.jwt_auth import require_admin, require_auth
from gcg_hub.services import user_service
from gcg_hub.services.user_service import UserFilter

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


@users_bp.route("", methods=["GET"])
@require_admin
def list_users():
    users = user_service.list_users(UserFilter.from_args(request.args))
    return jsonify({"items": [u.to_dict(include_counts=True) for u in users], "total": len(users)}), 200


@users_bp.route("/profile/me", methods=["GET"])
@require_auth
def get_profile():
    return jsonify(user_service.get_user(g.identity.id).to_dict()), 200


@users_bp.route("/profile/me", methods=["PUT"])
@require_auth
def update_profile():
    user = user_service.update_profile(g.identity, request.get_json(silent=True) or {})
    return jsonify(user.to_dict()), 200


@users_bp.route("/<int:user_id>", methods=["GET"])
@require_auth
def get_user(user_id):
    return jsonify(user_service.get_user_for(g.identity, user_id).to_dict(include_counts=True)), 200


@users_bp.route("/<int:user_id>", methods=["PUT"])
@require_auth
def update_user(user_id):
    user = user_service.update_user(g.identity, user_id, request.get_json(silent=True) or {})
    return jsonify(user.to_dict()), 200


@users_bp.route("/<int:user_id>", methods=["DELETE"])
@require_admin
def delete_user(user_id):
    user_service.delete_user(g.identity, user_id)
    return jsonify({"message": "User deleted successfully"}), 200
