"""
Aspects Blueprint.

  GET    /api/aspects                  — list (?year=, ?search=)
  GET    /api/aspects/<id>             — one aspect with checklist count
  GET    /api/aspects/<id>/checklist   — the aspect's checklist items
  POST   /api/aspects                  — create (admin)
  PUT    /api/aspects/<id>             — update (admin)
  DELETE /api/aspects/<id>             — delete an aspect without items (admin)
"""

from flask import Blueprint, jsonify, request

from gcg_hub.middleware.jwt_auth import require_admin, require_auth
from gcg_hub.services import aspect_service
from gcg_hub.services.aspect_service import AspectFilter

aspects_bp = Blueprint("aspects", __name__, url_prefix="/api/aspects")


@aspects_bp.route("", methods=["GET"])
@require_auth
def list_aspects():
    aspects = aspect_service.list_aspects(AspectFilter.from_args(request.args))
    return jsonify({
        "items": [a.to_dict(include_counts=True) for a in aspects],
        "total": len(aspects),
    }), 200


@aspects_bp.route("/<int:aspect_id>", methods=["GET"])
@require_auth
def get_aspect(aspect_id):
    return jsonify(aspect_service.get_aspect(aspect_id).to_dict(include_counts=True)), 200


@aspects_bp.route("/<int:aspect_id>/checklist", methods=["GET"])
@require_auth
def aspect_checklist(aspect_id):
    aspect, items = aspect_service.aspect_checklist(aspect_id)
    return jsonify({
        "aspect": aspect.to_dict(),
        "items": [i.to_dict() for i in items],
        "total": len(items),
    }), 200


@aspects_bp.route("", methods=["POST"])
@require_admin
def create_aspect():
    aspect = aspect_service.create_aspect(request.get_json(silent=True) or {})
    return jsonify(aspect.to_dict()), 201


@aspects_bp.route("/<int:aspect_id>", methods=["PUT"])
@require_admin
def update_aspect(aspect_id):
    aspect = aspect_service.update_aspect(aspect_id, request.get_json(silent=True) or {})
    return jsonify(aspect.to_dict()), 200


@aspects_bp.route("/<int:aspect_id>", methods=["DELETE"])
@require_admin
def delete_aspect(aspect_id):
    aspect_service.delete_aspect(aspect_id)
    return jsonify({"message": "Aspect deleted successfully"}), 200
