"""
Checklist Blueprint.

  GET    /api/checklist              — list (?year=, ?aspect=, ?search=)
  GET    /api/checklist/<id>         — one item with assignments and files (scoped)
  GET    /api/checklist/<id>/status  — uploaded / assigned / completed flags
  POST   /api/checklist              — create (admin)
  PUT    /api/checklist/<id>         — update (admin)
  DELETE /api/checklist/<id>         — delete an item without files or assignments (admin)
"""

from flask import Blueprint, g, jsonify, request

from gcg_hub.middleware.jwt_auth import require_admin, require_auth
from gcg_hub.services import checklist_service
from gcg_hub.services.checklist_service import ChecklistFilter

checklist_bp = Blueprint("checklist", __name__, url_prefix="/api/checklist")


@checklist_bp.route("", methods=["GET"])
@require_auth
def list_checklist():
    items = checklist_service.list_checklist(ChecklistFilter.from_args(request.args))
    return jsonify({"items": [i.to_dict() for i in items], "total": len(items)}), 200


@checklist_bp.route("/<int:item_id>", methods=["GET"])
@require_auth
def get_checklist_item(item_id):
    item = checklist_service.get_checklist_for(g.identity, item_id)
    return jsonify(item.to_dict(include_related=True)), 200


@checklist_bp.route("/<int:item_id>/status", methods=["GET"])
@require_auth
def checklist_status(item_id):
    return jsonify(checklist_service.checklist_status(item_id)), 200


@checklist_bp.route("", methods=["POST"])
@require_admin
def create_checklist_item():
    item = checklist_service.create_checklist_item(request.get_json(silent=True) or {})
    return jsonify(item.to_dict()), 201


@checklist_bp.route("/<int:item_id>", methods=["PUT"])
@require_admin
def update_checklist_item(item_id):
    item = checklist_service.update_checklist_item(item_id, request.get_json(silent=True) or {})
    return jsonify(item.to_dict()), 200


@checklist_bp.route("/<int:item_id>", methods=["DELETE"])
@require_admin
def delete_checklist_item(item_id):
    checklist_service.delete_checklist_item(item_id)
    return jsonify({"message": "Checklist item deleted successfully"}), 200
