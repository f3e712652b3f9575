"""
Assignments Blueprint.

  GET    /api/assignments                — list (?year=, ?checklist_item_id=, ?org_unit_id=, ?status=, ?assigned_by=)
  GET    /api/assignments/stats/summary  — totals, by status / month, completion rate (?year=)
  GET    /api/assignments/<id>           — one assignment
  POST   /api/assignments                — create (admin)
  PUT    /api/assignments/<id>           — edit status / due date / notes (admin)
  PATCH  /api/assignments/<id>/status    — status change (admin or assigned unit member)
  DELETE /api/assignments/<id>           — delete (admin)
"""

from flask import Blueprint, g, jsonify, request

from gcg_hub.middleware.jwt_auth import require_admin, require_auth
from gcg_hub.services import assignment_service, statistics_service
from gcg_hub.services.assignment_service import AssignmentFilter
from gcg_hub.utils.helpers import filter_int

assignments_bp = Blueprint("assignments", __name__, url_prefix="/api/assignments")


@assignments_bp.route("", methods=["GET"])
@require_auth
def list_assignments():
    assignments = assignment_service.list_assignments(AssignmentFilter.from_args(request.args))
    return jsonify({"items": [a.to_dict() for a in assignments], "total": len(assignments)}), 200


@assignments_bp.route("/stats/summary", methods=["GET"])
@require_auth
def assignment_stats():
    year = filter_int(request.args.get("year"), "year")
    return jsonify(statistics_service.assignment_summary(year)), 200


@assignments_bp.route("/<int:assignment_id>", methods=["GET"])
@require_auth
def get_assignment(assignment_id):
    return jsonify(assignment_service.get_assignment(assignment_id).to_dict()), 200


@assignments_bp.route("", methods=["POST"])
@require_admin
def create_assignment():
    assignment = assignment_service.create_assignment(
        request.get_json(silent=True) or {},
        assigned_by=g.identity.id,
    )
    return jsonify(assignment.to_dict()), 201


@assignments_bp.route("/<int:assignment_id>", methods=["PUT"])
@require_admin
def update_assignment(assignment_id):
    assignment = assignment_service.update_assignment(assignment_id, request.get_json(silent=True) or {})
    return jsonify(assignment.to_dict()), 200


@assignments_bp.route("/<int:assignment_id>/status", methods=["PATCH"])
@require_auth
def update_assignment_status(assignment_id):
    data = request.get_json(silent=True) or {}
    assignment = assignment_service.update_status(g.identity, assignment_id, data.get("status"))
    return jsonify(assignment.to_dict()), 200


@assignments_bp.route("/<int:assignment_id>", methods=["DELETE"])
@require_admin
def delete_assignment(assignment_id):
    assignment_service.delete_assignment(assignment_id)
    return jsonify({"message": "Assignment deleted successfully"}), 200
