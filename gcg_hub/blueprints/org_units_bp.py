"""
Org Units Blueprint — company structure per year.

  GET    /api/org-units                    — list (?year=, ?directorate=, ?sub_directorate=, ?division=)
  GET    /api/org-units/stats/summary      — distinct counts and breakdowns (?year=)
  GET    /api/org-units/<id>               — one unit with assignment count
  GET    /api/org-units/<id>/assignments   — assignments on the unit
  POST   /api/org-units                    — create (admin)
  PUT    /api/org-units/<id>               — update (admin)
  DELETE /api/org-units/<id>               — delete a unit without assignments (admin)
"""

from flask import Blueprint, jsonify, request

from gcg_hub.middleware.jwt_auth import require_admin, require_auth
from gcg_hub.services import org_unit_service, statistics_service
from gcg_hub.services.org_unit_service import OrgUnitFilter
from gcg_hub.utils.helpers import filter_int

org_units_bp = Blueprint("org_units", __name__, url_prefix="/api/org-units")


@org_units_bp.route("", methods=["GET"])
@require_auth
def list_org_units():
    units = org_unit_service.list_org_units(OrgUnitFilter.from_args(request.args))
    return jsonify({
        "items": [u.to_dict(include_counts=True) for u in units],
        "total": len(units),
    }), 200


@org_units_bp.route("/stats/summary", methods=["GET"])
@require_auth
def org_unit_stats():
    year = filter_int(request.args.get("year"), "year")
    return jsonify(statistics_service.org_unit_summary(year)), 200


@org_units_bp.route("/<int:unit_id>", methods=["GET"])
@require_auth
def get_org_unit(unit_id):
    return jsonify(org_unit_service.get_org_unit(unit_id).to_dict(include_counts=True)), 200


@org_units_bp.route("/<int:unit_id>/assignments", methods=["GET"])
@require_auth
def org_unit_assignments(unit_id):
    unit, assignments = org_unit_service.org_unit_assignments(unit_id)
    return jsonify({
        "org_unit": unit.to_dict(),
        "items": [a.to_dict() for a in assignments],
        "total": len(assignments),
    }), 200


@org_units_bp.route("", methods=["POST"])
@require_admin
def create_org_unit():
    unit = org_unit_service.create_org_unit(request.get_json(silent=True) or {})
    return jsonify(unit.to_dict()), 201


@org_units_bp.route("/<int:unit_id>", methods=["PUT"])
@require_admin
def update_org_unit(unit_id):
    unit = org_unit_service.update_org_unit(unit_id, request.get_json(silent=True) or {})
    return jsonify(unit.to_dict()), 200


@org_units_bp.route("/<int:unit_id>", methods=["DELETE"])
@require_admin
def delete_org_unit(unit_id):
    org_unit_service.delete_org_unit(unit_id)
    return jsonify({"message": "Organizational structure deleted successfully"}), 200
