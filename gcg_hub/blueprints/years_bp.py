"""
Years Blueprint — book years, addressed by their number.

  GET    /api/years               — list, newest first
  GET    /api/years/<year>        — one year with its aspects, checklist, org units
  POST   /api/years               — create (admin)
  PUT    /api/years/<year>        — update name / description / is_active (admin)
  DELETE /api/years/<year>        — delete an empty year (admin)
  GET    /api/years/<year>/stats  — per-year counts and coarse progress
"""

from flask import Blueprint, jsonify, request

from gcg_hub.middleware.jwt_auth import require_admin, require_auth
from gcg_hub.services import statistics_service, year_service
from gcg_hub.utils.helpers import parse_int

years_bp = Blueprint("years", __name__, url_prefix="/api/years")


@years_bp.route("", methods=["GET"])
@require_auth
def list_years():
    years = year_service.list_years()
    return jsonify({"items": [y.to_dict() for y in years], "total": len(years)}), 200


@years_bp.route("/<year>", methods=["GET"])
@require_auth
def get_year(year):
    return jsonify(year_service.get_year(parse_int(year, "year")).to_dict(include_children=True)), 200


@years_bp.route("", methods=["POST"])
@require_admin
def create_year():
    year = year_service.create_year(request.get_json(silent=True) or {})
    return jsonify(year.to_dict()), 201


@years_bp.route("/<year>", methods=["PUT"])
@require_admin
def update_year(year):
    updated = year_service.update_year(parse_int(year, "year"), request.get_json(silent=True) or {})
    return jsonify(updated.to_dict()), 200


@years_bp.route("/<year>", methods=["DELETE"])
@require_admin
def delete_year(year):
    year_service.delete_year(parse_int(year, "year"))
    return jsonify({"message": "Year deleted successfully"}), 200


@years_bp.route("/<year>/stats", methods=["GET"])
@require_auth
def year_stats(year):
    return jsonify(statistics_service.year_summary(parse_int(year, "year"))), 200
