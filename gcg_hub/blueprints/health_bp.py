"""
Health and API info.

    GET /api/health  — process + database status
    GET /api         — service name, version and route groups
"""

import logging
import time

from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from gcg_hub.models import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api")

API_GROUPS = {
    "auth": "/api/auth",
    "users": "/api/users",
    "years": "/api/years",
    "aspects": "/api/aspects",
    "checklist": "/api/checklist",
    "org_units": "/api/org-units",
    "assignments": "/api/assignments",
    "files": "/api/files",
}


@health_bp.route("/health", methods=["GET"])
def health():
    checks = {}
    healthy = True
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        checks["database"] = {"status": "ok", "latency_ms": round((time.perf_counter() - t0) * 1000, 1)}
    except SQLAlchemyError as exc:
        db.session.rollback()
        checks["database"] = {"status": "error", "detail": str(exc.__class__.__name__)}
        healthy = False
        logger.error("Health check, database failed: %s", exc)

    return jsonify({
        "status": "ok" if healthy else "degraded",
        "checks": checks,
    }), 200 if healthy else 503


@health_bp.route("", methods=["GET"])
def api_info():
    return jsonify({
        "name": "GCG Document Hub API",
        "version": current_app.config.get("APP_VERSION", "1.0.0"),
        "endpoints": API_GROUPS,
    }), 200
