"""
JWT Auth Middleware — resolves ``Authorization: Bearer <token>`` into ``g.identity``.

The before_request hook never rejects a request by itself. It leaves either
``g.identity`` (an ``auth_service.Identity``) or ``g.auth_error`` (the failure
message) behind; views opt in to enforcement with the decorators below.

Usage:
    @bp.route("/years", methods=["POST"])
    @require_admin
    def create_year():
        ...
"""

import logging
from functools import wraps

from flask import g, request

from gcg_hub.core.exceptions import AuthenticationError
from gcg_hub.services import auth_service
from gcg_hub.utils.errors import E, api_error

logger = logging.getLogger(__name__)

# Paths that never carry a token
JWT_SKIP_PREFIXES = (
    "/api/auth/login",
    "/api/health",
)

MISSING_TOKEN = "Access token required"


def init_jwt_middleware(app):
    """Register the bearer-token resolver as a before_request hook."""

    @app.before_request
    def _jwt_auth():
        g.identity = None
        g.auth_error = MISSING_TOKEN

        path = request.path
        if not path.startswith("/api/") or path.startswith(JWT_SKIP_PREFIXES):
            return

        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return
        token = header[7:].strip()
        if not token:
            return

        try:
            g.identity = auth_service.verify(token)
            g.auth_error = None
        except AuthenticationError as exc:
            g.auth_error = str(exc)
            logger.debug("Bearer token rejected: %s", exc)


def current_identity():
    return getattr(g, "identity", None)


def require_auth(fn):
    """401 unless the request carried a valid token for an existing user."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        if current_identity() is None:
            return api_error(E.UNAUTHENTICATED, getattr(g, "auth_error", None) or MISSING_TOKEN)
        return fn(*args, **kwargs)

    return wrapper


def require_admin(fn):
    """401 without a valid token, 403 for non-admin callers."""

    @wraps(fn)
    @require_auth
    def wrapper(*args, **kwargs):
        if not g.identity.is_admin:
            return api_error(E.FORBIDDEN, "Admin access required")
        return fn(*args, **kwargs)

    return wrapper
