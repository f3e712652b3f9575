"""
Rate limiting with Flask-Limiter.

The Limiter instance is bound in ``gcg_hub/__init__.py`` without default
limits. The login route carries its own limit (LOGIN_RATE_LIMIT, default
10/minute per IP, see ``blueprints/auth_bp.py``); this module adds the
blueprint-level limits:

    - auth:   60/minute
    - health: exempt

Disabled in testing mode (RATELIMIT_ENABLED = False).
"""

from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, default_limits=[])


def login_rate_limit() -> str:
    return current_app.config.get("LOGIN_RATE_LIMIT", "10/minute")


def init_rate_limits(app):
    if app.config.get("TESTING"):
        app.logger.debug("Rate limiter disabled (TESTING=True)")
        return

    bp = app.blueprints.get("auth")
    if bp:
        limiter.limit("60/minute")(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured, login: %s", app.config.get("LOGIN_RATE_LIMIT"))
