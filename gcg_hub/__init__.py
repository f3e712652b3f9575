"""
GCG Document Hub
Flask Application Factory.

Usage:
    from gcg_hub import create_app
    app = create_app()           # defaults to APP_ENV or "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask
from flask_cors import CORS
from flask_migrate import Migrate
from sqlalchemy import engine as _sa_engine
from sqlalchemy import event as _sa_event

from gcg_hub.config import config
from gcg_hub.models import db
from gcg_hub.middleware.jwt_auth import init_jwt_middleware
from gcg_hub.middleware.logging_config import configure_logging
from gcg_hub.middleware.rate_limiter import init_rate_limits, limiter
from gcg_hub.middleware.security_headers import init_security_headers
from gcg_hub.middleware.timing import init_request_timing
from gcg_hub.services.file_storage import init_storage

logger = logging.getLogger(__name__)


@_sa_event.listens_for(_sa_engine.Engine, "connect")
def _enable_sqlite_fk(dbapi_conn, connection_record):
    """Enable foreign key enforcement for SQLite connections."""
    if "sqlite" in type(dbapi_conn).__module__:
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


migrate = Migrate()


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: "development", "testing" or "production".
                     Defaults to the APP_ENV env var, or "development".
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name]())

    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    # ── Middleware ───────────────────────────────────────────────────────
    init_security_headers(app)
    init_request_timing(app)
    init_jwt_middleware(app)

    # Multipart overhead on top of the largest accepted file
    if not app.config.get("MAX_CONTENT_LENGTH"):
        app.config["MAX_CONTENT_LENGTH"] = app.config["MAX_UPLOAD_SIZE"] + 1024 * 1024
    init_storage(app)

    # ── Models (registered on db.metadata for create_all / Alembic) ──────
    from gcg_hub.models import auth as _auth_models  # noqa: F401
    from gcg_hub.models import compliance as _compliance_models  # noqa: F401
    from gcg_hub.models import document as _document_models  # noqa: F401

    with app.app_context():
        if db.engine.url.get_backend_name() == "sqlite" and db.engine.url.database not in (None, "", ":memory:"):
            os.makedirs(os.path.dirname(os.path.abspath(db.engine.url.database)), exist_ok=True)
        db.create_all()

    # ── Blueprints ───────────────────────────────────────────────────────
    from gcg_hub.blueprints.aspects_bp import aspects_bp
    from gcg_hub.blueprints.assignments_bp import assignments_bp
    from gcg_hub.blueprints.auth_bp import auth_bp
    from gcg_hub.blueprints.checklist_bp import checklist_bp
    from gcg_hub.blueprints.errors import register_error_handlers
    from gcg_hub.blueprints.files_bp import files_bp
    from gcg_hub.blueprints.health_bp import health_bp
    from gcg_hub.blueprints.org_units_bp import org_units_bp
    from gcg_hub.blueprints.users_bp import users_bp
    from gcg_hub.blueprints.years_bp import years_bp

    app.register_blueprint(health_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(users_bp)
    app.register_blueprint(years_bp)
    app.register_blueprint(aspects_bp)
    app.register_blueprint(checklist_bp)
    app.register_blueprint(org_units_bp)
    app.register_blueprint(assignments_bp)
    app.register_blueprint(files_bp)

    register_error_handlers(app)

    # ── CLI commands ─────────────────────────────────────────────────────
    from gcg_hub.aoi.cli import aoi_cli

    app.cli.add_command(aoi_cli)

    @app.cli.command("seed-demo")
    def seed_demo_cmd():
        """Seed demo users, years, aspects, checklist items and org units."""
        from gcg_hub.services.seed_service import seed_demo
        created = seed_demo()
        logger.info("Seeded demo data: %s", created)

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app)

    return app
