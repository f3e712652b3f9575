"""
Shared pytest fixtures for the GCG Document Hub test suite.

Provides:
    - app: Flask application (session-scoped, temp upload folder + AOI store)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client
    - admin_user / regular_user: users with org-unit attributes
    - admin_headers / user_headers: bearer auth headers for them
    - year, aspect, checklist_item, org_unit: a minimal 2024 structure
"""

import os
import shutil

import pytest

from gcg_hub import create_app
from gcg_hub.models import db as _db
from gcg_hub.models.auth import ROLE_ADMIN, ROLE_USER, User
from gcg_hub.models.compliance import Aspect, ChecklistItem, OrgUnit, Year
from gcg_hub.services.file_storage import init_storage
from gcg_hub.services.jwt_service import generate_access_token
from gcg_hub.utils.crypto import hash_password

ADMIN_PASSWORD = "Admin123!"
USER_PASSWORD = "User123!"


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app(tmp_path_factory):
    """Create the Flask application once per test session."""
    application = create_app("testing")
    base = tmp_path_factory.mktemp("gcg_hub")
    application.config.update(
        UPLOAD_FOLDER=str(base / "uploads"),
        AOI_STORE_PATH=str(base / "aoi_store.json"),
    )
    init_storage(application)
    return application


@pytest.fixture(autouse=True)
def session(app):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        _db.create_all()
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()
        shutil.rmtree(app.config["UPLOAD_FOLDER"], ignore_errors=True)
        app.extensions.pop("aoi_store", None)
        if os.path.exists(app.config["AOI_STORE_PATH"]):
            os.remove(app.config["AOI_STORE_PATH"])


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


# ── Users & auth ─────────────────────────────────────────────────────────


def make_user(username, password, role=ROLE_USER, directorate=None, sub_directorate=None, division=None):
    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash=hash_password(password, rounds=4),
        name=username.title(),
        role=role,
        directorate=directorate,
        sub_directorate=sub_directorate,
        division=division,
    )
    _db.session.add(user)
    _db.session.commit()
    return user


def auth_header(user):
    return {"Authorization": f"Bearer {generate_access_token(user.id)}"}


@pytest.fixture()
def admin_user():
    return make_user(
        "admin", ADMIN_PASSWORD, ROLE_ADMIN,
        "Direktorat Utama", "Subdirektorat Utama", "Divisi Utama",
    )


@pytest.fixture()
def regular_user():
    return make_user(
        "user1", USER_PASSWORD, ROLE_USER,
        "Direktorat Keuangan", "Subdirektorat Akuntansi", "Divisi Pelaporan",
    )


@pytest.fixture()
def admin_headers(admin_user):
    return auth_header(admin_user)


@pytest.fixture()
def user_headers(regular_user):
    return auth_header(regular_user)


# ── Compliance structure ─────────────────────────────────────────────────


@pytest.fixture()
def year():
    y = Year(year_number=2024, name="Tahun Buku 2024", description="Tahun buku 2024")
    _db.session.add(y)
    _db.session.commit()
    return y


@pytest.fixture()
def aspect(year):
    a = Aspect(name="ASPECT 1. KOMITMEN", year=2024)
    _db.session.add(a)
    _db.session.commit()
    return a


@pytest.fixture()
def checklist_item(aspect):
    item = ChecklistItem(aspect=aspect.name, description="Pedoman GCG telah disahkan", year=2024)
    _db.session.add(item)
    _db.session.commit()
    return item


@pytest.fixture()
def org_unit(year):
    """The unit matching ``regular_user``'s attributes."""
    unit = OrgUnit(
        year=2024,
        directorate="Direktorat Keuangan",
        sub_directorate="Subdirektorat Akuntansi",
        division="Divisi Pelaporan",
    )
    _db.session.add(unit)
    _db.session.commit()
    return unit


@pytest.fixture()
def other_unit(year):
    unit = OrgUnit(
        year=2024,
        directorate="Direktorat Operasional",
        sub_directorate="Subdirektorat Produksi",
        division="Divisi Manufaktur",
    )
    _db.session.add(unit)
    _db.session.commit()
    return unit
