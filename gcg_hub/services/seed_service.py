"""Demo dataset loader used by ``flask seed-demo``.

Safe to re-run: rows that already exist (by natural key) are left alone.
"""
import logging

from gcg_hub.models import db
from gcg_hub.models.auth import ROLE_ADMIN, ROLE_USER, User
from gcg_hub.models.compliance import Aspect, ChecklistItem, OrgUnit, Year
from gcg_hub.services.auth_service import hash_for_storage
from gcg_hub.utils.helpers import commit_or_raise

logger = logging.getLogger(__name__)

DEMO_YEARS = (2024, 2025)

DEMO_USERS = [
    {
        "username": "admin",
        "email": "admin@posgcg.com",
        "password": "Admin123!",
        "name": "Administrator",
        "role": ROLE_ADMIN,
        "directorate": "Direktorat Utama",
        "sub_directorate": "Subdirektorat Utama",
        "division": "Divisi Utama",
    },
    {
        "username": "user1",
        "email": "user1@posgcg.com",
        "password": "User123!",
        "name": "User Test 1",
        "role": ROLE_USER,
        "directorate": "Direktorat Keuangan",
        "sub_directorate": "Subdirektorat Akuntansi",
        "division": "Divisi Pelaporan",
    },
]

ASPECT_1 = "ASPEK 1. KOMITMEN TERHADAP TATA KELOLA YANG BAIK"
ASPECT_2 = "ASPEK 2. PENERAPAN FUNGSI AUDIT INTERNAL"
ASPECT_3 = "ASPEK 3. PENERAPAN FUNGSI COMPLIANCE"
ASPECT_4 = "ASPEK 4. PENERAPAN FUNGSI RISK MANAGEMENT"
ASPECT_5 = "ASPEK 5. PENERAPAN FUNGSI LEGAL"
DEMO_ASPECTS = (ASPECT_1, ASPECT_2, ASPECT_3, ASPECT_4, ASPECT_5)

DEMO_CHECKLIST = [
    (ASPECT_1, "Dokumen Kebijakan GCG"),
    (ASPECT_1, "Dokumen Struktur Organisasi"),
    (ASPECT_2, "Dokumen Charter Audit Internal"),
    (ASPECT_2, "Dokumen Program Audit Tahunan"),
    (ASPECT_3, "Dokumen Kebijakan Compliance"),
    (ASPECT_4, "Dokumen Kebijakan Manajemen Risiko"),
    (ASPECT_5, "Dokumen Kebijakan Legal"),
]

DEMO_ORG_UNITS = [
    ("Direktorat Keuangan", "Subdirektorat Akuntansi", "Divisi Pelaporan"),
    ("Direktorat Keuangan", "Subdirektorat Keuangan", "Divisi Treasury"),
    ("Direktorat Operasional", "Subdirektorat Produksi", "Divisi Manufaktur"),
]


def seed_demo() -> dict:
    """Insert the demo users, years, aspects, checklist items and org units.

    Returns a count of rows created per kind.
    """
    created = {"users": 0, "years": 0, "aspects": 0, "checklist_items": 0, "org_units": 0}

    for entry in DEMO_USERS:
        if User.query.filter_by(username=entry["username"]).first():
            continue
        fields = {k: v for k, v in entry.items() if k != "password"}
        db.session.add(User(password_hash=hash_for_storage(entry["password"]), **fields))
        created["users"] += 1

    for year in DEMO_YEARS:
        if not Year.query.filter_by(year_number=year).first():
            db.session.add(Year(
                year_number=year,
                name=f"Tahun Buku {year}",
                description=f"Tahun buku {year}",
            ))
            created["years"] += 1
        db.session.flush()

        for name in DEMO_ASPECTS:
            if not Aspect.query.filter_by(name=name, year=year).first():
                db.session.add(Aspect(name=name, year=year))
                created["aspects"] += 1

        for aspect, description in DEMO_CHECKLIST:
            if not ChecklistItem.query.filter_by(aspect=aspect, description=description, year=year).first():
                db.session.add(ChecklistItem(aspect=aspect, description=description, year=year))
                created["checklist_items"] += 1

        for directorate, sub_directorate, division in DEMO_ORG_UNITS:
            exists = OrgUnit.query.filter_by(
                year=year,
                directorate=directorate,
                sub_directorate=sub_directorate,
                division=division,
            ).first()
            if not exists:
                db.session.add(OrgUnit(
                    year=year,
                    directorate=directorate,
                    sub_directorate=sub_directorate,
                    division=division,
                ))
                created["org_units"] += 1

    commit_or_raise("Seed")
    logger.info("Demo data seeded %s", created)
    return created
