"""
Statistics service and demo seed.
"""

from datetime import datetime, timezone

import pytest

from gcg_hub.models import db
from gcg_hub.models.auth import User
from gcg_hub.models.compliance import Aspect, Assignment, ChecklistItem, OrgUnit, Year
from gcg_hub.models.document import FileRecord
from gcg_hub.services import statistics_service
from gcg_hub.services.seed_service import seed_demo


class TestCompletionRate:
    @pytest.mark.parametrize("completed, total, expected", [
        (0, 0, 0), (0, 4, 0), (1, 3, 33), (2, 3, 67), (4, 4, 100),
    ])
    def test_rounding(self, completed, total, expected):
        assert statistics_service.completion_rate(completed, total) == expected


class TestAssignmentSummary:
    def test_empty(self):
        data = statistics_service.assignment_summary(2024)
        assert data == {"year": 2024, "total": 0, "by_status": [], "by_month": [], "completion_rate": 0}

    def test_counts_by_status_and_month(self, admin_user, checklist_item, org_unit, other_unit):
        db.session.add_all([
            Assignment(checklist_item_id=checklist_item.id, org_unit_id=org_unit.id,
                       assigned_by=admin_user.id, status="COMPLETED",
                       assigned_at=datetime(2024, 3, 5, tzinfo=timezone.utc)),
            Assignment(checklist_item_id=checklist_item.id, org_unit_id=other_unit.id,
                       assigned_by=admin_user.id, status="PENDING",
                       assigned_at=datetime(2024, 4, 1, tzinfo=timezone.utc)),
        ])
        db.session.commit()
        data = statistics_service.assignment_summary(2024)
        assert data["total"] == 2
        assert data["by_status"] == [{"status": "COMPLETED", "count": 1}, {"status": "PENDING", "count": 1}]
        assert data["by_month"] == [{"month": "2024-03", "count": 1}, {"month": "2024-04", "count": 1}]
        assert data["completion_rate"] == 50
        assert statistics_service.assignment_summary(2025)["total"] == 0
        assert statistics_service.assignment_summary()["total"] == 2


class TestFileSummary:
    def test_sizes_and_types(self, regular_user, checklist_item):
        for size, mime in ((100, "application/pdf"), (201, "application/pdf"), (50, "image/png")):
            db.session.add(FileRecord(
                file_name=f"file-{size}", original_name=f"{size}.bin", file_path=f"/tmp/{size}",
                file_size=size, mime_type=mime, checklist_item_id=checklist_item.id,
                year=2024, uploaded_by=regular_user.id,
            ))
        db.session.commit()
        data = statistics_service.file_summary(2024)
        assert data["total"] == 3
        assert data["total_size"] == 351
        assert data["average_size"] == 117
        assert data["by_type"] == [{"type": "application/pdf", "count": 2}, {"type": "image/png", "count": 1}]

    def test_empty(self):
        data = statistics_service.file_summary(2024)
        assert data["total"] == 0
        assert data["average_size"] == 0


class TestOrgUnitSummary:
    def test_null_division_not_counted(self, org_unit):
        db.session.add(OrgUnit(year=2024, directorate="Direktorat Keuangan",
                               sub_directorate="Subdirektorat Akuntansi", division=None))
        db.session.commit()
        data = statistics_service.org_unit_summary(2024)
        assert data["total"] == 2
        assert data["directorate"] == 1
        assert data["division"] == 1
        assert data["breakdown"]["sub_directorate"] == [{"name": "Subdirektorat Akuntansi", "count": 2}]


class TestYearSummary:
    def test_binary_progress(self, aspect):
        data = statistics_service.year_summary(2024)
        assert data["aspects_count"] == 1
        assert data["progress"] == {"aspects": 100, "checklist": 0, "org_units": 0}


class TestSeedDemo:
    def test_seed_is_idempotent(self):
        first = seed_demo()
        assert first["users"] == 2
        assert first["years"] == 2
        assert Year.query.count() == 2
        assert Aspect.query.filter_by(year=2024).count() == 5
        assert OrgUnit.query.filter_by(year=2025).count() == 3
        assert ChecklistItem.query.count() == first["checklist_items"]

        second = seed_demo()
        assert set(second.values()) == {0}
        assert User.query.count() == 2

    def test_seed_command(self, app):
        res = app.test_cli_runner().invoke(args=["seed-demo"])
        assert res.exit_code == 0, res.output
        assert User.query.filter_by(username="admin").first().role == "ADMIN"
