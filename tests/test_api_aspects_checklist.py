"""
Aspects and checklist API.

Checklist items reference their aspect by name within a year; these tests
pin the referential checks, rename cascade, delete guards and org-unit
scoping of the item detail endpoint.
"""

from gcg_hub.models import db
from gcg_hub.models.compliance import Assignment, ChecklistItem


# ═══════════════════════════════════════════════════════════════
# Aspects
# ═══════════════════════════════════════════════════════════════

class TestAspectsAPI:
    def test_create(self, client, admin_headers, year):
        res = client.post("/api/aspects", headers=admin_headers, json={"name": "ASPECT 2. IMPLEMENTASI", "year": 2024})
        assert res.status_code == 201
        assert res.get_json()["name"] == "ASPECT 2. IMPLEMENTASI"

    def test_create_unknown_year(self, client, admin_headers):
        res = client.post("/api/aspects", headers=admin_headers, json={"name": "X", "year": 2030})
        assert res.status_code == 400
        assert res.get_json()["error"] == "Year does not exist"

    def test_create_duplicate(self, client, admin_headers, aspect):
        res = client.post("/api/aspects", headers=admin_headers, json={"name": aspect.name, "year": 2024})
        assert res.status_code == 409
        assert res.get_json()["error"] == "Aspect already exists for the specified year"

    def test_list_with_counts_and_search(self, client, user_headers, checklist_item):
        res = client.get("/api/aspects?year=2024&search=komit", headers=user_headers)
        data = res.get_json()
        assert data["total"] == 1
        assert data["items"][0]["checklist_count"] == 1

        res = client.get("/api/aspects?search=nothing", headers=user_headers)
        assert res.get_json()["total"] == 0

    def test_year_filter_all_means_no_filter(self, client, user_headers, aspect):
        res = client.get("/api/aspects?year=all", headers=user_headers)
        assert res.get_json()["total"] == 1

    def test_rename_cascades_to_items(self, client, admin_headers, aspect, checklist_item):
        res = client.put(f"/api/aspects/{aspect.id}", headers=admin_headers, json={
            "name": "ASPECT 1. KOMITMEN GCG", "year": 2024,
        })
        assert res.status_code == 200
        db.session.expire_all()
        assert db.session.get(ChecklistItem, checklist_item.id).aspect == "ASPECT 1. KOMITMEN GCG"

    def test_aspect_checklist(self, client, user_headers, aspect, checklist_item):
        res = client.get(f"/api/aspects/{aspect.id}/checklist", headers=user_headers)
        data = res.get_json()
        assert data["aspect"]["id"] == aspect.id
        assert [i["id"] for i in data["items"]] == [checklist_item.id]

    def test_delete_blocked_by_items(self, client, admin_headers, aspect, checklist_item):
        res = client.delete(f"/api/aspects/{aspect.id}", headers=admin_headers)
        assert res.status_code == 409
        assert "1 related checklist items" in res.get_json()["error"]

    def test_delete(self, client, admin_headers, aspect):
        assert client.delete(f"/api/aspects/{aspect.id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/aspects/{aspect.id}", headers=admin_headers).status_code == 404


# ═══════════════════════════════════════════════════════════════
# Checklist
# ═══════════════════════════════════════════════════════════════

class TestChecklistAPI:
    def test_create(self, client, admin_headers, aspect):
        res = client.post("/api/checklist", headers=admin_headers, json={
            "aspect": aspect.name, "description": "Board charter reviewed", "year": 2024,
        })
        assert res.status_code == 201
        assert res.get_json()["aspect"] == aspect.name

    def test_create_unknown_aspect(self, client, admin_headers, year):
        res = client.post("/api/checklist", headers=admin_headers, json={
            "aspect": "ASPECT 9", "description": "x", "year": 2024,
        })
        assert res.status_code == 400
        assert res.get_json()["error"] == "Aspect does not exist for the specified year"

    def test_create_missing_fields(self, client, admin_headers, year):
        res = client.post("/api/checklist", headers=admin_headers, json={"year": 2024})
        assert res.status_code == 400
        assert set(res.get_json()["details"]) == {"aspect", "description"}

    def test_list_filters(self, client, user_headers, checklist_item):
        assert client.get("/api/checklist?year=2024", headers=user_headers).get_json()["total"] == 1
        assert client.get("/api/checklist?year=2025", headers=user_headers).get_json()["total"] == 0
        assert client.get("/api/checklist?search=pedoman", headers=user_headers).get_json()["total"] == 1
        assert client.get("/api/checklist?search=100%25", headers=user_headers).get_json()["total"] == 0

    def test_detail_scoped_for_users(self, client, user_headers, admin_user, checklist_item, org_unit):
        res = client.get(f"/api/checklist/{checklist_item.id}", headers=user_headers)
        assert res.status_code == 403
        assert res.get_json()["error"] == "Access denied to this checklist item"

        db.session.add(Assignment(checklist_item_id=checklist_item.id, org_unit_id=org_unit.id,
                                  assigned_by=admin_user.id))
        db.session.commit()
        res = client.get(f"/api/checklist/{checklist_item.id}", headers=user_headers)
        assert res.status_code == 200
        assert len(res.get_json()["assignments"]) == 1

    def test_status_flags(self, client, admin_headers, admin_user, checklist_item, org_unit):
        res = client.get(f"/api/checklist/{checklist_item.id}/status", headers=admin_headers)
        assert res.get_json() == {
            "uploaded": False, "assigned": False, "completed": False,
            "files_count": 0, "assignments_count": 0,
        }
        db.session.add(Assignment(checklist_item_id=checklist_item.id, org_unit_id=org_unit.id,
                                  assigned_by=admin_user.id, status="COMPLETED"))
        db.session.commit()
        data = client.get(f"/api/checklist/{checklist_item.id}/status", headers=admin_headers).get_json()
        assert data["assigned"] is True
        assert data["completed"] is True

    def test_delete_blocked_by_assignment(self, client, admin_headers, admin_user, checklist_item, org_unit):
        db.session.add(Assignment(checklist_item_id=checklist_item.id, org_unit_id=org_unit.id,
                                  assigned_by=admin_user.id))
        db.session.commit()
        res = client.delete(f"/api/checklist/{checklist_item.id}", headers=admin_headers)
        assert res.status_code == 409
        assert res.get_json()["details"]["dependents"] == {"assignments": 1}

    def test_delete(self, client, admin_headers, checklist_item):
        assert client.delete(f"/api/checklist/{checklist_item.id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/checklist/{checklist_item.id}", headers=admin_headers).status_code == 404

    def test_update_requires_admin(self, client, user_headers, checklist_item):
        res = client.put(f"/api/checklist/{checklist_item.id}", headers=user_headers, json={"description": "x"})
        assert res.status_code == 403
