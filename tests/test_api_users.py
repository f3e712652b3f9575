"""
Users API: admin listing, self-or-admin access, role changes, profile edit,
and the delete guards.
"""

from gcg_hub.models import db
from gcg_hub.models.compliance import Assignment


class TestUsersAPI:
    def test_list_admin_only(self, client, admin_headers, user_headers, regular_user):
        res = client.get("/api/users", headers=admin_headers)
        assert res.status_code == 200
        data = res.get_json()
        assert data["total"] == 2
        assert [u["role"] for u in data["items"]] == ["ADMIN", "USER"]
        assert "file_count" in data["items"][0]

        assert client.get("/api/users", headers=user_headers).status_code == 403

    def test_list_filters(self, client, admin_headers, regular_user):
        assert client.get("/api/users?role=USER", headers=admin_headers).get_json()["total"] == 1
        assert client.get("/api/users?search=user1", headers=admin_headers).get_json()["total"] == 1
        res = client.get("/api/users", headers=admin_headers,
                         query_string={"directorate": "Direktorat Keuangan"})
        assert res.get_json()["total"] == 1

    def test_get_self(self, client, user_headers, regular_user):
        res = client.get(f"/api/users/{regular_user.id}", headers=user_headers)
        assert res.status_code == 200
        assert "password_hash" not in res.get_json()

    def test_get_other_denied(self, client, user_headers, admin_user):
        assert client.get(f"/api/users/{admin_user.id}", headers=user_headers).status_code == 403

    def test_admin_gets_anyone(self, client, admin_headers, regular_user):
        assert client.get(f"/api/users/{regular_user.id}", headers=admin_headers).status_code == 200

    def test_get_missing(self, client, admin_headers):
        assert client.get("/api/users/999", headers=admin_headers).status_code == 404

    def test_update_self(self, client, user_headers, regular_user):
        res = client.put(f"/api/users/{regular_user.id}", headers=user_headers, json={
            "name": "User Satu", "division": "Divisi Pajak",
        })
        assert res.status_code == 200
        data = res.get_json()
        assert data["name"] == "User Satu"
        assert data["division"] == "Divisi Pajak"

    def test_user_cannot_change_role(self, client, user_headers, regular_user):
        res = client.put(f"/api/users/{regular_user.id}", headers=user_headers, json={"role": "ADMIN"})
        assert res.status_code == 403
        assert res.get_json()["error"] == "Only admin can change user roles"

    def test_admin_changes_role(self, client, admin_headers, regular_user):
        res = client.put(f"/api/users/{regular_user.id}", headers=admin_headers, json={"role": "admin"})
        assert res.status_code == 200
        assert res.get_json()["role"] == "ADMIN"

    def test_invalid_role(self, client, admin_headers, regular_user):
        res = client.put(f"/api/users/{regular_user.id}", headers=admin_headers, json={"role": "ROOT"})
        assert res.status_code == 400

    def test_email_taken(self, client, user_headers, regular_user, admin_user):
        res = client.put(f"/api/users/{regular_user.id}", headers=user_headers,
                         json={"email": "admin@example.com"})
        assert res.status_code == 409


class TestProfile:
    def test_get_profile(self, client, user_headers):
        res = client.get("/api/users/profile/me", headers=user_headers)
        assert res.status_code == 200
        assert res.get_json()["username"] == "user1"

    def test_update_profile_ignores_role(self, client, user_headers):
        res = client.put("/api/users/profile/me", headers=user_headers, json={
            "name": "Nama Baru", "role": "ADMIN",
        })
        assert res.status_code == 200
        data = res.get_json()
        assert data["name"] == "Nama Baru"
        assert data["role"] == "USER"


class TestDeleteUser:
    def test_delete(self, client, admin_headers, regular_user):
        assert client.delete(f"/api/users/{regular_user.id}", headers=admin_headers).status_code == 200
        assert client.get(f"/api/users/{regular_user.id}", headers=admin_headers).status_code == 404

    def test_cannot_delete_self(self, client, admin_headers, admin_user):
        res = client.delete(f"/api/users/{admin_user.id}", headers=admin_headers)
        assert res.status_code == 400
        assert res.get_json()["error"] == "Cannot delete your own account"

    def test_requires_admin(self, client, user_headers, admin_user):
        assert client.delete(f"/api/users/{admin_user.id}", headers=user_headers).status_code == 403

    def test_blocked_by_owned_data(self, client, admin_headers, admin_user, checklist_item, org_unit):
        from conftest import make_user
        other_admin = make_user("admin2", "Admin234!", "ADMIN")
        db.session.add(Assignment(checklist_item_id=checklist_item.id, org_unit_id=org_unit.id,
                                  assigned_by=other_admin.id))
        db.session.commit()
        res = client.delete(f"/api/users/{other_admin.id}", headers=admin_headers)
        assert res.status_code == 409
        assert res.get_json()["details"]["dependents"] == {"assignments": 1}
