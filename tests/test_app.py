"""
App-level behaviour: health, API info, error shapes, middleware headers
and configuration guards.
"""

import pytest

from gcg_hub.config import ProductionConfig


class TestHealth:
    def test_health_ok(self, client):
        res = client.get("/api/health")
        assert res.status_code == 200
        data = res.get_json()
        assert data["status"] == "ok"
        assert data["checks"]["database"]["status"] == "ok"

    def test_api_info(self, client):
        data = client.get("/api").get_json()
        assert data["name"] == "GCG Document Hub API"
        assert data["endpoints"]["org_units"] == "/api/org-units"


class TestErrorShapes:
    def test_unknown_route(self, client):
        res = client.get("/api/nothing-here")
        assert res.status_code == 404
        body = res.get_json()
        assert body["code"] == "ERR_NOT_FOUND"
        assert "error" in body

    def test_method_not_allowed(self, client):
        res = client.patch("/api/years")
        assert res.status_code == 405
        assert "error" in res.get_json()

    def test_not_found_resource(self, client, admin_headers):
        res = client.get("/api/assignments/12345", headers=admin_headers)
        assert res.status_code == 404
        assert res.get_json() == {"error": "Assignment id=12345 not found", "code": "ERR_NOT_FOUND"}

    def test_bad_filter_value(self, client, admin_headers):
        res = client.get("/api/checklist?year=twenty", headers=admin_headers)
        assert res.status_code == 400


class TestMiddleware:
    def test_security_headers(self, client):
        res = client.get("/api/health")
        assert res.headers["X-Content-Type-Options"] == "nosniff"
        assert res.headers["X-Frame-Options"] == "DENY"
        assert res.headers["Cache-Control"] == "no-store"
        assert "Content-Security-Policy" in res.headers

    def test_request_id_echoed(self, client):
        res = client.get("/api", headers={"X-Request-ID": "abc123"})
        assert res.headers["X-Request-ID"] == "abc123"
        assert float(res.headers["X-Request-Duration-Ms"]) >= 0

    def test_generated_request_id(self, client):
        assert len(client.get("/api").headers["X-Request-ID"]) == 12


class TestConfig:
    def test_production_requires_database_url(self, monkeypatch):
        monkeypatch.setattr(ProductionConfig, "SQLALCHEMY_DATABASE_URI", None)
        with pytest.raises(RuntimeError, match="DATABASE_URL"):
            ProductionConfig()

    def test_production_requires_secret_key(self, monkeypatch):
        monkeypatch.setattr(ProductionConfig, "SQLALCHEMY_DATABASE_URI", "postgresql://db/gcg")
        monkeypatch.delenv("SECRET_KEY", raising=False)
        with pytest.raises(RuntimeError, match="SECRET_KEY"):
            ProductionConfig()

    def test_testing_config(self, app):
        assert app.config["TESTING"] is True
        assert app.config["MAX_CONTENT_LENGTH"] == app.config["MAX_UPLOAD_SIZE"] + 1024 * 1024

    def test_rate_limit_storage_defaults_to_memory(self, app):
        assert app.config["RATELIMIT_STORAGE_URI"] == "memory://"
