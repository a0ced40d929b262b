"""
Health check, error envelope and CORS tests.
"""

import pytest


class TestHealthcheck:

    def test_available(self, client, db_session):
        resp = client.get("/v1/healthcheck")
        assert resp.status_code == 200

        body = resp.get_json()
        assert body["status"] == "available"
        assert set(body["system_info"]) == {"environment", "version"}
        assert body["checks"]["database"]["status"] == "healthy"

    def test_no_auth_needed_even_with_bad_header(self, client, db_session):
        resp = client.get("/v1/healthcheck", headers={"Authorization": "Bearer nonsense"})
        assert resp.status_code == 200


class TestErrorEnvelope:

    def test_unknown_route(self, client):
        resp = client.get("/v1/nothing-here")
        assert resp.status_code == 404
        assert resp.get_json() == {"error": "the requested resource could not be found"}

    def test_method_not_allowed(self, client):
        resp = client.delete("/v1/healthcheck")
        assert resp.status_code == 405
        assert resp.get_json() == {"error": "the DELETE method is not supported for this resource"}


class TestCors:
    TRUSTED = "https://training.example.com"

    @pytest.fixture
    def trusted(self, app, monkeypatch):
        monkeypatch.setitem(app.config, "CORS_TRUSTED_ORIGINS", [self.TRUSTED])

    def test_untrusted_origin_gets_no_allow_header(self, client, trusted, db_session):
        resp = client.get("/v1/healthcheck", headers={"Origin": "https://evil.example.com"})
        assert "Access-Control-Allow-Origin" not in resp.headers
        assert "Origin" in resp.headers.getlist("Vary")

    def test_trusted_origin_echoed(self, client, trusted, db_session):
        resp = client.get("/v1/healthcheck", headers={"Origin": self.TRUSTED})
        assert resp.headers["Access-Control-Allow-Origin"] == self.TRUSTED
        assert "Access-Control-Allow-Methods" not in resp.headers

    def test_preflight(self, client, trusted):
        resp = client.options(
            "/v1/officers/1",
            headers={"Origin": self.TRUSTED, "Access-Control-Request-Method": "PATCH"},
        )
        assert resp.status_code == 200
        assert resp.headers["Access-Control-Allow-Origin"] == self.TRUSTED
        assert "PATCH" in resp.headers["Access-Control-Allow-Methods"]
        assert "Authorization" in resp.headers["Access-Control-Allow-Headers"]
