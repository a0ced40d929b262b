"""
Account and authentication API tests.

Verifies:
- Registration, activation and login
- 401 / 403 handling for bearer tokens
- Password reset never reveals whether an account exists
"""

import pytest

from police_training.extensions import background

from conftest import PASSWORD, auth_headers, make_user


REGISTRATION = {
    "first_name": "Maria",
    "last_name": "Cal",
    "email": "maria.cal@example.com",
    "gender": "f",
    "password": PASSWORD,
}


@pytest.fixture
def outbox(monkeypatch):
    """Capture mail handed to background tasks instead of sending it."""
    sent = []
    monkeypatch.setattr(
        "police_training.routes.users.send_welcome",
        lambda recipient, user_id, token: sent.append(("welcome", recipient, token)),
    )
    monkeypatch.setattr(
        "police_training.routes.tokens.send_password_reset",
        lambda recipient, token: sent.append(("password_reset", recipient, token)),
    )
    return sent


def last_token(outbox, kind):
    background.wait(timeout=5)
    return [token for k, _, token in outbox if k == kind][-1]


# =============================================================================
# REGISTRATION AND ACTIVATION
# =============================================================================


class TestRegistration:

    def test_register_creates_inactive_user(self, client, db_session, outbox):
        resp = client.post("/v1/users", json=REGISTRATION)
        assert resp.status_code == 201

        user = resp.get_json()["user"]
        assert resp.headers["Location"] == f"/v1/users/{user['id']}"
        assert user["activated"] is False
        assert user["version"] == 1
        assert "password_hash" not in user

        background.wait(timeout=5)
        assert outbox[0][:2] == ("welcome", REGISTRATION["email"])

    def test_duplicate_email(self, client, db_session, outbox):
        client.post("/v1/users", json=REGISTRATION)
        resp = client.post("/v1/users", json=REGISTRATION)
        assert resp.status_code == 422
        assert resp.get_json() == {"error": {"email": "a record with this value already exists"}}

    def test_all_field_errors_reported(self, client, db_session):
        resp = client.post(
            "/v1/users",
            json={"first_name": "", "last_name": "Cal", "email": "nope", "gender": "x", "password": "short"},
        )
        assert resp.status_code == 422
        errors = resp.get_json()["error"]
        assert set(errors) == {"first_name", "email", "gender", "password"}

    def test_multibyte_password_over_72_bytes(self, client, db_session, outbox):
        # 44 characters, 84 bytes in UTF-8
        password = "Aa1!" + "é" * 40
        resp = client.post("/v1/users", json={**REGISTRATION, "password": password})
        assert resp.status_code == 422
        assert resp.get_json() == {"error": {"password": "must not be more than 72 bytes long"}}

    def test_unknown_key_is_bad_request(self, client, db_session):
        resp = client.post("/v1/users", json={**REGISTRATION, "is_admin": True})
        assert resp.status_code == 400
        assert resp.get_json() == {"error": 'body contains unknown key "is_admin"'}

    @pytest.mark.parametrize(
        "body,message",
        [
            ("", "body must not be empty"),
            ("{bad json", "body contains badly-formed JSON"),
            ("[1, 2]", "body must contain a single JSON object"),
            ("null", "body must contain a single JSON object"),
        ],
    )
    def test_malformed_bodies(self, client, db_session, body, message):
        resp = client.post("/v1/users", data=body, content_type="application/json")
        assert resp.status_code == 400
        assert resp.get_json() == {"error": message}

    def test_body_decoded_without_json_content_type(self, client, db_session):
        resp = client.post("/v1/users", data='{"is_admin": true}', content_type="text/plain")
        assert resp.status_code == 400
        assert resp.get_json() == {"error": 'body contains unknown key "is_admin"'}

    def test_activation_flow(self, client, db_session, outbox):
        client.post("/v1/users", json=REGISTRATION)
        token = last_token(outbox, "welcome")

        resp = client.put("/v1/users/activated", json={"token": token})
        assert resp.status_code == 200
        assert resp.get_json()["user"]["activated"] is True

        # activation tokens are single use
        resp = client.put("/v1/users/activated", json={"token": token})
        assert resp.status_code == 422
        assert "token" in resp.get_json()["error"]

    def test_activation_token_must_be_22_chars(self, client, db_session):
        resp = client.put("/v1/users/activated", json={"token": "abc"})
        assert resp.status_code == 422
        assert resp.get_json() == {"error": {"token": "must be 22 bytes long"}}


# =============================================================================
# LOGIN
# =============================================================================


class TestAuthenticationTokens:

    def test_login_returns_token(self, client, db_session, password_hash):
        make_user(password_hash, "login@example.com")
        resp = client.post("/v1/tokens/authentication", json={"email": "login@example.com", "password": PASSWORD})
        assert resp.status_code == 201

        token = resp.get_json()["authentication_token"]
        assert len(token["token"]) == 22
        assert token["expiry"].endswith("Z")

        me = client.get("/v1/users/me", headers=auth_headers(token["token"]))
        assert me.status_code == 200
        assert me.get_json()["user"]["email"] == "login@example.com"

    def test_wrong_password(self, client, db_session, password_hash):
        make_user(password_hash, "login@example.com")
        resp = client.post("/v1/tokens/authentication", json={"email": "login@example.com", "password": "Wrong123!!"})
        assert resp.status_code == 401
        assert resp.get_json() == {"error": "invalid authentication credentials"}

    def test_unknown_email_looks_like_wrong_password(self, client, db_session):
        resp = client.post("/v1/tokens/authentication", json={"email": "ghost@example.com", "password": PASSWORD})
        assert resp.status_code == 401

    def test_inactive_account_reported_on_email(self, client, db_session, password_hash):
        make_user(password_hash, "sleepy@example.com", activated=False)
        resp = client.post("/v1/tokens/authentication", json={"email": "sleepy@example.com", "password": PASSWORD})
        assert resp.status_code == 422
        assert resp.get_json() == {"error": {"email": "user account must be activated"}}


# =============================================================================
# BEARER TOKEN HANDLING: 401 / 403
# =============================================================================


class TestBearerTokens:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/v1/users/me"),
            ("GET", "/v1/users"),
            ("GET", "/v1/officers"),
            ("POST", "/v1/officers"),
            ("GET", "/v1/workshops"),
            ("GET", "/v1/training/sessions"),
            ("GET", "/v1/training/enrollments"),
            ("GET", "/v1/regions"),
            ("PATCH", "/v1/ranks/1"),
        ],
    )
    def test_requires_auth(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    @pytest.mark.parametrize(
        "header",
        ["Token abcdefghijklmnopqrstuv", "Bearer", "Bearer short", "Bearer abcdefghijklmnopqrstuv"],
    )
    def test_bad_header_sets_www_authenticate(self, client, db_session, header):
        resp = client.get("/v1/users/me", headers={"Authorization": header})
        assert resp.status_code == 401
        assert resp.headers["WWW-Authenticate"] == "Bearer"
        assert resp.get_json() == {"error": "invalid or missing authentication token"}

    def test_inactive_account_forbidden(self, client, setup_roles, password_hash):
        from conftest import bearer

        user = make_user(password_hash, "pending@example.com", activated=False, roles=("admin",))
        resp = client.get("/v1/users", headers=bearer(user))
        assert resp.status_code == 403

    def test_missing_permission_forbidden(self, client, officer_headers):
        resp = client.get("/v1/users", headers=officer_headers)
        assert resp.status_code == 403
        assert "permissions" in resp.get_json()["error"]

    def test_permitted_request(self, client, admin_headers):
        resp = client.get("/v1/users", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.get_json()["metadata"]["total_records"] == 1


# =============================================================================
# PASSWORD RESET
# =============================================================================


class TestPasswordReset:

    def test_unknown_email_still_accepted(self, client, db_session, outbox):
        resp = client.post("/v1/tokens/password-reset", json={"email": "ghost@example.com"})
        assert resp.status_code == 202
        background.wait(timeout=5)
        assert outbox == []

    def test_reset_flow_revokes_sessions(self, client, db_session, password_hash, outbox):
        from conftest import bearer

        user = make_user(password_hash, "forgetful@example.com")
        headers = bearer(user)

        resp = client.post("/v1/tokens/password-reset", json={"email": "forgetful@example.com"})
        assert resp.status_code == 202
        token = last_token(outbox, "password_reset")

        resp = client.put("/v1/users/password-reset", json={"token": token, "password": "NewPass456$"})
        assert resp.status_code == 200
        assert resp.get_json() == {"message": "your password was successfully reset"}

        assert client.get("/v1/users/me", headers=headers).status_code == 401

        resp = client.post(
            "/v1/tokens/authentication",
            json={"email": "forgetful@example.com", "password": "NewPass456$"},
        )
        assert resp.status_code == 201

    def test_reset_token_single_use(self, client, db_session, password_hash, outbox):
        make_user(password_hash, "forgetful@example.com")
        client.post("/v1/tokens/password-reset", json={"email": "forgetful@example.com"})
        token = last_token(outbox, "password_reset")

        client.put("/v1/users/password-reset", json={"token": token, "password": "NewPass456$"})
        resp = client.put("/v1/users/password-reset", json={"token": token, "password": "Another789%"})
        assert resp.status_code == 422
