"""
Token lifecycle tests.

Verifies:
- Plaintext is 22 URL-safe characters and only its digest is stored
- Lookup respects scope and expiry
- Revocation and cleanup
"""

from datetime import timedelta

import pytest

from police_training.errors import NotFoundError
from police_training.models import Token
from police_training.services import token_service
from police_training.services.token_service import (
    SCOPE_ACTIVATION, SCOPE_AUTHENTICATION, SCOPE_PASSWORD_RESET,
)
from police_training.time_utils import utcnow
from police_training.validator import Validator

from conftest import make_user


@pytest.fixture
def user(db_session, password_hash):
    return make_user(password_hash, "tokens@example.com")


class TestTokenFormat:

    def test_plaintext_is_22_urlsafe_chars(self):
        for _ in range(20):
            plaintext = token_service.generate_plaintext()
            assert len(plaintext) == 22
            assert "=" not in plaintext
            assert "+" not in plaintext and "/" not in plaintext

    def test_digest_is_sha256(self):
        assert len(token_service.hash_token("a" * 22)) == 32

    @pytest.mark.parametrize(
        "plaintext,message",
        [(None, "must be provided"), ("", "must be provided"), ("short", "must be 22 bytes long")],
    )
    def test_plaintext_validation(self, plaintext, message):
        v = Validator()
        token_service.validate_token_plaintext(v, plaintext)
        assert v.errors == {"token": message}

    def test_unknown_scope_rejected(self, user):
        with pytest.raises(ValueError):
            token_service.issue_token(user.id, timedelta(hours=1), "admin")


class TestTokenLookup:

    def test_round_trip(self, db_session, user):
        issued = token_service.issue_token(user.id, timedelta(hours=1), SCOPE_AUTHENTICATION)

        stored = db_session.get(Token, issued.hash)
        assert stored is not None
        assert stored.hash != issued.plaintext.encode()

        found = token_service.lookup_user_by_token(SCOPE_AUTHENTICATION, issued.plaintext)
        assert found.id == user.id

    def test_wrong_scope_not_found(self, user):
        issued = token_service.issue_token(user.id, timedelta(hours=1), SCOPE_ACTIVATION)
        with pytest.raises(NotFoundError):
            token_service.lookup_user_by_token(SCOPE_AUTHENTICATION, issued.plaintext)

    def test_expired_not_found(self, user):
        issued = token_service.issue_token(user.id, timedelta(seconds=-1), SCOPE_AUTHENTICATION)
        with pytest.raises(NotFoundError):
            token_service.lookup_user_by_token(SCOPE_AUTHENTICATION, issued.plaintext)

    def test_unknown_plaintext_not_found(self, user):
        with pytest.raises(NotFoundError):
            token_service.lookup_user_by_token(SCOPE_AUTHENTICATION, token_service.generate_plaintext())

    def test_to_dict_shape(self, user):
        issued = token_service.issue_token(user.id, timedelta(hours=24), SCOPE_AUTHENTICATION)
        body = issued.to_dict()
        assert body["token"] == issued.plaintext
        assert body["expiry"].endswith("Z")


class TestTokenRevocation:

    def test_revoke_only_touches_one_scope(self, user):
        auth = token_service.issue_token(user.id, timedelta(hours=1), SCOPE_AUTHENTICATION)
        reset = token_service.issue_token(user.id, timedelta(hours=1), SCOPE_PASSWORD_RESET)

        assert token_service.revoke_all_for_user(SCOPE_PASSWORD_RESET, user.id) == 1

        with pytest.raises(NotFoundError):
            token_service.lookup_user_by_token(SCOPE_PASSWORD_RESET, reset.plaintext)
        assert token_service.lookup_user_by_token(SCOPE_AUTHENTICATION, auth.plaintext).id == user.id

    def test_cleanup_removes_only_expired(self, db_session, user):
        token_service.issue_token(user.id, timedelta(seconds=-5), SCOPE_AUTHENTICATION)
        token_service.issue_token(user.id, timedelta(hours=1), SCOPE_AUTHENTICATION)

        assert token_service.cleanup_expired(utcnow()) == 1
        assert db_session.query(Token).count() == 1
