# Overview: Service-layer operations for bearer tokens; issuance, lookup and revocation.

"""
Scoped bearer tokens.

- 16 bytes from `secrets`, URL-safe base64 without padding: always 22 chars
- Only the SHA-256 digest is stored; the plaintext is returned once
- A token is redeemable only for its scope and only before its expiry
- Consuming a token revokes every token of that scope for the user
"""

from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from ..errors import NotFoundError
from ..extensions import db
from ..models import Token, User
from ..time_utils import utcnow, to_utc_z
from ..validator import Validator


SCOPE_ACTIVATION = "activation"
SCOPE_AUTHENTICATION = "authentication"
SCOPE_PASSWORD_RESET = "password_reset"

SCOPES = (SCOPE_ACTIVATION, SCOPE_AUTHENTICATION, SCOPE_PASSWORD_RESET)

ACTIVATION_TTL = timedelta(hours=72)
AUTHENTICATION_TTL = timedelta(hours=24)
PASSWORD_RESET_TTL = timedelta(minutes=45)

TOKEN_BYTES = 16
TOKEN_LENGTH = 22


@dataclass
class IssuedToken:
    plaintext: str
    hash: bytes
    user_id: int
    expiry: datetime
    scope: str

    def to_dict(self) -> dict:
        return {"token": self.plaintext, "expiry": to_utc_z(self.expiry)}


def generate_plaintext() -> str:
    raw = secrets.token_bytes(TOKEN_BYTES)
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def hash_token(plaintext: str) -> bytes:
    return hashlib.sha256(plaintext.encode("utf-8")).digest()


def validate_token_plaintext(v: Validator, plaintext: str | None) -> None:
    v.check(bool(plaintext), "token", "must be provided")
    v.check(len(plaintext or "") == TOKEN_LENGTH, "token", "must be 22 bytes long")


def issue_token(user_id: int, ttl: timedelta, scope: str) -> IssuedToken:
    """Create and persist a token; the returned plaintext is never stored."""
    if scope not in SCOPES:
        raise ValueError(f"unknown token scope: {scope}")

    plaintext = generate_plaintext()
    issued = IssuedToken(
        plaintext=plaintext,
        hash=hash_token(plaintext),
        user_id=user_id,
        expiry=utcnow() + ttl,
        scope=scope,
    )
    db.session.add(Token(hash=issued.hash, user_id=user_id, expiry=issued.expiry, scope=scope))
    db.session.commit()
    return issued


def lookup_user_by_token(scope: str, plaintext: str) -> User:
    """Return the owner of an unexpired token of this scope, or raise NotFoundError."""
    user = (
        db.session.query(User)
        .join(Token, Token.user_id == User.id)
        .filter(
            Token.hash == hash_token(plaintext),
            Token.scope == scope,
            Token.expiry > utcnow(),
        )
        .first()
    )
    if user is None:
        raise NotFoundError()
    return user


def revoke_all_for_user(scope: str, user_id: int, *, commit: bool = True) -> int:
    deleted = (
        db.session.query(Token)
        .filter(Token.scope == scope, Token.user_id == user_id)
        .delete(synchronize_session=False)
    )
    if commit:
        db.session.commit()
    return deleted


def cleanup_expired(now: datetime | None = None) -> int:
    """Delete every token past its expiry. Returns the number removed."""
    deleted = (
        db.session.query(Token)
        .filter(Token.expiry <= (now or utcnow()))
        .delete(synchronize_session=False)
    )
    db.session.commit()
    return deleted
