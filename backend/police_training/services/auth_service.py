# Overview: Service-layer operations for accounts; password hashing, registration and credential checks.

"""
Account lifecycle.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12)
- Plaintext rules: at least 8 chars, at most 72 UTF-8 bytes, digit, upper, lower and special character
- Activation and password-reset tokens are single-family: consuming one
  revokes every token of that scope for the user
"""

from __future__ import annotations

import bcrypt

from ..errors import InvalidCredentialsError, NotFoundError, ValidationFailedError
from ..extensions import db
from ..models import User
from ..validation import validate_user
from ..validator import Validator, validate_email, validate_password_plaintext
from . import token_service
from .concurrency import commit_or_translate


BCRYPT_ROUNDS = 12


def hash_password(password: str) -> bytes:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt)


def verify_password(password_hash: bytes, password: str) -> bool:
    """
    True when password matches the stored hash.

    A mismatch is just False. A malformed stored hash raises ValueError
    from bcrypt and is left to propagate as an internal error.
    """
    return bcrypt.checkpw(password.encode("utf-8"), bytes(password_hash))


def create_user(
    *,
    first_name: str,
    last_name: str,
    email: str,
    gender: str,
    password: str,
    is_activated: bool = False,
    is_facilitator: bool = False,
    is_officer: bool = False,
) -> User:
    """
    Validate and insert a user.

    Raises ValidationFailedError with every field problem, or
    DuplicateValueError on email when the address is already registered.
    """
    user = User(
        first_name=(first_name or "").strip(),
        last_name=(last_name or "").strip(),
        email=(email or "").strip(),
        gender=(gender or "").strip(),
        is_activated=is_activated,
        is_facilitator=is_facilitator,
        is_officer=is_officer,
    )

    v = Validator()
    validate_user(v, user, password=password or "")
    if not v.is_empty():
        raise ValidationFailedError(v.errors)

    user.password_hash = hash_password(password)
    db.session.add(user)
    commit_or_translate(unique_fields=("email",))
    return user


def register_user(data: dict) -> tuple[User, token_service.IssuedToken]:
    """Create an unactivated account and its activation token."""
    user = create_user(
        first_name=data.get("first_name"),
        last_name=data.get("last_name"),
        email=data.get("email"),
        gender=data.get("gender"),
        password=data.get("password"),
    )
    token = token_service.issue_token(user.id, token_service.ACTIVATION_TTL, token_service.SCOPE_ACTIVATION)
    return user, token


def activate_user(plaintext: str) -> User:
    v = Validator()
    token_service.validate_token_plaintext(v, plaintext)
    if not v.is_empty():
        raise ValidationFailedError(v.errors)

    try:
        user = token_service.lookup_user_by_token(token_service.SCOPE_ACTIVATION, plaintext)
    except NotFoundError:
        raise ValidationFailedError({"token": "invalid or expired activation token"})

    user.is_activated = True
    commit_or_translate()
    token_service.revoke_all_for_user(token_service.SCOPE_ACTIVATION, user.id)
    return user


def authenticate(email: str, password: str) -> token_service.IssuedToken:
    """
    Exchange credentials for a 24h authentication token.

    Unknown email and wrong password both raise InvalidCredentialsError.
    An inactive account is reported on the email field.
    """
    v = Validator()
    validate_email(v, email)
    validate_password_plaintext(v, password)
    if not v.is_empty():
        raise ValidationFailedError(v.errors)

    user = db.session.query(User).filter_by(email=email).first()
    if user is None:
        raise InvalidCredentialsError()
    if not verify_password(user.password_hash, password):
        raise InvalidCredentialsError()
    if not user.is_activated:
        raise ValidationFailedError({"email": "user account must be activated"})

    return token_service.issue_token(user.id, token_service.AUTHENTICATION_TTL, token_service.SCOPE_AUTHENTICATION)


def request_password_reset(email: str) -> tuple[User, token_service.IssuedToken] | None:
    """
    Issue a 45-minute reset token for an activated account.

    Returns None when there is nothing to send; callers respond the same
    way either way so account existence is not revealed.
    """
    v = Validator()
    validate_email(v, email)
    if not v.is_empty():
        raise ValidationFailedError(v.errors)

    user = db.session.query(User).filter_by(email=email).first()
    if user is None or not user.is_activated:
        return None

    token_service.revoke_all_for_user(token_service.SCOPE_PASSWORD_RESET, user.id)
    token = token_service.issue_token(user.id, token_service.PASSWORD_RESET_TTL, token_service.SCOPE_PASSWORD_RESET)
    return user, token


def reset_password(plaintext: str, password: str) -> User:
    v = Validator()
    validate_password_plaintext(v, password)
    token_service.validate_token_plaintext(v, plaintext)
    if not v.is_empty():
        raise ValidationFailedError(v.errors)

    try:
        user = token_service.lookup_user_by_token(token_service.SCOPE_PASSWORD_RESET, plaintext)
    except NotFoundError:
        raise ValidationFailedError({"token": "invalid or expired password reset token"})

    user.password_hash = hash_password(password)
    commit_or_translate()
    token_service.revoke_all_for_user(token_service.SCOPE_PASSWORD_RESET, user.id)
    token_service.revoke_all_for_user(token_service.SCOPE_AUTHENTICATION, user.id)
    return user
