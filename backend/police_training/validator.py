# Overview: Field-error accumulator shared by every input check in the service.

from __future__ import annotations

import re
from collections.abc import Iterable


EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)

PASSWORD_NUMBER_RX = re.compile(r"[0-9]")
PASSWORD_UPPER_RX = re.compile(r"[A-Z]")
PASSWORD_LOWER_RX = re.compile(r"[a-z]")
PASSWORD_SPECIAL_RX = re.compile(r"[!@#~$%^&*()+|_]")
PASSWORD_MIN_LENGTH = 8
# bcrypt rejects passwords longer than 72 UTF-8 bytes
PASSWORD_MAX_BYTES = 72


class Validator:
    """
    Collects field -> message pairs for one request.

    The first message recorded for a field wins; later ones are dropped so
    the client sees the most basic problem first. Not shared between
    requests.
    """

    def __init__(self):
        self.errors: dict[str, str] = {}

    def is_empty(self) -> bool:
        return not self.errors

    def add_error(self, field: str, message: str) -> None:
        if field not in self.errors:
            self.errors[field] = message

    def check(self, ok: bool, field: str, message: str) -> None:
        if not ok:
            self.add_error(field, message)

    @staticmethod
    def matches(value: str, pattern: re.Pattern) -> bool:
        return pattern.search(value or "") is not None

    @staticmethod
    def permitted(value, allowed: Iterable) -> bool:
        return value in allowed


def validate_email(v: Validator, email: str) -> None:
    v.check(bool(email), "email", "must be provided")
    v.check(len(email or "") <= 254, "email", "must not be more than 254 bytes long")
    v.check(EMAIL_RX.match(email or "") is not None, "email", "must be a valid email address")


def validate_password_plaintext(v: Validator, password: str) -> None:
    password = password or ""
    v.check(password != "", "password", "must be provided")
    v.check(len(password) >= PASSWORD_MIN_LENGTH, "password", "must be at least 8 characters long")
    v.check(len(password.encode("utf-8")) <= PASSWORD_MAX_BYTES, "password", "must not be more than 72 bytes long")
    v.check(v.matches(password, PASSWORD_NUMBER_RX), "password", "must contain at least one number")
    v.check(v.matches(password, PASSWORD_UPPER_RX), "password", "must contain at least one uppercase letter")
    v.check(v.matches(password, PASSWORD_LOWER_RX), "password", "must contain at least one lowercase letter")
    v.check(v.matches(password, PASSWORD_SPECIAL_RX), "password", "must contain at least one special character")
