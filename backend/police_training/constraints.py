# Overview: Classifies storage constraint failures into domain error kinds.

"""
Constraint-violation translator.

Structured driver codes are consulted first:
- PostgreSQL (psycopg2): SQLSTATE 23505 unique_violation, 23503 foreign_key_violation
- SQLite (Python 3.11+): extended codes SQLITE_CONSTRAINT_UNIQUE / _PRIMARYKEY / _FOREIGNKEY

Message matching is a last-resort fallback only, for drivers that expose
no code; message text is not a stable contract.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from collections.abc import Iterable, Mapping

from sqlalchemy.exc import IntegrityError

from .errors import DuplicateValueError, ForeignKeyViolationError


class ConstraintKind(enum.Enum):
    DUPLICATE_VALUE = "duplicate_value"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    OTHER = "other"


PG_UNIQUE_VIOLATION = "23505"
PG_FOREIGN_KEY_VIOLATION = "23503"

SQLITE_CONSTRAINT_FOREIGNKEY = 787
SQLITE_CONSTRAINT_PRIMARYKEY = 1555
SQLITE_CONSTRAINT_UNIQUE = 2067

_SQLITE_UNIQUE_COLUMNS_RX = re.compile(r"UNIQUE constraint failed: (.+)$")


@dataclass(frozen=True)
class ConstraintViolation:
    kind: ConstraintKind
    constraint: str | None = None
    detail: str = ""

    def mentions(self, column: str) -> bool:
        """
        True if the constraint name or detail names this column.

        Constraint names embed columns between underscores
        (uq_officers_user_id, officers_rank_id_fkey); the detail names them
        as words ("Key (rank_id)=(9)", "officer_id session_id").
        """
        name = self.constraint or ""
        if name == column or name.endswith(f"_{column}") or f"_{column}_" in name:
            return True
        return re.search(rf"\b{re.escape(column)}\b", self.detail) is not None


def _driver_error(exc: Exception):
    return getattr(exc, "orig", exc)


def classify(exc: Exception) -> ConstraintViolation:
    orig = _driver_error(exc)

    pgcode = getattr(orig, "pgcode", None)
    if pgcode is not None:
        diag = getattr(orig, "diag", None)
        constraint = getattr(diag, "constraint_name", None)
        detail = getattr(diag, "message_detail", None) or ""
        if pgcode == PG_UNIQUE_VIOLATION:
            return ConstraintViolation(ConstraintKind.DUPLICATE_VALUE, constraint, detail)
        if pgcode == PG_FOREIGN_KEY_VIOLATION:
            return ConstraintViolation(ConstraintKind.FOREIGN_KEY_VIOLATION, constraint, detail)
        return ConstraintViolation(ConstraintKind.OTHER, constraint, detail)

    message = str(orig)
    sqlite_code = getattr(orig, "sqlite_errorcode", None)
    if sqlite_code is not None:
        if sqlite_code in (SQLITE_CONSTRAINT_UNIQUE, SQLITE_CONSTRAINT_PRIMARYKEY):
            return ConstraintViolation(ConstraintKind.DUPLICATE_VALUE, None, _sqlite_unique_detail(message))
        if sqlite_code == SQLITE_CONSTRAINT_FOREIGNKEY:
            return ConstraintViolation(ConstraintKind.FOREIGN_KEY_VIOLATION, None, "")
        return ConstraintViolation(ConstraintKind.OTHER, None, message)

    # Fallback: message text
    lower = message.lower()
    if "duplicate key value" in lower or "unique constraint failed" in lower:
        return ConstraintViolation(ConstraintKind.DUPLICATE_VALUE, None, _sqlite_unique_detail(message))
    if "violates foreign key constraint" in lower or "foreign key constraint failed" in lower:
        return ConstraintViolation(ConstraintKind.FOREIGN_KEY_VIOLATION, None, message)
    return ConstraintViolation(ConstraintKind.OTHER, None, message)


def _sqlite_unique_detail(message: str) -> str:
    # "UNIQUE constraint failed: officers.regulation_number" -> "regulation_number"
    match = _SQLITE_UNIQUE_COLUMNS_RX.search(message)
    if not match:
        return message
    return " ".join(part.split(".")[-1] for part in match.group(1).split(", "))


def translate(
    exc: IntegrityError,
    *,
    unique_fields: Iterable[str] = (),
    references: Mapping[str, tuple] | None = None,
    values: Mapping | None = None,
) -> Exception:
    """
    Turn an IntegrityError raised for one resource into a field-scoped error.

    unique_fields: natural-key columns, in the order to blame them.
    references: field -> (referenced model, value) for foreign keys.
    Returns the exception to raise; unclassified failures are returned
    unchanged so they surface as internal errors.
    """
    violation = classify(exc)
    unique_fields = list(unique_fields)
    references = references or {}

    if violation.kind is ConstraintKind.DUPLICATE_VALUE and unique_fields:
        field = next((f for f in unique_fields if violation.mentions(f)), unique_fields[0])
        return DuplicateValueError(field)

    if violation.kind is ConstraintKind.FOREIGN_KEY_VIOLATION and references:
        field = next((f for f in references if violation.mentions(f)), None)
        if field is None:
            field = _find_dangling_reference(references)
        return ForeignKeyViolationError(field or next(iter(references)))

    return exc


def _find_dangling_reference(references: Mapping[str, tuple]) -> str | None:
    # SQLite does not name the failing key, so probe each reference.
    from .extensions import db

    for field, (model, value) in references.items():
        if value is not None and db.session.get(model, value) is None:
            return field
    return None
