# Overview: Payload coercion driven by column metadata, plus per-resource field rules.

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, time
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text, Time

from .errors import BadRequestError
from .time_utils import parse_iso_date, parse_iso_datetime, parse_iso_time
from .validator import Validator, validate_email, validate_password_plaintext


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    What a client may send for one resource.

    writable_fields: keys accepted in create and PATCH bodies; anything
    else in the body is rejected outright.
    extra_fields: accepted keys that are not model columns (e.g. password,
    or the concurrency token on PATCH).
    """
    writable_fields: frozenset[str]
    extra_fields: frozenset[str] = field(default_factory=frozenset)


def _columns_by_key(model) -> dict[str, Any]:
    return {c.key: c for c in model.__mapper__.columns}


def _coerce_value(col, value: Any, v: Validator):
    """Return (ok, value). Type problems are recorded on v under the column key."""
    coltype = col.type
    key = col.key

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return True, value
        v.add_error(key, "must be true or false")
        return False, None

    if isinstance(coltype, Integer):
        # bool is an int subclass but never a valid integer input
        if isinstance(value, int) and not isinstance(value, bool):
            return True, value
        v.add_error(key, "must be an integer value")
        return False, None

    if isinstance(coltype, DateTime):
        if isinstance(value, str):
            try:
                parsed = parse_iso_datetime(value)
            except ValueError:
                parsed = None
            if parsed is not None:
                return True, parsed
        v.add_error(key, "must be an ISO-8601 datetime")
        return False, None

    if isinstance(coltype, Date):
        if isinstance(value, str):
            try:
                parsed = parse_iso_date(value)
            except ValueError:
                parsed = None
            if parsed is not None:
                return True, parsed
        v.add_error(key, "must be a date in YYYY-MM-DD format")
        return False, None

    if isinstance(coltype, Time):
        if isinstance(value, str):
            try:
                parsed = parse_iso_time(value)
            except ValueError:
                parsed = None
            if parsed is not None:
                return True, parsed
        v.add_error(key, "must be a time in HH:MM format")
        return False, None

    if isinstance(coltype, (String, Text)):
        if isinstance(value, str):
            return True, value.strip()
        v.add_error(key, "must be a string")
        return False, None

    return True, value


def coerce_payload(*, model, payload: dict, policy: ModelValidationPolicy, v: Validator) -> dict:
    """
    Convert a decoded JSON object into column values for `model`.

    Unknown keys are a malformed request (400). Type mismatches are
    recorded on `v` so they are reported together with the field rules.
    Only keys present in the payload appear in the result; extra_fields
    are passed through untouched.
    """
    allowed = policy.writable_fields | policy.extra_fields
    for key in payload:
        if key not in allowed:
            raise BadRequestError(f'body contains unknown key "{key}"')

    cols = _columns_by_key(model)
    patch: dict = {}

    for key, raw in payload.items():
        if key in policy.extra_fields:
            patch[key] = raw
            continue

        col = cols[key]
        if raw is None:
            if not col.nullable:
                v.add_error(key, "must be provided")
                continue
            patch[key] = None
            continue

        ok, value = _coerce_value(col, raw, v)
        if ok:
            patch[key] = value

    return patch


# -- Field rules --------------------------------------------------------------


def _required_text(v: Validator, value: str | None, key: str, max_len: int) -> None:
    v.check(bool(value), key, "must be provided")
    v.check(len(value or "") <= max_len, key, f"must not exceed {max_len} characters")


def _required_id(v: Validator, value: int | None, key: str) -> None:
    v.check(value is not None and value > 0, key, "must be provided")


def _optional_text(v: Validator, value: str | None, key: str, max_len: int) -> None:
    if value is not None:
        v.check(len(value) <= max_len, key, f"must not exceed {max_len} characters")


GENDERS = ("m", "f")


def validate_user(v: Validator, user, password: str | None = None) -> None:
    v.check(bool(user.first_name), "first_name", "must be provided")
    v.check(len(user.first_name or "") <= 50, "first_name", "must not be more than 50 characters long")
    v.check(bool(user.last_name), "last_name", "must be provided")
    v.check(len(user.last_name or "") <= 50, "last_name", "must not be more than 50 characters long")
    validate_email(v, user.email)
    if password is not None:
        validate_password_plaintext(v, password)
    elif not user.password_hash:
        raise RuntimeError("missing password hash for user")
    v.check(bool(user.gender), "gender", "must be provided")
    v.check(v.permitted(user.gender, GENDERS), "gender", "must be 'm', or 'f'")


def validate_region(v: Validator, region) -> None:
    _required_text(v, region.region, "region", 150)


def validate_formation(v: Validator, formation) -> None:
    _required_text(v, formation.formation, "formation", 150)
    _required_id(v, formation.region_id, "region_id")


def validate_posting(v: Validator, posting) -> None:
    _required_text(v, posting.posting, "posting", 150)
    _optional_text(v, posting.code, "code", 20)


def validate_rank(v: Validator, rank) -> None:
    _required_text(v, rank.rank, "rank", 150)
    _required_text(v, rank.code, "code", 20)
    v.check(
        rank.annual_training_hours_required is not None and rank.annual_training_hours_required >= 0,
        "annual_training_hours_required",
        "must be zero or greater",
    )


def validate_training_type(v: Validator, training_type) -> None:
    _required_text(v, training_type.type, "type", 150)


def validate_training_category(v: Validator, category) -> None:
    _required_text(v, category.name, "name", 150)


def validate_status(v: Validator, status) -> None:
    _required_text(v, status.status, "status", 150)


def validate_officer(v: Validator, officer) -> None:
    _required_text(v, officer.regulation_number, "regulation_number", 50)
    _required_id(v, officer.posting_id, "posting_id")
    _required_id(v, officer.rank_id, "rank_id")
    _required_id(v, officer.formation_id, "formation_id")
    _required_id(v, officer.region_id, "region_id")
    v.check(officer.user_id is not None and officer.user_id > 0, "user_id", "must reference an existing user")


def validate_workshop(v: Validator, workshop) -> None:
    _required_text(v, workshop.workshop_name, "workshop_name", 200)
    _required_id(v, workshop.category_id, "category_id")
    _required_id(v, workshop.training_type_id, "training_type_id")
    v.check(
        workshop.credit_hours is not None and workshop.credit_hours >= 0,
        "credit_hours",
        "must be zero or greater",
    )


def validate_training_session(v: Validator, session) -> None:
    _required_id(v, session.formation_id, "formation_id")
    _required_id(v, session.region_id, "region_id")
    _required_id(v, session.facilitator_id, "facilitator_id")
    _required_id(v, session.workshop_id, "workshop_id")
    v.check(isinstance(session.session_date, date), "session_date", "must be provided")
    v.check(isinstance(session.start_time, time), "start_time", "must be provided")
    v.check(isinstance(session.end_time, time), "end_time", "must be provided")
    _required_id(v, session.training_status_id, "training_status_id")
    _optional_text(v, session.location, "location", 1000)
    _optional_text(v, session.notes, "notes", 2000)
    if session.max_capacity is not None:
        v.check(session.max_capacity > 0, "max_capacity", "must be a positive integer")
    if isinstance(session.start_time, time) and isinstance(session.end_time, time):
        v.check(session.end_time > session.start_time, "end_time", "must be after start_time")


def validate_training_enrollment(v: Validator, enrollment) -> None:
    _required_id(v, enrollment.officer_id, "officer_id")
    _required_id(v, enrollment.session_id, "session_id")
    _required_id(v, enrollment.enrollment_status_id, "enrollment_status_id")
    _required_id(v, enrollment.progress_status_id, "progress_status_id")
    if enrollment.attendance_status_id is not None:
        v.check(enrollment.attendance_status_id > 0, "attendance_status_id", "must be a positive integer")
    _optional_text(v, enrollment.certificate_number, "certificate_number", 100)
    if enrollment.certificate_issued:
        v.check(
            enrollment.completion_date is not None,
            "completion_date",
            "must be provided when certificate is issued",
        )
