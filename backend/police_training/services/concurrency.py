# Overview: Optimistic-concurrency PATCH protocol shared by every mutable resource.

"""
Partial update with an optimistic concurrency token.

    Fetched -> (merge) -> token check -> Validated -> Committed
       |                     |               |
    NotFound             Conflicted      ValidationFailedError
                                             (retriable)

The in-memory token comparison is only a fast path. Every versioned model
maps its token as SQLAlchemy's version_id_col, so the flush issues
UPDATE ... WHERE id = ? AND <token> = ? and a zero-row result raises
StaleDataError, which is reported exactly like a token mismatch. This is
what closes the window between fetch and commit; no locks are held. The
UPDATE is issued even when the merged values equal the stored ones, so
every successful PATCH advances the token.
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.attributes import flag_modified
from sqlalchemy.orm.exc import StaleDataError

from ..constraints import translate
from ..errors import EditConflictError, NotFoundError, ValidationFailedError
from ..extensions import db
from ..time_utils import parse_iso_datetime
from ..validator import Validator


class UpdateState(enum.Enum):
    NEW = "new"
    FETCHED = "fetched"
    NOT_FOUND = "not_found"
    CONFLICTED = "conflicted"
    VALIDATED = "validated"
    INVALID = "invalid"
    COMMITTED = "committed"


def tokens_match(current, supplied) -> bool:
    """
    Compare a stored token with the one the caller sent.

    Integer tokens must arrive as JSON integers; timestamp tokens as the
    exact ISO-8601 string previously returned. Anything unparseable is a
    mismatch.
    """
    if supplied is None:
        return False
    if isinstance(current, datetime):
        if not isinstance(supplied, str):
            return False
        try:
            return parse_iso_datetime(supplied) == current
        except ValueError:
            return False
    if isinstance(supplied, bool) or not isinstance(supplied, int):
        return False
    return supplied == current


def commit_or_translate(*, unique_fields=(), references=None) -> None:
    """
    Commit the session, mapping storage failures onto the error taxonomy.

    StaleDataError -> EditConflictError; constraint violations go through
    the constraint translator; anything unclassified is re-raised.
    """
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise EditConflictError()
    except IntegrityError as exc:
        db.session.rollback()
        translated = translate(exc, unique_fields=unique_fields, references=references)
        if translated is exc:
            raise
        raise translated from exc


class PartialUpdate:
    """
    One PATCH against one row.

    `changes` holds already-coerced column values for the keys present in
    the request; `supplied_token` is whatever the caller sent for the
    concurrency token (None when absent). `validate(v, entity)` applies the
    resource's field rules to the merged entity.
    """

    def __init__(
        self,
        model,
        entity_id: int,
        changes: dict,
        supplied_token,
        *,
        token_attr: str,
        validate,
        unique_fields=(),
        reference_models=None,
        validator: Validator | None = None,
    ):
        self.model = model
        self.entity_id = entity_id
        self.changes = dict(changes)
        self.supplied_token = supplied_token
        self.token_attr = token_attr
        self.validate_fn = validate
        self.unique_fields = tuple(unique_fields)
        self.reference_models = dict(reference_models or {})
        self.validator = validator or Validator()
        self.entity = None
        self.state = UpdateState.NEW

    def _fail(self, state: UpdateState, exc: Exception):
        self.state = state
        db.session.rollback()
        raise exc

    def fetch(self):
        self.entity = db.session.get(self.model, self.entity_id)
        if self.entity is None:
            self._fail(UpdateState.NOT_FOUND, NotFoundError())
        self.state = UpdateState.FETCHED
        return self.entity

    def merge(self) -> None:
        for key, value in self.changes.items():
            setattr(self.entity, key, value)

    def check_token(self) -> None:
        current = getattr(self.entity, self.token_attr)
        if not tokens_match(current, self.supplied_token):
            self._fail(UpdateState.CONFLICTED, EditConflictError())

    def validate(self) -> None:
        self.validate_fn(self.validator, self.entity)
        if not self.validator.is_empty():
            self._fail(UpdateState.INVALID, ValidationFailedError(self.validator.errors))
        self.state = UpdateState.VALIDATED

    def _touch(self) -> None:
        # flush an UPDATE even when no merged value differs
        mapper = inspect(self.entity).mapper
        for attr in mapper.column_attrs:
            column = attr.columns[0]
            if column is mapper.version_id_col or column.primary_key:
                continue
            flag_modified(self.entity, attr.key)
            return

    def commit(self):
        references = {
            key: (model, getattr(self.entity, key))
            for key, model in self.reference_models.items()
        }
        self._touch()
        try:
            commit_or_translate(unique_fields=self.unique_fields, references=references)
        except EditConflictError:
            self.state = UpdateState.CONFLICTED
            raise
        self.state = UpdateState.COMMITTED
        return self.entity

    def run(self):
        with db.session.no_autoflush:
            self.fetch()
            self.merge()
            self.check_token()
            self.validate()
        return self.commit()
