# Overview: Generic create/show/list/update/delete operations driven by Resource records.

from __future__ import annotations

from collections.abc import Mapping

from sqlalchemy.exc import IntegrityError

from ..constraints import ConstraintKind, classify
from ..errors import NotFoundError, ValidationFailedError
from ..extensions import db
from ..filters import (
    get_optional_bool,
    get_optional_date,
    get_optional_int,
    get_str,
    paginate,
    read_filters,
)
from ..resources import CONTAINS, Resource
from ..validation import coerce_payload
from ..validator import Validator
from .concurrency import PartialUpdate, commit_or_translate


def _references_for(resource: Resource, values) -> dict:
    return {
        key: (model, values.get(key) if isinstance(values, Mapping) else getattr(values, key))
        for key, model in resource.references.items()
    }


def create_record(resource: Resource, payload: dict):
    """Validate a create payload and insert the row. Returns the persisted entity."""
    v = Validator()
    values = coerce_payload(model=resource.model, payload=payload, policy=resource.create_policy, v=v)

    entity = resource.model(**{**resource.create_defaults, **values})
    resource.validate(v, entity)
    if not v.is_empty():
        raise ValidationFailedError(v.errors)

    db.session.add(entity)
    commit_or_translate(
        unique_fields=resource.unique_fields,
        references=_references_for(resource, entity),
    )
    return entity


def get_record(resource: Resource, record_id: int):
    entity = db.session.get(resource.model, record_id)
    if entity is None:
        raise NotFoundError()
    return entity


def _parse_list_filters(resource: Resource, args: Mapping, v: Validator) -> list:
    conditions = []
    for lf in resource.list_filters:
        column = getattr(resource.model, lf.column)
        if lf.value_type == "int":
            value = get_optional_int(args, lf.param, v)
        elif lf.value_type == "bool":
            value = get_optional_bool(args, lf.param, v)
        elif lf.value_type == "date":
            value = get_optional_date(args, lf.param, v)
        else:
            value = get_str(args, lf.param) or None

        if value is None:
            continue
        if lf.kind == CONTAINS:
            conditions.append(column.icontains(value, autoescape=True))
        else:
            conditions.append(column == value)
    return conditions


def list_records(resource: Resource, args: Mapping):
    """
    Filtered, sorted page of rows.

    Invalid page/page_size/sort and malformed filter values are reported
    together in one ValidationFailedError.
    """
    v = Validator()
    filters = read_filters(args, resource.default_sort, resource.default_page_size, resource.safelist, v)
    conditions = _parse_list_filters(resource, args, v)
    if not v.is_empty():
        raise ValidationFailedError(v.errors)

    query = db.session.query(resource.model).filter(*conditions)
    return paginate(query, resource.model, filters)


def update_record(resource: Resource, record_id: int, payload: dict, *, extra_changes=None, validate=None):
    """
    PATCH a row under the optimistic-concurrency protocol.

    The concurrency token (resource.token_attr) is read from the payload;
    every other key is a column change. extra_changes are applied
    alongside (e.g. a freshly computed password hash) and validate
    overrides the resource's field rules.
    """
    v = Validator()
    changes = coerce_payload(model=resource.model, payload=payload, policy=resource.update_policy, v=v)
    supplied_token = changes.pop(resource.token_attr, None)
    changes.update(extra_changes or {})

    update = PartialUpdate(
        resource.model,
        record_id,
        changes,
        supplied_token,
        token_attr=resource.token_attr,
        validate=validate or resource.validate,
        unique_fields=resource.unique_fields,
        reference_models=resource.references,
        validator=v,
    )
    return update.run()


def delete_record(resource: Resource, record_id: int) -> None:
    entity = get_record(resource, record_id)
    db.session.delete(entity)
    try:
        commit_or_translate()
    except IntegrityError as exc:
        if classify(exc).kind is ConstraintKind.FOREIGN_KEY_VIOLATION:
            raise ValidationFailedError({"id": "is still referenced by other records"}) from exc
        raise
