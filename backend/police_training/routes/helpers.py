# Overview: Shared request parsing and JSON envelope helpers for route modules.

from __future__ import annotations

from flask import jsonify, request

from ..errors import BadRequestError


MAX_BODY_BYTES = 1_048_576


def read_json(allowed_keys=None) -> dict:
    """
    Decode the request body as one JSON object.

    Rejects empty, oversized and malformed bodies, and (when allowed_keys
    is given) any key outside it.
    """
    if request.content_length is not None and request.content_length > MAX_BODY_BYTES:
        raise BadRequestError(f"body must not be larger than {MAX_BODY_BYTES} bytes")

    raw = request.get_data(cache=True)
    if len(raw) > MAX_BODY_BYTES:
        raise BadRequestError(f"body must not be larger than {MAX_BODY_BYTES} bytes")
    if not raw.strip():
        raise BadRequestError("body must not be empty")

    payload = request.get_json(force=True, silent=True)
    if payload is None and raw.strip() != b"null":
        raise BadRequestError("body contains badly-formed JSON")

    if not isinstance(payload, dict):
        raise BadRequestError("body must contain a single JSON object")

    if allowed_keys is not None:
        for key in payload:
            if key not in allowed_keys:
                raise BadRequestError(f'body contains unknown key "{key}"')

    return payload


def envelope(status: int = 200, headers: dict | None = None, **data):
    response = jsonify(data)
    response.status_code = status
    if headers:
        response.headers.update(headers)
    return response


def created(key: str, entity, location: str):
    return envelope(201, {"Location": location}, **{key: entity.to_dict()})


def paged(key: str, items, metadata):
    return envelope(**{key: [item.to_dict() for item in items], "metadata": metadata.to_dict()})
