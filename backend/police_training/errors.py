# Overview: Domain error taxonomy and the JSON envelopes they are reported with.

from __future__ import annotations

from flask import Flask, current_app, jsonify, request
from werkzeug.exceptions import HTTPException


class ApiError(Exception):
    """Base for errors that map directly onto an HTTP response."""

    status_code = 500
    message = "the server encountered a problem and could not process your request"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def payload(self):
        return self.message


class BadRequestError(ApiError):
    status_code = 400


class NotFoundError(ApiError):
    status_code = 404
    message = "the requested resource could not be found"


class ValidationFailedError(ApiError):
    """422 with every field problem found in one pass."""

    status_code = 422
    message = "validation failed"

    def __init__(self, errors: dict[str, str]):
        self.errors = dict(errors)
        super().__init__()

    def payload(self):
        return self.errors


class DuplicateValueError(ValidationFailedError):
    def __init__(self, field: str, message: str = "a record with this value already exists"):
        self.field = field
        super().__init__({field: message})


class ForeignKeyViolationError(ValidationFailedError):
    def __init__(self, field: str, message: str = "must reference an existing record"):
        self.field = field
        super().__init__({field: message})


class EditConflictError(ApiError):
    status_code = 409
    message = "unable to update the record due to an edit conflict, please try again"


class InvalidCredentialsError(ApiError):
    status_code = 401
    message = "invalid authentication credentials"


class UnauthorizedError(ApiError):
    status_code = 401
    message = "invalid or missing authentication token"


class InactiveAccountError(ApiError):
    status_code = 403
    message = "your user account must be activated to access this resource"


class ForbiddenError(ApiError):
    status_code = 403
    message = "your user account doesn't have the necessary permissions to access this resource"


class UnsafeSortError(RuntimeError):
    """A sort value outside the server-built safelist reached the query layer."""


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(ApiError)
    def handle_api_error(exc: ApiError):
        response = jsonify({"error": exc.payload()})
        response.status_code = exc.status_code
        if isinstance(exc, UnauthorizedError):
            response.headers["WWW-Authenticate"] = "Bearer"
        return response

    @app.errorhandler(HTTPException)
    def handle_http_exception(exc: HTTPException):
        if exc.code == 404:
            message = NotFoundError.message
        elif exc.code == 405:
            message = f"the {request.method} method is not supported for this resource"
        else:
            message = exc.description
        return jsonify({"error": message}), exc.code

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        current_app.logger.exception("Unhandled error on %s %s", request.method, request.url)
        return jsonify({"error": ApiError.message}), 500
