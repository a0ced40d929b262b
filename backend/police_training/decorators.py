# Overview: Request authentication and permission decorators for API routes.

"""
The authenticated user is handed to the view as an explicit
`current_user` keyword argument. Nothing is stashed on flask.g.

Header handling:
- no Authorization header        -> anonymous (401 on protected routes)
- malformed header / bad token   -> 401 with WWW-Authenticate: Bearer
- valid token, inactive account  -> 403
- missing permission code        -> 403
"""

from functools import wraps

from flask import request

from .errors import InactiveAccountError, NotFoundError, UnauthorizedError
from .services import permission_service, token_service
from .validator import Validator


def authenticate_request():
    """Resolve the bearer token on the current request to a User, or None if anonymous."""
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None

    parts = auth_header.split(" ")
    if len(parts) != 2 or parts[0] != "Bearer":
        raise UnauthorizedError()

    token = parts[1]
    v = Validator()
    token_service.validate_token_plaintext(v, token)
    if not v.is_empty():
        raise UnauthorizedError()

    try:
        return token_service.lookup_user_by_token(token_service.SCOPE_AUTHENTICATION, token)
    except NotFoundError:
        raise UnauthorizedError()


def _activated_user():
    user = authenticate_request()
    if user is None:
        raise UnauthorizedError("you must be authenticated to access this resource")
    if not user.is_activated:
        raise InactiveAccountError()
    return user


def require_activated_user(f):
    """Require an authenticated, activated user; passes it as current_user."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        kwargs["current_user"] = _activated_user()
        return f(*args, **kwargs)

    return decorated_function


def require_permission(permission_code: str):
    """
    Require a specific permission.

    Authentication and activation are checked first, so an anonymous
    request gets 401 before any permission lookup happens.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            user = _activated_user()
            permission_service.require_permission(user.id, permission_code, resource=request.path)
            kwargs["current_user"] = user
            return f(*args, **kwargs)

        return decorated_function
    return decorator
