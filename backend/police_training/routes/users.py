# Overview: Flask API routes for user registration, activation, password reset and administration.

from flask import Blueprint, current_app, request

from ..decorators import require_activated_user, require_permission
from ..extensions import background
from ..mailer import send_welcome
from ..resources import USERS
from ..services import auth_service, resource_service
from ..validation import validate_user
from ..validator import Validator, validate_password_plaintext
from .helpers import created, envelope, paged, read_json


users_bp = Blueprint("users", __name__, url_prefix="/v1/users")


@users_bp.post("")
def register_user_route():
    """
    Self-registration.

    Creates an unactivated account and mails the activation token in the
    background. The response does not wait for the mail.
    """
    data = read_json({"first_name", "last_name", "email", "gender", "password"})
    user, token = auth_service.register_user(data)

    background.run(send_welcome, user.email, user.id, token.plaintext, name="send_welcome")
    current_app.logger.info("Registered user %s", user.id)

    return created("user", user, f"/v1/users/{user.id}")


@users_bp.put("/activated")
def activate_user_route():
    data = read_json({"token"})
    user = auth_service.activate_user(data.get("token"))
    return envelope(user=user.to_dict())


@users_bp.put("/password-reset")
def reset_password_route():
    data = read_json({"password", "token"})
    auth_service.reset_password(data.get("token"), data.get("password"))
    return envelope(message="your password was successfully reset")


@users_bp.get("/me")
@require_activated_user
def show_current_user_route(current_user):
    return envelope(user=current_user.to_dict())


@users_bp.get("")
@require_permission("VIEW_USERS")
def list_users_route(current_user):
    items, metadata = resource_service.list_records(USERS, request.args)
    return paged("users", items, metadata)


@users_bp.get("/<int:user_id>")
@require_permission("VIEW_USERS")
def show_user_route(user_id, current_user):
    user = resource_service.get_record(USERS, user_id)
    return envelope(user=user.to_dict())


@users_bp.patch("/<int:user_id>")
@require_permission("MANAGE_USERS")
def update_user_route(user_id, current_user):
    """
    PATCH a user. `version` is mandatory; `password`, when present, is
    checked against the plaintext rules and re-hashed.
    """
    payload = read_json(USERS.writable_fields | {"version", "password"})
    password = payload.pop("password", None)
    if password is not None and not isinstance(password, str):
        password = ""

    extra_changes = {}
    if password:
        pv = Validator()
        validate_password_plaintext(pv, password)
        if pv.is_empty():
            extra_changes["password_hash"] = auth_service.hash_password(password)

    def validate(v, user):
        validate_user(v, user, password=password)

    user = resource_service.update_record(
        USERS, user_id, payload, extra_changes=extra_changes, validate=validate
    )
    return envelope(user=user.to_dict())


@users_bp.delete("/<int:user_id>")
@require_permission("MANAGE_USERS")
def delete_user_route(user_id, current_user):
    resource_service.delete_record(USERS, user_id)
    return envelope(message="user successfully deleted")
