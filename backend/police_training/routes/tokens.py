# Overview: Flask API routes that issue authentication and password-reset tokens.

from flask import Blueprint

from ..extensions import background
from ..mailer import send_password_reset
from ..services import auth_service
from .helpers import envelope, read_json


tokens_bp = Blueprint("tokens", __name__, url_prefix="/v1/tokens")


@tokens_bp.post("/authentication")
def create_authentication_token_route():
    data = read_json({"email", "password"})
    token = auth_service.authenticate(data.get("email"), data.get("password"))
    return envelope(201, authentication_token=token.to_dict())


@tokens_bp.post("/password-reset")
def create_password_reset_token_route():
    """
    Always 202 for a well-formed email, so the response does not reveal
    whether an account exists.
    """
    data = read_json({"email"})
    issued = auth_service.request_password_reset(data.get("email"))
    if issued is not None:
        user, token = issued
        background.run(send_password_reset, user.email, token.plaintext, name="send_password_reset")

    return envelope(
        202,
        message="an email will be sent to you containing password reset instructions",
    )
