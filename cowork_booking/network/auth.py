from typing import Any

import structlog

from cowork_booking.network.client import ApiClient
from cowork_booking.resources._common import parse_model
from cowork_booking.schemas.auth import AuthResponse, SignInPayload, SignUpPayload
from cowork_booking.session import SessionContext

logger = structlog.get_logger(__name__)

SIGNIN_PATH = "/api/auth/signin"
SIGNUP_PATH = "/api/auth/signup"
FORGOT_PASSWORD_PATH = "/api/auth/forgot-password"
RESET_PASSWORD_PATH = "/api/auth/reset-password"


def sign_in(client: ApiClient, username: str, password: str) -> AuthResponse:
    """
    Authenticate against the backend and start a session.

    Args:
        client (ApiClient): Client bound to the session to populate.
        username (str): Account username.
        password (str): Account password.

    Returns:
        AuthResponse: The signed-in user, also stored on `client.session`.

    Raises:
        RuntimeError: If the backend answers without a token.
    """
    logger.info("sign_in_requested", username=username)

    payload = SignInPayload(username=username, password=password)
    body = client.post(SIGNIN_PATH, payload.model_dump())

    if not isinstance(body, dict) or not isinstance(body.get("token"), str):
        logger.error("sign_in_missing_token", username=username)
        raise RuntimeError("No token in sign-in response.")

    user = parse_model(AuthResponse, body)
    client.session.set_user(user)
    return user


def sign_up(client: ApiClient, payload: SignUpPayload) -> Any:
    logger.info("sign_up_requested", username=payload.username)
    return client.post(SIGNUP_PATH, payload.to_wire())


def forgot_password(client: ApiClient, email: str) -> Any:
    return client.post(FORGOT_PASSWORD_PATH, {"email": email})


def reset_password(client: ApiClient, token: str, new_password: str) -> Any:
    return client.post(RESET_PASSWORD_PATH, {"token": token, "newPassword": new_password})


def sign_out(session: SessionContext) -> None:
    session.clear()
