"""Signed, expiring session cookie carrying the logged-in user's id.

The cookie holds only the user id and the time it was issued. The role is
looked up on every request, so a role change takes effect without a new
login.
"""

import logging

from fastapi import Request, Response
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from eventcrm.core.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()
serializer = URLSafeTimedSerializer(settings.secret_key, salt="eventcrm-session")


def issue_token(user_id: int) -> str:
    return serializer.dumps({"uid": user_id})


def user_id_from_token(token: str, max_age: int | None = None) -> int | None:
    if max_age is None:
        max_age = settings.session_max_age
    try:
        payload = serializer.loads(token, max_age=max_age)
    except SignatureExpired:
        logger.info("Session cookie expired")
        return None
    except BadSignature:
        logger.warning("Rejected session cookie with a bad signature")
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("uid"), int):
        return None
    return payload["uid"]


def set_session(response: Response, user_id: int) -> None:
    response.set_cookie(
        settings.session_cookie,
        issue_token(user_id),
        max_age=settings.session_max_age,
        httponly=True,
        samesite="lax",
    )


def clear_session(response: Response) -> None:
    response.delete_cookie(settings.session_cookie)


def read_session(request: Request) -> int | None:
    token = request.cookies.get(settings.session_cookie)
    if not token:
        return None
    return user_id_from_token(token)
