# auth.py
import logging

import jwt
from fastapi import Depends, Request, Response
from sqlalchemy.orm import Session

from config import COOKIE_NAME, COOKIE_SECURE, JWT_TTL_DAYS
from db import get_db
from errors import Forbidden, Unauthorized
from models import UserDB
from security import decode_token

__all__ = ["get_current_user", "require_admin", "set_session_cookie", "clear_session_cookie"]

logger = logging.getLogger(__name__)


def _token_from(request: Request):
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip()
    return request.cookies.get(COOKIE_NAME)


def get_current_user(request: Request, db: Session = Depends(get_db)) -> UserDB:
    token = _token_from(request)
    if not token or token == "none":
        raise Unauthorized("Not authorized, no token")

    try:
        payload = decode_token(token)
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token has expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Not authorized, token failed")

    user = db.get(UserDB, payload.get("id"))
    if user is None:
        raise Unauthorized("User not found")

    logger.debug("[guard] %s %s uid=%s role=%s", request.method, request.url.path, user.id, user.role)
    return user


def require_admin(user: UserDB = Depends(get_current_user)) -> UserDB:
    if user.role != "admin":
        logger.warning("[guard] non-admin uid=%s denied", user.id)
        raise Forbidden("Not authorized as an admin")
    return user


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=JWT_TTL_DAYS * 24 * 60 * 60,
        httponly=True,
        secure=COOKIE_SECURE,
        samesite="strict",
    )


def clear_session_cookie(response: Response) -> None:
    # placeholder that expires in 10 seconds; tokens are not revoked server-side
    response.set_cookie(COOKIE_NAME, "none", max_age=10, httponly=True)
