# utils/mailer.py
import base64
import logging
from email.message import EmailMessage
from typing import Optional
from urllib.parse import urlencode

import requests

from config import (
    GMAIL_CLIENT_ID,
    GMAIL_CLIENT_SECRET,
    GMAIL_REDIRECT_URI,
    GMAIL_REFRESH_TOKEN,
    GMAIL_SEND_ENDPOINT,
    GMAIL_SEND_SCOPE,
    GOOGLE_AUTH_ENDPOINT,
    GOOGLE_TOKEN_ENDPOINT,
    MAIL_BACKEND,
    MAIL_FROM,
    MAIL_FROM_NAME,
    MAIL_TIMEOUT_SECONDS,
    OTP_TTL_MINUTES,
)

__all__ = ["MailDeliveryError", "send_email", "send_verification_email"]

logger = logging.getLogger(__name__)


class MailDeliveryError(RuntimeError):
    pass


def _mask(addr: Optional[str]) -> str:
    if not addr or "@" not in addr:
        return addr or ""
    user, dom = addr.split("@", 1)
    return f"{user[:1]}***@{dom}"


def build_raw_message(to: str, subject: str, body: str) -> str:
    """
    RFC 2822 message, base64url encoded without padding as the Gmail API wants it.
    """
    msg = EmailMessage()
    msg["From"] = f"{MAIL_FROM_NAME} <{MAIL_FROM}>"
    msg["To"] = to
    msg["Subject"] = subject
    msg.set_content(body)
    return base64.urlsafe_b64encode(msg.as_bytes()).decode("ascii").rstrip("=")


def get_access_token() -> str:
    if not (GMAIL_CLIENT_ID and GMAIL_CLIENT_SECRET and GMAIL_REFRESH_TOKEN):
        raise MailDeliveryError("Gmail OAuth credentials are not configured")

    try:
        resp = requests.post(
            GOOGLE_TOKEN_ENDPOINT,
            data={
                "client_id": GMAIL_CLIENT_ID,
                "client_secret": GMAIL_CLIENT_SECRET,
                "refresh_token": GMAIL_REFRESH_TOKEN,
                "grant_type": "refresh_token",
            },
            timeout=MAIL_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise MailDeliveryError(f"token endpoint unreachable: {e!r}") from e

    if resp.status_code != 200:
        logger.error("[mail] token refresh failed %s: %s", resp.status_code, resp.text)
        if "invalid_grant" in resp.text:
            logger.error("[mail] refresh token is invalid or expired; re-run /auth/google-setup")
        raise MailDeliveryError(f"token refresh failed ({resp.status_code})")

    return resp.json()["access_token"]


def _send_via_gmail(to: str, subject: str, body: str) -> None:
    access_token = get_access_token()
    try:
        resp = requests.post(
            GMAIL_SEND_ENDPOINT,
            headers={"Authorization": f"Bearer {access_token}"},
            json={"raw": build_raw_message(to, subject, body)},
            timeout=MAIL_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise MailDeliveryError(f"gmail unreachable: {e!r}") from e

    if resp.status_code not in (200, 202):
        logger.error("[mail] gmail send failed %s: %s", resp.status_code, resp.text)
        raise MailDeliveryError(f"gmail send failed ({resp.status_code})")

    logger.info("[mail] sent to %s message_id=%s", _mask(to), resp.json().get("id"))


def send_email(to: str, subject: str, body: str) -> None:
    """
    Deliver a plain-text email. Raises MailDeliveryError when the provider
    cannot be reached or refuses the message.
    """
    if MAIL_BACKEND == "console":
        # local development only
        logger.info("[mail:console] to=%s subject=%s\n%s", to, subject, body)
        return
    _send_via_gmail(to, subject, body)


def send_verification_email(to: str, code: str) -> None:
    body = "\n".join([
        "Welcome to CookMate!",
        "",
        f"Your verification code is: {code}",
        f"This code expires in {OTP_TTL_MINUTES} minutes.",
        "If you didn't sign up, ignore this email.",
    ])
    send_email(to, "Your CookMate Verification Code", body)


# ───── one-time setup helpers for obtaining a refresh token ─────

def build_consent_url() -> str:
    params = {
        "client_id": GMAIL_CLIENT_ID or "",
        "redirect_uri": GMAIL_REDIRECT_URI,
        "response_type": "code",
        "access_type": "offline",
        "prompt": "consent",
        "scope": GMAIL_SEND_SCOPE,
    }
    return f"{GOOGLE_AUTH_ENDPOINT}?{urlencode(params)}"


def exchange_code(code: str) -> dict:
    try:
        resp = requests.post(
            GOOGLE_TOKEN_ENDPOINT,
            data={
                "code": code,
                "client_id": GMAIL_CLIENT_ID,
                "client_secret": GMAIL_CLIENT_SECRET,
                "redirect_uri": GMAIL_REDIRECT_URI,
                "grant_type": "authorization_code",
            },
            timeout=MAIL_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise MailDeliveryError(f"token endpoint unreachable: {e!r}") from e

    if resp.status_code != 200:
        logger.error("[mail] code exchange failed %s: %s", resp.status_code, resp.text)
        raise MailDeliveryError(f"code exchange failed ({resp.status_code})")
    return resp.json()
