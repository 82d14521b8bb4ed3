import html
import logging

from fastapi import APIRouter, Body, Depends, Query, Response
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

import credentials
import identity
from auth import clear_session_cookie, get_current_user, set_session_cookie
from config import GMAIL_SETUP_ENABLED
from db import get_db
from errors import NotFound, ServiceUnavailable
from helpers import envelope
from models import UserDB
from schemas import (
    ProfileUpdate,
    ResendOtp,
    UserDetailOut,
    UserLogin,
    UserOut,
    UserSignup,
    VerifyEmail,
    dump,
)
from utils.mailer import MailDeliveryError, build_consent_url, exchange_code

router = APIRouter(prefix="/auth", tags=["auth"])
oauth_router = APIRouter(tags=["auth"])
logger = logging.getLogger(__name__)

# Fresh registrations and resends to a pending account answer identically.
REGISTERED_MESSAGE = "Registration received! Please check your email for the verification code."


@router.post("/register", status_code=201)
def register(user: UserSignup = Body(...), db: Session = Depends(get_db)):
    credentials.register(db, user.name, user.email, user.password, user.role)
    return envelope(REGISTERED_MESSAGE)


@router.post("/verify-email")
def verify_email(body: VerifyEmail = Body(...), db: Session = Depends(get_db)):
    otp = None if body.otp is None else str(body.otp)
    credentials.verify_email(db, body.email, otp)
    return envelope("Email verified successfully! You can now log in.")


@router.post("/resend-otp")
def resend_otp(body: ResendOtp = Body(...), db: Session = Depends(get_db)):
    credentials.resend_otp(db, body.email)
    return envelope("If the account is awaiting verification, a new code has been sent.")


@router.post("/login")
def login(response: Response, user: UserLogin = Body(...), db: Session = Depends(get_db)):
    """
    Authenticate and hand out a session token, both in the body and as an
    httpOnly cookie.
    """
    token, account = credentials.login(db, user.email, user.password)
    set_session_cookie(response, token)
    return envelope("Login successful", token=token, user=dump(UserOut, account))


@router.get("/logout")
def logout(response: Response):
    clear_session_cookie(response)
    return envelope("Logged out successfully")


@router.get("/me")
def me(current: UserDB = Depends(get_current_user)):
    return envelope(user=dump(UserDetailOut, current))


@router.put("/profile")
def update_profile(
    body: ProfileUpdate = Body(...),
    current: UserDB = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    fields = body.model_dump(exclude_unset=True)
    user = identity.update_profile(db, current.id, fields)
    return envelope("Profile updated successfully", user=dump(UserOut, user))


# ───── one-time Gmail authorization (development only) ─────

@router.get("/google-setup")
def google_setup():
    if not GMAIL_SETUP_ENABLED:
        raise NotFound()
    return RedirectResponse(build_consent_url())


@oauth_router.get("/oauth2callback", response_class=HTMLResponse)
def oauth2callback(code: str = Query(None), error: str = Query(None)):
    if not GMAIL_SETUP_ENABLED:
        raise NotFound()
    if error:
        logger.error("[oauth] google returned error: %s", error)
        return HTMLResponse(f"Google error: {html.escape(error)}", status_code=400)
    if not code:
        return HTMLResponse("No code received from Google", status_code=400)

    try:
        tokens = exchange_code(code)
    except MailDeliveryError:
        logger.exception("[oauth] token exchange failed")
        raise ServiceUnavailable("Authentication failed")

    refresh_token = tokens.get("refresh_token")
    if not refresh_token:
        logger.warning("[oauth] consent finished but Google sent no refresh token")
        return HTMLResponse(
            "<h1>No refresh token</h1><p>Revoke the app's access and run the setup again.</p>",
            status_code=400,
        )

    # the token is shown to the operator once and never logged
    logger.warning("[oauth] new refresh token issued; set GMAIL_REFRESH_TOKEN and disable GMAIL_SETUP_ENABLED")
    return HTMLResponse(
        "<h1>Auth Successful!</h1>"
        f"<p>Store this as GMAIL_REFRESH_TOKEN:</p><pre>{html.escape(refresh_token)}</pre>"
    )
