# credentials.py
"""
Registration, email verification by one-time passcode, and login.

Passcodes are stored hashed on the user row together with their expiry. A new
passcode always replaces the previous one in a single UPDATE, so only the most
recently mailed code can verify the account.
"""
import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import ALLOW_ADMIN_SIGNUP, OTP_TTL_MINUTES
from errors import (
    Conflict,
    InvalidCredentials,
    InvalidOrExpired,
    NotVerified,
    ServiceUnavailable,
    ValidationError,
)
from helpers import is_valid_email, normalize_email
from models import UserDB
from security import (
    as_utc,
    check_password,
    gen_otp_code,
    hash_otp,
    hash_password,
    issue_token,
    otp_matches,
)
from utils.mailer import MailDeliveryError, send_verification_email

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def find_user_by_email(db: Session, email: str) -> Optional[UserDB]:
    return db.query(UserDB).filter(UserDB.email == normalize_email(email)).first()


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    if not re.search(r"\d", password):
        raise ValidationError("Password must contain at least one digit")


def issue_otp(db: Session, user: UserDB) -> datetime:
    """
    Generate a fresh 6-digit code, persist it (overwriting any pending one)
    and mail it. Returns the expiry.
    """
    code = gen_otp_code()
    expiry = now_utc() + timedelta(minutes=OTP_TTL_MINUTES)
    db.execute(
        update(UserDB)
        .where(UserDB.id == user.id)
        .values(otp=hash_otp(code), otp_expiry=expiry)
    )
    db.commit()
    db.refresh(user)

    try:
        send_verification_email(user.email, code)
    except MailDeliveryError:
        logger.exception("[otp] delivery failed for user_id=%s", user.id)
        raise ServiceUnavailable(
            "Could not send the verification email. Please try again later."
        )

    logger.info("[otp] issued for user_id=%s expires=%s", user.id, expiry.isoformat())
    return expiry


def register(
    db: Session,
    name: Optional[str],
    email: Optional[str],
    password: Optional[str],
    role: Optional[str] = None,
) -> Tuple[UserDB, bool]:
    """
    Returns (user, resent). ``resent`` is True when an unverified account with
    this email already existed and only a new passcode was sent; callers must
    not reveal the difference to the client.
    """
    name = (name or "").strip()
    email = normalize_email(email)
    if not name or not email or not password:
        raise ValidationError("Please provide all required fields")
    if not is_valid_email(email):
        raise ValidationError("Please add a valid email")
    validate_password(password)

    existing = find_user_by_email(db, email)
    if existing:
        if existing.is_verified:
            raise Conflict("User with this email already exists")
        issue_otp(db, existing)
        logger.info("[register] resent passcode to pending user_id=%s", existing.id)
        return existing, True

    if role == "admin" and not ALLOW_ADMIN_SIGNUP:
        logger.warning("[register] admin role requested for %s but admin signup is disabled", email)

    user = UserDB(
        name=name,
        email=email,
        password_hash=hash_password(password),
        role="admin" if (role == "admin" and ALLOW_ADMIN_SIGNUP) else "user",
        is_verified=False,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("User with this email already exists")
    db.refresh(user)
    logger.info("[register] new user created with ID: %s", user.id)

    issue_otp(db, user)
    return user, False


def resend_otp(db: Session, email: Optional[str]) -> None:
    user = find_user_by_email(db, email or "")
    if user is None or user.is_verified:
        logger.info("[resend-otp] nothing to resend for %s", normalize_email(email))
        return
    issue_otp(db, user)


def verify_email(db: Session, email: Optional[str], otp: Optional[str]) -> UserDB:
    if not email or not otp:
        raise ValidationError("Email and OTP are required")

    user = find_user_by_email(db, email)
    if user is None or not user.has_pending_challenge or user.otp_expiry is None:
        raise InvalidOrExpired()
    if now_utc() >= as_utc(user.otp_expiry):
        raise InvalidOrExpired()
    if not otp_matches(user.otp, str(otp)):
        raise InvalidOrExpired()

    # guard against a newer code having replaced this one meanwhile
    result = db.execute(
        update(UserDB)
        .where(UserDB.id == user.id, UserDB.otp == user.otp)
        .values(is_verified=True, otp=None, otp_expiry=None)
    )
    if result.rowcount != 1:
        db.rollback()
        raise InvalidOrExpired()
    db.commit()
    db.refresh(user)
    logger.info("[verify] user_id=%s verified", user.id)
    return user


def login(db: Session, email: Optional[str], password: Optional[str]) -> Tuple[str, UserDB]:
    if not email or not password:
        raise ValidationError("Please provide email and password")

    user = find_user_by_email(db, email)
    if user is None:
        logger.info("[login] unknown email")
        raise InvalidCredentials()
    if not user.is_verified:
        logger.info("[login] user_id=%s not verified", user.id)
        raise NotVerified()
    if not check_password(user.password_hash, password):
        logger.info("[login] bad password for user_id=%s", user.id)
        raise InvalidCredentials()

    token = issue_token(user.id)
    logger.info("[login] user_id=%s logged in", user.id)
    return token, user
