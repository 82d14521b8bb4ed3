# security.py
import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from werkzeug.security import check_password_hash, generate_password_hash

from config import JWT_ALGORITHM, JWT_SECRET, JWT_TTL_DAYS, OTP_PEPPER


def hash_password(raw: str) -> str:
    return generate_password_hash(raw)


def check_password(password_hash: Optional[str], raw: Optional[str]) -> bool:
    try:
        return check_password_hash(password_hash or "", raw or "")
    except ValueError:
        # malformed stored hash
        return False


def gen_otp_code() -> str:
    return f"{secrets.randbelow(1_000_000):06d}"


def hash_otp(code: str) -> str:
    return hashlib.sha256((OTP_PEPPER + code).encode("utf-8")).hexdigest()


def otp_matches(stored_hash: Optional[str], code: Optional[str]) -> bool:
    if not stored_hash or not code:
        return False
    return secrets.compare_digest(stored_hash, hash_otp(code.strip()))


def as_utc(ts: datetime) -> datetime:
    # SQLite hands back naive datetimes; treat them as UTC
    return ts if ts.tzinfo else ts.replace(tzinfo=timezone.utc)


def issue_token(user_id: str, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "iat": now,
        "exp": now + timedelta(days=JWT_TTL_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Raises jwt.ExpiredSignatureError / jwt.InvalidTokenError."""
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
