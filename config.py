# config.py

import os

from dotenv import load_dotenv

load_dotenv()


def _to_bool(val, default=False):
    if val is None:
        return default
    return str(val).strip().lower() in {"1", "true", "yes", "on"}


def _to_int(val, default):
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


# ───── Database ─────
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./recipes.db")

# ───── Auth / JWT ─────
DEV_JWT_SECRET = "dev-secret-change-me"
JWT_SECRET = os.getenv("JWT_SECRET", DEV_JWT_SECRET)  # override in prod!
JWT_ALGORITHM = "HS256"
JWT_TTL_DAYS = _to_int(os.getenv("JWT_TTL_DAYS"), 30)
COOKIE_NAME = "token"
COOKIE_SECURE = _to_bool(os.getenv("COOKIE_SECURE"), False)
ALLOW_ADMIN_SIGNUP = _to_bool(os.getenv("ALLOW_ADMIN_SIGNUP"), False)

# ───── One-time passcodes ─────
OTP_TTL_MINUTES = _to_int(os.getenv("OTP_TTL_MINUTES"), 10)
DEV_OTP_PEPPER = "change-me"
OTP_PEPPER = os.getenv("OTP_PEPPER", DEV_OTP_PEPPER)

# ───── Mail (Gmail API over OAuth) ─────
MAIL_BACKEND = os.getenv("MAIL_BACKEND", "gmail")  # "gmail" | "console"
MAIL_FROM = os.getenv("MAIL_FROM") or os.getenv("GMAIL_USER", "no-reply@example.com")
MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "CookMate")
MAIL_TIMEOUT_SECONDS = _to_int(os.getenv("MAIL_TIMEOUT_SECONDS"), 10)
GMAIL_CLIENT_ID = os.getenv("GMAIL_CLIENT_ID")
GMAIL_CLIENT_SECRET = os.getenv("GMAIL_CLIENT_SECRET")
GMAIL_REFRESH_TOKEN = os.getenv("GMAIL_REFRESH_TOKEN")
GMAIL_REDIRECT_URI = os.getenv("GMAIL_REDIRECT_URI", "http://localhost:5001/oauth2callback")
GMAIL_SETUP_ENABLED = _to_bool(os.getenv("GMAIL_SETUP_ENABLED"), False)
GOOGLE_TOKEN_ENDPOINT = "https://oauth2.googleapis.com/token"
GOOGLE_AUTH_ENDPOINT = "https://accounts.google.com/o/oauth2/v2/auth"
GMAIL_SEND_ENDPOINT = "https://gmail.googleapis.com/gmail/v1/users/me/messages/send"
GMAIL_SEND_SCOPE = "https://www.googleapis.com/auth/gmail.send"

# ───── Chat assistant (Ollama-compatible) ─────
CHAT_API_URL = os.getenv("CHAT_API_URL", "http://localhost:11434/api/chat")
CHAT_MODEL = os.getenv("CHAT_MODEL", "llama3")
CHAT_TIMEOUT_SECONDS = _to_int(os.getenv("CHAT_TIMEOUT_SECONDS"), 30)

# ───── HTTP ─────
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def insecure_defaults():
    """Names of secrets still running on their development fallback."""
    found = []
    if JWT_SECRET == DEV_JWT_SECRET:
        found.append("JWT_SECRET")
    if OTP_PEPPER == DEV_OTP_PEPPER:
        found.append("OTP_PEPPER")
    return found
