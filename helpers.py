import json
import re
from typing import Any, List, Optional

from errors import ValidationError

EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def ref_id(ref: Any) -> Optional[str]:
    """
    Normalize a reference to its string id. Accepts a bare id, a mapping with
    "id"/"_id", or an object carrying an ``id`` attribute.
    """
    if ref is None:
        return None
    if isinstance(ref, dict):
        ref = ref.get("id", ref.get("_id"))
        return None if ref is None else str(ref)
    if isinstance(ref, (str, int)):
        return str(ref)
    inner = getattr(ref, "id", None)
    return str(inner) if inner is not None else str(ref)


def same_ref(a: Any, b: Any) -> bool:
    left, right = ref_id(a), ref_id(b)
    return left is not None and left == right


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_RE.match(email or ""))


def parse_ingredients(raw: Any) -> List[str]:
    """
    Ingredients arrive either as a list or as a string: a JSON array string is
    decoded, anything else is split on commas.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        try:
            decoded = json.loads(raw)
        except ValueError:
            decoded = None
        raw = decoded if isinstance(decoded, list) else raw.split(",")
    if not isinstance(raw, (list, tuple)):
        raise ValidationError("Ingredients must be a list or a comma separated string")
    return [str(i).strip() for i in raw if str(i).strip()]


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


def envelope(message: Optional[str] = None, **payload) -> dict:
    body = {"success": True}
    if message:
        body["message"] = message
    body.update(payload)
    return body
