from __future__ import annotations

import re
from typing import Any, Optional

from ..core.exceptions import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
AZ_PHONE_RE = re.compile(r"^(?:\+994|0)(50|51|55|70|77|99)(\d{7})$")
CLOCK_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} boş ola bilməz")
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} ən azı {min_len} simvol olmalıdır")
    return value


def require_email(value: Optional[str]) -> str:
    email = (value or "").strip().lower()
    if not EMAIL_RE.match(email):
        raise ValidationError("Email formatı yanlışdır")
    return email


def normalize_phone(value: Optional[str]) -> Optional[str]:
    """Return the phone as +994XXXXXXXXX, None when empty."""
    raw = re.sub(r"[\s\-()]", "", value or "")
    if not raw:
        return None
    m = AZ_PHONE_RE.match(raw)
    if not m:
        raise ValidationError("Telefon nömrəsi yanlışdır")
    return f"+994{m.group(1)}{m.group(2)}"


def optional_float(value: Any, field_name: str) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} rəqəm olmalıdır")


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} tam ədəd olmalıdır")


def require_int(value: Any, field_name: str) -> int:
    result = optional_int(value, field_name)
    if result is None:
        raise ValidationError(f"{field_name} tələb olunur")
    return result


def require_clock_time(value: Any, field_name: str) -> str:
    """HH:MM on a 24 hour clock."""
    text = str(value or "").strip()
    if not CLOCK_RE.match(text):
        raise ValidationError(f"{field_name} formatı yanlışdır (SS:DD)")
    return text
