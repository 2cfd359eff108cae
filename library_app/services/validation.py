"""Field-level and cross-entity checks run before anything reaches the store."""

import re
from typing import Iterable, Optional

from library_app.core.exceptions import DuplicateMemberId, InvalidEmail, InvalidInput

EMAIL_RE = re.compile(r"^[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}$")


def is_valid_email(value: Optional[str]) -> bool:
    return bool(value) and EMAIL_RE.match(value) is not None


def check_email(value: Optional[str]) -> str:
    if not is_valid_email(value):
        raise InvalidEmail(f"Invalid email address: {value!r} (expected name@domain.tld)")
    return value


def require_text(value: Optional[str], field: str) -> str:
    """Return ``value`` stripped, or raise InvalidInput when nothing is left."""
    text = (value or "").strip()
    if not text:
        raise InvalidInput(f"{field} must not be empty")
    return text


def check_range(value: Optional[int], field: str, minimum: int, maximum: Optional[int] = None) -> Optional[int]:
    if value is None:
        return None
    if value < minimum or (maximum is not None and value > maximum):
        bound = f">= {minimum}" if maximum is None else f"between {minimum} and {maximum}"
        raise InvalidInput(f"{field} must be {bound}")
    return value


def normalize_member_id(raw: Optional[str]) -> str:
    return require_text(raw, "Member id")


def admit_member_id(raw: Optional[str], existing_ids: Iterable[str]) -> str:
    """Normalize a member id and make sure no existing id matches it case-insensitively."""
    member_id = normalize_member_id(raw)
    lowered = member_id.lower()
    if any(other.strip().lower() == lowered for other in existing_ids):
        raise DuplicateMemberId(f"Member id {member_id!r} is already registered")
    return member_id
