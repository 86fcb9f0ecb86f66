"""Field validation helpers shared by the domain modules."""

from __future__ import annotations

import re
import uuid

from preptrack.core.errors import ValidationError

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$")

EXAMS = ("NEET", "JEE")


def validate_email(email: str) -> bool:
    """Check email format.

    Args:
        email: Email address to validate

    Returns:
        True if the address looks valid, False otherwise
    """
    return bool(email) and bool(EMAIL_PATTERN.match(email))


def require_email(email: str) -> str:
    """Return the trimmed email or raise ValidationError."""
    email = (email or "").strip()
    if not validate_email(email):
        raise ValidationError("Please enter a valid email address.", {"field": "email"})
    return email


def require_text(
    value: str | None,
    field: str,
    min_length: int = 1,
    max_length: int | None = None,
) -> str:
    """Trim a text field and enforce its length bounds.

    Raises:
        ValidationError: If the trimmed value is too short or too long
    """
    text = (value or "").strip()
    if len(text) < min_length:
        if min_length <= 1:
            message = f"{field} is required."
        else:
            message = f"{field} must be at least {min_length} characters."
        raise ValidationError(message, {"field": field})
    if max_length is not None and len(text) > max_length:
        raise ValidationError(
            f"{field} must be {max_length} characters or less.", {"field": field}
        )
    return text


def require_exam(exam: str) -> str:
    """Validate an exam name (NEET or JEE)."""
    if exam not in EXAMS:
        raise ValidationError(f"Unknown exam '{exam}'. Expected NEET or JEE.", {"field": "exam"})
    return exam


def require_digits(value: str, length: int, field: str) -> str:
    """Require a string of exactly `length` ASCII digits."""
    value = (value or "").strip()
    if len(value) != length or not value.isascii() or not value.isdigit():
        raise ValidationError(f"{field} must be exactly {length} digits.", {"field": field})
    return value


def new_id(prefix: str) -> str:
    """Generate a short random record id, e.g. 'mis_1f2e3d4c5b6a'."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"
