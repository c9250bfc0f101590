"""Shared validation utilities"""

import re
import uuid
from typing import Optional


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number.

    Accepts common separators (spaces, dashes, dots, parentheses) and an
    optional leading "+". Stored as "+<digits>" when given with a country
    code, otherwise as bare digits.

    Raises:
        ValueError: If the number has fewer than 7 or more than 15 digits
    """
    if not phone:
        return phone

    phone = phone.strip()
    has_plus = phone.startswith("+")
    digits = re.sub(r"\D", "", phone)

    # E.164 allows at most 15 digits
    if len(digits) < 7 or len(digits) > 15:
        raise ValueError("Phone number must have between 7 and 15 digits")

    return f"+{digits}" if has_plus else digits


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_choice(value: Optional[str], choices: tuple[str, ...], label: str) -> Optional[str]:
    """Ensure an optional value is one of the allowed choices"""
    if value is None:
        return value
    if value not in choices:
        raise ValueError(f"{label} must be one of: {', '.join(choices)}")
    return value
