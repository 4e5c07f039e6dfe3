"""Shared validation utilities"""

import re
import uuid
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def validate_uuid(value: str) -> bool:
    """Validate UUID format"""
    try:
        uuid.UUID(value)
        return True
    except (ValueError, AttributeError, TypeError):
        return False


def is_valid_email(email: Optional[str]) -> bool:
    """Loose email check matching the one used by the sign-up form"""
    if not email:
        return False
    return bool(EMAIL_PATTERN.match(email.strip()))


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

    if not is_valid_email(email):
        raise ValueError("Invalid email address")

    return email


def validate_user_id(value: str) -> str:
    """Pydantic helper for Supabase user ids"""
    if not validate_uuid(value):
        raise ValueError("Invalid user ID")
    return str(value)
