"""Shared validation utilities"""

import re
from typing import Optional


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Validate and normalize a phone number.

    Keeps a leading '+' and digits only; 7 to 15 digits (E.164 range).

    Raises:
        ValueError: If phone number is invalid
    """
    if not phone:
        return phone

    has_plus = phone.strip().startswith("+")
    digits = re.sub(r"\D", "", phone)

    if len(digits) < 7 or len(digits) > 15:
        raise ValueError("Phone number must contain between 7 and 15 digits")

    return f"+{digits}" if has_plus else digits


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

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


def validate_time_string(value: Optional[str]) -> Optional[str]:
    """
    Validate a clock time given as HH:MM or HH:MM:SS and normalize it to HH:MM.

    Raises:
        ValueError: If the time is malformed or out of range
    """
    if value is None:
        return value

    match = re.fullmatch(r"(\d{1,2}):(\d{2})(?::(\d{2}))?", value.strip())
    if not match:
        raise ValueError("Time must be in HH:MM format")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise ValueError("Time out of range")

    return f"{hours:02d}:{minutes:02d}"
