"""Validation utilities for public form input.

Provides validation for:
- Person names
- Phone numbers (international, digits with optional leading +)
- Free-text messages and subjects

All text is HTML-escaped before length checks so stored values are safe to
render in the admin panel.
"""

import html
import re
from typing import NamedTuple


# ==============================================================================
# Constants for validation rules
# ==============================================================================

NAME_MIN_LENGTH = 2
NAME_MAX_LENGTH = 100

PHONE_MIN_LENGTH = 10
PHONE_MAX_LENGTH = 15

MESSAGE_MIN_LENGTH = 10
MESSAGE_MAX_LENGTH = 2000

SUBJECT_MIN_LENGTH = 3
SUBJECT_MAX_LENGTH = 200

_SUSPICIOUS_PATTERN = re.compile(r"<script|javascript:|on\w+\s*=", re.IGNORECASE)


class ValidationResult(NamedTuple):
    """Result of a validation check."""

    valid: bool
    message: str | None = None
    formatted: str | None = None


def sanitize_html(value: str) -> str:
    """Escape HTML special characters and trim whitespace.

    Example:
        >>> sanitize_html(" <b>Hi</b> ")
        '&lt;b&gt;Hi&lt;/b&gt;'
    """
    return html.escape(value, quote=True).strip()


def _validate_text(
    value: str, label: str, min_length: int, max_length: int
) -> ValidationResult:
    if _SUSPICIOUS_PATTERN.search(value):
        return ValidationResult(False, f"Invalid content detected in {label}")

    sanitized = sanitize_html(value)
    if len(sanitized) < min_length:
        return ValidationResult(
            False, f"{label.capitalize()} must be at least {min_length} characters long"
        )
    if len(sanitized) > max_length:
        return ValidationResult(False, f"{label.capitalize()} is too long")
    return ValidationResult(True, formatted=sanitized)


def validate_name(name: str) -> ValidationResult:
    """Validate and sanitize a person name (2-100 characters).

    Examples:
        >>> validate_name("Ada Lovelace").formatted
        'Ada Lovelace'
        >>> validate_name("A").valid
        False
    """
    return _validate_text(name, "name", NAME_MIN_LENGTH, NAME_MAX_LENGTH)


def validate_message(message: str) -> ValidationResult:
    """Validate and sanitize a free-text message (10-2000 characters)."""
    return _validate_text(message, "message", MESSAGE_MIN_LENGTH, MESSAGE_MAX_LENGTH)


def validate_subject(subject: str) -> ValidationResult:
    """Validate and sanitize a subject line (3-200 characters)."""
    return _validate_text(subject, "subject", SUBJECT_MIN_LENGTH, SUBJECT_MAX_LENGTH)


def normalize_phone(phone: str) -> str:
    """Remove formatting from phone, keeping digits and a leading +.

    Example:
        >>> normalize_phone("+1 (234) 567-8901")
        '+12345678901'
    """
    digits = re.sub(r"\D", "", phone)
    return f"+{digits}" if phone.strip().startswith("+") else digits


def validate_phone(phone: str) -> ValidationResult:
    """Validate an international phone number.

    Examples:
        >>> validate_phone("+1 234 567 8901")
        ValidationResult(valid=True, message=None, formatted='+12345678901')
        >>> validate_phone("12345")
        ValidationResult(valid=False, message='Phone number must be at least 10 digits', formatted=None)
    """
    normalized = normalize_phone(phone)

    if len(normalized) < PHONE_MIN_LENGTH:
        return ValidationResult(False, "Phone number must be at least 10 digits")
    if len(normalized) > PHONE_MAX_LENGTH:
        return ValidationResult(False, "Phone number is too long")

    return ValidationResult(True, formatted=normalized)
