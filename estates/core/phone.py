"""Phone number utilities for consistent handling across the application."""

import logging
import re

logger = logging.getLogger(__name__)

# E.164 allows at most 15 digits (country code + national number)
E164_MAX_DIGITS = 15
MIN_PHONE_DIGITS = 8


def normalize_phone(phone: str | None) -> str:
    """Normalize a phone number for storage.

    Strips everything but digits, keeps at most 15 of them and prefixes ``+``:
        050 123 4567     → +0501234567
        +971 (50) 1234567 → +971501234567

    Input without any digits is returned trimmed and unchanged so the
    validator can reject it.
    """
    if phone is None:
        return ""
    trimmed = str(phone).strip()
    if not trimmed:
        return ""

    digits = re.sub(r"\D", "", trimmed)
    if not digits:
        return trimmed
    return f"+{digits[:E164_MAX_DIGITS]}"


def is_valid_phone(phone: str | None) -> bool:
    """Check that a phone number normalizes to 8-15 digits."""
    digits = re.sub(r"\D", "", normalize_phone(phone))
    return MIN_PHONE_DIGITS <= len(digits) <= E164_MAX_DIGITS
