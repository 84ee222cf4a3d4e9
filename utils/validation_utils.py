"""
utils/validation_utils.py

Purpose: Input validation

- Phone number normalization (regional mobile and generic E.164-like rules)
- SMS body and sender label length checks
"""

import re
from typing import Literal

from app.core.exceptions import InvalidFormatError, MessageTooLongError, SenderTooLongError

PhoneValidationMode = Literal["regional", "generic"]

# Loose E.164: optional '+', 2-15 digits, no leading zero
GENERIC_PHONE_PATTERN = re.compile(r"^\+?[1-9]\d{1,14}$")

_SEPARATORS = re.compile(r"[\s\-]")


def strip_phone_separators(phone: str) -> str:
    """
    Removes whitespace and hyphens from a phone number.

    Args:
        phone: Raw phone string ("0917 123-4567")

    Returns:
        Digits with optional leading '+'
    """
    return _SEPARATORS.sub("", phone)


def normalize_phone_number(
    phone: str,
    mode: PhoneValidationMode = "regional",
    country_code: str = "63",
    mobile_prefix: str = "9"
) -> str:
    """
    Validates a destination number and returns its canonical form.

    Regional mode accepts a local mobile number with trunk prefix
    (09171234567) or the same number in international form
    (+639171234567), and always returns the international form.

    Generic mode accepts any E.164-like number and returns it with
    separators removed.

    Args:
        phone: Raw destination number
        mode: "regional" or "generic"
        country_code: Country calling code for regional numbers
        mobile_prefix: Leading digit(s) of regional mobile numbers

    Returns:
        Normalized phone number

    Raises:
        InvalidFormatError: if the number does not match the rule
    """
    if not phone:
        raise InvalidFormatError()

    phone = strip_phone_separators(phone)

    if mode == "generic":
        if not GENERIC_PHONE_PATTERN.match(phone):
            raise InvalidFormatError()
        return phone

    prefix = re.escape(mobile_prefix)
    local_match = re.fullmatch(rf"0({prefix}\d{{9}})", phone)
    if local_match:
        return f"+{country_code}{local_match.group(1)}"

    if re.fullmatch(rf"\+{re.escape(country_code)}{prefix}\d{{9}}", phone):
        return phone

    raise InvalidFormatError(
        f"Invalid phone number format. Use 0{mobile_prefix}XXXXXXXXX or +{country_code}{mobile_prefix}XXXXXXXXX"
    )


def validate_message_body(text: str, max_length: int = 160) -> str:
    """
    Ensures an SMS body fits in a single message.

    Raises:
        MessageTooLongError: if text exceeds max_length characters
    """
    if len(text) > max_length:
        raise MessageTooLongError(max_length)
    return text


def validate_sender_label(sender: str, max_length: int = 11) -> str:
    """
    Ensures a sender label fits the alphanumeric sender ID limit.

    Raises:
        SenderTooLongError: if sender exceeds max_length characters
    """
    if len(sender) > max_length:
        raise SenderTooLongError(max_length)
    return sender
