#!/usr/bin/env python3
"""
Phone/email identifier helpers for authentication.

The auth provider only understands email + password, so clients that sign in
with a Brazilian mobile number are given a synthetic email derived from it.
"""

import re

PHONE_EMAIL_DOMAIN = "system.local"

_NON_DIGITS = re.compile(r"\D")
_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def only_digits(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def is_valid_phone(phone: str) -> bool:
    """
    Check for a valid Brazilian mobile number.
    Accepts (11) 99999-9999, 11999999999 and +5511999999999.
    """
    if not phone:
        return False

    clean_phone = only_digits(phone)

    # 11 digits, area code cannot start with 0
    if len(clean_phone) == 11 and clean_phone[0] in "123456789":
        return True

    # With country code
    if len(clean_phone) == 13 and clean_phone.startswith("55"):
        return True

    return False


def format_phone(phone: str) -> str:
    """Format the phone as +5511999999999"""
    clean_phone = only_digits(phone)

    if len(clean_phone) == 13 and clean_phone.startswith("55"):
        return "+" + clean_phone

    if len(clean_phone) == 11:
        return "+55" + clean_phone

    return clean_phone


def normalize_phone_digits(phone: str) -> str:
    """Digits as stored on the client row: national number without the 55 prefix"""
    digits = only_digits(phone)
    if digits.startswith("55") and len(digits) == 13:
        return digits[2:]
    return digits


def generate_email_from_phone(phone: str) -> str:
    """Synthetic provider email: phone_{digits}@system.local"""
    formatted_phone = format_phone(phone)
    return f"phone_{formatted_phone.replace('+', '', 1)}@{PHONE_EMAIL_DOMAIN}"


def get_auth_email(identifier: str) -> str:
    """Email to hand to the auth provider for a phone-or-email identifier"""
    if is_valid_phone(identifier):
        return generate_email_from_phone(identifier)
    return identifier


def is_valid_email(email: str) -> bool:
    return bool(email) and bool(_EMAIL_RE.match(email))


def detect_identifier_type(identifier: str) -> str:
    """Return "phone" or "email"; anything that is not a phone is treated as email"""
    if is_valid_phone(identifier):
        return "phone"
    return "email"


def format_identifier(identifier: str) -> str:
    """
    Display form of an identifier.
    Phones: (11) 99999-9999 or +55 (11) 99999-9999. Emails are unchanged.
    """
    if is_valid_phone(identifier):
        clean_phone = only_digits(identifier)

        if len(clean_phone) == 11:
            return f"({clean_phone[:2]}) {clean_phone[2:7]}-{clean_phone[7:]}"

        if len(clean_phone) == 13 and clean_phone.startswith("55"):
            local_phone = clean_phone[2:]
            return f"+55 ({local_phone[:2]}) {local_phone[2:7]}-{local_phone[7:]}"

    return identifier
