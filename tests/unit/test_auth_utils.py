"""Unit tests for phone/email identifier helpers and WhatsApp links."""

import pytest

from lib.auth_utils import (
    detect_identifier_type,
    format_identifier,
    format_phone,
    generate_email_from_phone,
    get_auth_email,
    is_valid_email,
    is_valid_phone,
    normalize_phone_digits,
)
from lib.whatsapp_utils import build_whatsapp_link, restock_message


@pytest.mark.parametrize("phone, expected", [
    ("(11) 99999-9999", True),
    ("11999999999", True),
    ("+55 11 99999-9999", True),
    ("01999999999", False),
    ("1199999999", False),
    ("5411999999999", False),
    ("", False),
])
def test_is_valid_phone(phone, expected):
    """Test national and country-code phone formats."""
    assert is_valid_phone(phone) is expected


def test_format_phone():
    """Test E.164-like formatting."""
    assert format_phone("(11) 99999-9999") == "+5511999999999"
    assert format_phone("5511999999999") == "+5511999999999"
    assert format_phone("12345") == "12345"


def test_phone_login_maps_to_synthetic_email():
    """Test both phone notations produce the same provider email."""
    # Given: the same number written two ways
    national = "(11) 99999-0000"
    international = "+55 11 99999-0000"

    # When / Then: both map onto one account
    assert generate_email_from_phone(national) == "phone_5511999990000@system.local"
    assert get_auth_email(international) == get_auth_email(national)


def test_email_identifier_is_unchanged():
    """Test emails pass through get_auth_email."""
    assert get_auth_email("owner@farmacia.com") == "owner@farmacia.com"
    assert detect_identifier_type("owner@farmacia.com") == "email"
    assert detect_identifier_type("11999990000") == "phone"


def test_is_valid_email():
    assert is_valid_email("a@b.co")
    assert not is_valid_email("a@b")
    assert not is_valid_email("a b@c.com")
    assert not is_valid_email("")


def test_format_identifier():
    """Test display formats for phones; emails untouched."""
    assert format_identifier("11999990000") == "(11) 99999-0000"
    assert format_identifier("5511999990000") == "+55 (11) 99999-0000"
    assert format_identifier("x@y.com") == "x@y.com"


def test_normalize_phone_digits_strips_country_code():
    assert normalize_phone_digits("+55 (11) 99999-0000") == "11999990000"
    assert normalize_phone_digits("(11) 99999-0000") == "11999990000"


def test_whatsapp_link_adds_country_code_and_encodes_message():
    """Test wa.me link building."""
    # When: building a link for a national number
    link = build_whatsapp_link("(11) 98888-7777", "Olá, tudo bem?")

    # Then: 55 prefix is added and the text is percent-encoded
    assert link.startswith("https://wa.me/5511988887777?text=")
    assert "Ol%C3%A1%2C%20tudo%20bem%3F" in link


def test_whatsapp_link_keeps_existing_country_code():
    assert build_whatsapp_link("5511988887777", "hi") == "https://wa.me/5511988887777?text=hi"


def test_whatsapp_link_without_phone():
    assert build_whatsapp_link(None) is None
    assert build_whatsapp_link("") is None


def test_restock_message_mentions_client_and_medication():
    message = restock_message("Maria", "Losartana")
    assert "Maria" in message
    assert "Losartana" in message
