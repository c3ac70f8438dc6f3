"""
WhatsApp click-to-chat links for pharmacy ads and restock reminders
"""

from typing import Optional
from urllib.parse import quote

from lib.auth_utils import only_digits

DEFAULT_AD_MESSAGE = "Hello! I saw your ad in the app and would like more information."


def build_whatsapp_link(phone: Optional[str], message: Optional[str] = None) -> Optional[str]:
    """Return a wa.me link for the phone, or None when there is no phone"""
    if not phone:
        return None
    digits = only_digits(phone)
    if not digits.startswith("55") and len(digits) >= 10:
        digits = f"55{digits}"
    text = quote(message or DEFAULT_AD_MESSAGE, safe="-_.!~*'()")
    return f"https://wa.me/{digits}?text={text}"


def restock_message(client_name: str, medication_name: str) -> str:
    return (
        f"Hello {client_name}, your medication {medication_name} is running low. "
        "Can we help you restock?"
    )
