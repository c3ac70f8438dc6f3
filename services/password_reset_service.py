#!/usr/bin/env python3
"""
Phone based password reset.
Looks the client up by phone and sets the new password through the auth
provider's admin API using the service role key.
"""

import logging
from typing import Any, Dict, Optional

from lib.auth_utils import only_digits
from lib.exceptions import AuthProviderError, DoseCareError, NotFoundError
from lib.supabase_client import SupabaseClient
from dal.services.client_service import ClientService
from services.forms import MIN_PASSWORD_LENGTH

logger = logging.getLogger(__name__)


def is_valid_reset_phone(phone: str) -> bool:
    """Exactly 11 national digits, first one 1-9"""
    digits = only_digits(phone or "")
    return len(digits) == 11 and digits[0] != "0"


def validate_reset_request(body: Any) -> Dict[str, str]:
    """Return {"phone": <11 digits>, "password": <trimmed>} or raise a 400 error"""
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise DoseCareError("Invalid JSON body")
    phone = str(body.get("phone") or "").strip()
    new_password = str(body.get("newPassword") or "").strip()
    logger.info(f"🔐 Reset request: phone_length={len(phone)} has_password={bool(new_password)}")

    if not phone or not is_valid_reset_phone(phone):
        raise DoseCareError("Invalid phone")
    if len(new_password) < MIN_PASSWORD_LENGTH:
        raise DoseCareError("Password too short")
    return {"phone": only_digits(phone)[:11], "password": new_password}


async def reset_client_password(client_service: ClientService, supabase: SupabaseClient,
                                body: Optional[Any]) -> Dict[str, bool]:
    request = validate_reset_request(body)

    if not supabase.service_key:
        raise AuthProviderError("Server misconfigured", 500)

    client = client_service.find_by_phone(request["phone"])
    logger.info(f"🔎 Client lookup: found={client is not None} "
                f"auth_id_present={bool(client and client.auth_id)}")
    if client is None:
        raise NotFoundError("Client not found")
    if not client.auth_id:
        raise NotFoundError("Client has no auth_id")

    await supabase.admin_update_user(client.auth_id, {"password": request["password"]})
    logger.info(f"✅ Password updated for client {client.id}")
    return {"ok": True}
