#!/usr/bin/env python3
"""
Session authentication and authorization utilities for DoseCare
Bearer tokens are issued by the hosted auth provider; the provider user is
then mapped to a pharmacy or a client row.
"""

import logging
from typing import Optional, Tuple, Union
from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel

from dal.database import DatabaseManager, get_db_manager
from dal.models.client import Client
from dal.models.pharmacy import Pharmacy
from lib.exceptions import AuthProviderError
from lib.supabase_client import SupabaseClient, get_supabase_client

logger = logging.getLogger(__name__)

# Security scheme
security = HTTPBearer()

PHARMACY_ROLE = "pharmacy"
CLIENT_ROLE = "client"

class UserContext(BaseModel):
    """User context for authorization"""
    user_id: str
    role_name: str
    auth_id: str
    pharmacy_id: str
    name: str
    email: Optional[str] = None
    token: str

    @property
    def is_pharmacy(self) -> bool:
        return self.role_name == PHARMACY_ROLE

    @property
    def is_client(self) -> bool:
        return self.role_name == CLIENT_ROLE

def find_account(db_manager: DatabaseManager, auth_id: str) -> Tuple[Optional[str], Optional[Union[Pharmacy, Client]]]:
    """Resolve a provider user id to ("pharmacy", row) first, ("client", row) second"""
    pharmacy = db_manager.pharmacy_service.get_by_auth_id(auth_id)
    if pharmacy:
        return PHARMACY_ROLE, pharmacy
    client = db_manager.client_service.get_by_auth_id(auth_id)
    if client:
        return CLIENT_ROLE, client
    return None, None

def build_user_context(role: str, account: Union[Pharmacy, Client], auth_id: str, token: str) -> UserContext:
    return UserContext(
        user_id=account.id,
        role_name=role,
        auth_id=auth_id,
        pharmacy_id=account.id if role == PHARMACY_ROLE else account.pharmacy_id,
        name=account.name,
        email=account.email,
        token=token,
    )

async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security),
                           supabase: SupabaseClient = Depends(get_supabase_client),
                           db_manager: DatabaseManager = Depends(get_db_manager)) -> UserContext:
    """Get current authenticated pharmacy or client from the bearer session token"""
    try:
        # Extract token from Authorization header
        token = credentials.credentials

        if not token:
            raise HTTPException(status_code=401, detail="Token is required")

        provider_user = await supabase.get_user(token)
        if not provider_user or not provider_user.get("id"):
            raise HTTPException(status_code=401, detail="Invalid or expired session")

        role, account = find_account(db_manager, provider_user["id"])
        if not account:
            raise HTTPException(status_code=401, detail="No pharmacy or client linked to this account")

        return build_user_context(role, account, provider_user["id"], token)

    except HTTPException:
        raise
    except AuthProviderError as e:
        logger.error(f"Auth provider error in get_current_user: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        logger.error(f"Error in get_current_user: {e}")
        raise HTTPException(status_code=500, detail="Authentication error")

def require_pharmacy(current_user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require a pharmacy session"""
    if not current_user.is_pharmacy:
        raise HTTPException(status_code=403, detail="Pharmacy access required")
    return current_user

def require_client(current_user: UserContext = Depends(get_current_user)) -> UserContext:
    """Require a client session"""
    if not current_user.is_client:
        raise HTTPException(status_code=403, detail="Client access required")
    return current_user

def require_client_access(client: Client, current_user: UserContext) -> bool:
    """
    A pharmacy may act on its own clients; a client only on itself.
    Raises 403 otherwise.
    """
    if current_user.is_pharmacy and client.pharmacy_id == current_user.pharmacy_id:
        return True
    if current_user.is_client and client.id == current_user.user_id:
        return True
    raise HTTPException(status_code=403, detail="Access denied")
