#!/usr/bin/env python3
"""
Session routes for DoseCare: pharmacy registration, pharmacy and client
sign-in, sign-out and session check
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel

from auth.auth import (
    CLIENT_ROLE,
    PHARMACY_ROLE,
    UserContext,
    find_account,
    get_current_user,
    security,
)
from dal.database import DatabaseManager, get_db_manager
from lib.auth_utils import detect_identifier_type, get_auth_email, is_valid_email
from lib.exceptions import DoseCareError, to_http_exception
from lib.supabase_client import SupabaseClient, get_supabase_client
from services.forms import MIN_PASSWORD_LENGTH

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["authentication"])

class LoginRequest(BaseModel):
    identifier: str
    password: str

class RegisterPharmacyRequest(BaseModel):
    name: str
    identifier: str
    password: str
    phone: Optional[str] = None
    address: Optional[str] = None

def _session_payload(session: dict) -> dict:
    return {
        "access_token": session.get("access_token"),
        "refresh_token": session.get("refresh_token"),
        "expires_in": session.get("expires_in"),
        "token_type": session.get("token_type", "bearer"),
    }

async def _login(role: str, request: LoginRequest, supabase: SupabaseClient,
                 db_manager: DatabaseManager) -> dict:
    session = await supabase.sign_in_with_password(get_auth_email(request.identifier.strip()),
                                                   request.password)
    auth_id = (session.get("user") or {}).get("id")
    found_role, account = find_account(db_manager, auth_id) if auth_id else (None, None)
    if found_role != role:
        missing = "Pharmacy not found" if role == PHARMACY_ROLE else "Client not found"
        raise HTTPException(status_code=404, detail=missing)

    logger.info(f"🔓 {role} signed in: {account.id}")
    return {"role": role, "user": account.to_dict(), "session": _session_payload(session)}

@router.post("/pharmacy/register")
async def register_pharmacy(request: RegisterPharmacyRequest,
                            supabase: SupabaseClient = Depends(get_supabase_client),
                            db_manager: DatabaseManager = Depends(get_db_manager)):
    """Create the provider user and its pharmacy row, then sign in"""
    try:
        identifier = request.identifier.strip()
        if not request.name.strip():
            raise HTTPException(status_code=422, detail="Name is required")
        if len(request.password) < MIN_PASSWORD_LENGTH:
            raise HTTPException(status_code=422, detail="Password must have at least 6 characters")

        is_phone = detect_identifier_type(identifier) == "phone"
        if not is_phone and not is_valid_email(identifier):
            raise HTTPException(status_code=422, detail="Enter a valid email or phone")

        auth_email = get_auth_email(identifier)
        signup = await supabase.sign_up(auth_email, request.password)
        auth_user = signup.get("user") or {}
        if not auth_user.get("id"):
            raise HTTPException(status_code=502, detail="Auth provider returned no user")

        pharmacy = db_manager.pharmacy_service.create_pharmacy(
            auth_id=auth_user["id"],
            name=request.name,
            email=None if is_phone else identifier,
            phone=request.phone or (identifier if is_phone else None),
            address=request.address,
        )
        session = await supabase.sign_in_with_password(auth_email, request.password)
        return {"role": PHARMACY_ROLE, "user": pharmacy.to_dict(), "session": _session_payload(session)}

    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Pharmacy registration failed: {e}")
        raise HTTPException(status_code=500, detail="Registration failed")

@router.post("/pharmacy/login")
async def login_pharmacy(request: LoginRequest,
                         supabase: SupabaseClient = Depends(get_supabase_client),
                         db_manager: DatabaseManager = Depends(get_db_manager)):
    """Sign a pharmacy in with email or phone"""
    try:
        return await _login(PHARMACY_ROLE, request, supabase, db_manager)
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Pharmacy login failed: {e}")
        raise HTTPException(status_code=500, detail="Login failed")

@router.post("/client/login")
async def login_client(request: LoginRequest,
                       supabase: SupabaseClient = Depends(get_supabase_client),
                       db_manager: DatabaseManager = Depends(get_db_manager)):
    """Sign a client in with phone (or email)"""
    try:
        return await _login(CLIENT_ROLE, request, supabase, db_manager)
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Client login failed: {e}")
        raise HTTPException(status_code=500, detail="Login failed")

@router.post("/logout")
async def logout(credentials: HTTPAuthorizationCredentials = Depends(security),
                 supabase: SupabaseClient = Depends(get_supabase_client)):
    """Revoke the provider session"""
    try:
        await supabase.sign_out(credentials.credentials)
        return {"success": True}
    except DoseCareError as e:
        raise to_http_exception(e)

@router.get("/me")
async def check_auth(current_user: UserContext = Depends(get_current_user)):
    """Get current pharmacy or client information"""
    return {
        "user_id": current_user.user_id,
        "role_name": current_user.role_name,
        "pharmacy_id": current_user.pharmacy_id,
        "name": current_user.name,
        "email": current_user.email,
    }

@router.get("/health")
async def health_check():
    """Health check endpoint for auth service"""
    return {"status": "healthy", "service": "auth"}
