#!/usr/bin/env python3
"""
Phone based password reset function
"""

import json
import logging
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from dal.database import DatabaseManager, get_db_manager
from lib.exceptions import DoseCareError
from lib.supabase_client import SupabaseClient, get_supabase_client
from services.password_reset_service import reset_client_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions", tags=["functions"])

@router.get("/update-password")
async def update_password_ping():
    return {"ok": True}

@router.post("/update-password")
async def update_password(request: Request,
                          supabase: SupabaseClient = Depends(get_supabase_client),
                          db_manager: DatabaseManager = Depends(get_db_manager)):
    """Set a client's password from its phone number"""
    logger.info("🔐 POST /functions/update-password")
    raw = await request.body()
    try:
        body = json.loads(raw or b"")
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    try:
        return await reset_client_password(db_manager.client_service, supabase, body)
    except DoseCareError as e:
        logger.error(f"❌ Password update failed ({e.status_code}): {e.message[:120]}")
        return JSONResponse(status_code=e.status_code, content={"error": e.message})
    except Exception as e:
        logger.error(f"❌ Password update crashed: {e}")
        return JSONResponse(status_code=500, content={"error": "Password update failed"})
