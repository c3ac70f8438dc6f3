#!/usr/bin/env python3
"""
Pharmacy dashboard routes: client roster and registration, client details,
dose overrides, prescriptions, ads manager, overview and reports
"""

import os
import logging
from datetime import date, datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile
from pydantic import BaseModel

from auth.auth import UserContext, require_client_access, require_pharmacy
from dal.database import DatabaseManager, get_db_manager
from dal.models.client import Client
from dal.services.ads_service import banner_object_path
from lib.auth_utils import get_auth_email, is_valid_email, normalize_phone_digits
from lib.exceptions import DoseCareError, FormValidationError, to_http_exception
from lib.supabase_client import SupabaseClient, get_supabase_client
from services.adherence import doses_for_day
from services.forms import validate_client_form
from services.reports import pharmacy_overview, pharmacy_reports

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/pharmacy", tags=["pharmacy"])

BANNERS_BUCKET = os.getenv("SUPABASE_BANNERS_BUCKET", "banners")

# Request models
class ClientCreateRequest(BaseModel):
    name: str
    phone: str
    password: str
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    monitor_bp: bool = False
    monitor_glucose: bool = False

class ClientUpdateRequest(BaseModel):
    name: str
    phone: str
    email: Optional[str] = None
    date_of_birth: Optional[date] = None
    monitor_bp: Optional[bool] = None
    monitor_glucose: Optional[bool] = None

class DoseStatusRequest(BaseModel):
    status: str

class PrescriptionRequest(BaseModel):
    client_id: Optional[str] = None
    name: str
    dosage: str
    unit: str = "mg"
    schedules: List[str] = []
    treatment_duration_days: Optional[int] = 30
    start_date: Optional[date] = None
    notes: Optional[str] = None
    recurrence_type: str = "continuous"
    custom_dates: List[str] = []

def get_owned_client(db_manager: DatabaseManager, client_id: str, current_user: UserContext) -> Client:
    """Load a client and check it belongs to the signed-in pharmacy"""
    client = db_manager.client_service.get_client(client_id)
    require_client_access(client, current_user)
    return client

@router.get("/clients")
async def list_clients(current_user: UserContext = Depends(require_pharmacy),
                       db_manager: DatabaseManager = Depends(get_db_manager)):
    """Clients, newest first, with medication count and 7-day adherence"""
    try:
        return {"clients": db_manager.client_service.get_roster(current_user.pharmacy_id)}
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"❌ Failed to list clients: {e}")
        raise HTTPException(status_code=500, detail="Failed to list clients")

@router.post("/clients", status_code=201)
async def add_client(request: ClientCreateRequest,
                     current_user: UserContext = Depends(require_pharmacy),
                     supabase: SupabaseClient = Depends(get_supabase_client),
                     db_manager: DatabaseManager = Depends(get_db_manager)):
    """Register a client: provider account with the phone login, then the client row"""
    try:
        errors = validate_client_form(request.name, request.phone, request.email,
                                      request.password, require_password=True)
        if errors:
            raise FormValidationError(errors)

        phone_digits = normalize_phone_digits(request.phone)
        if db_manager.client_service.find_by_phone(phone_digits):
            raise HTTPException(status_code=409, detail="A client with this phone is already registered")

        logger.info(f"📝 Registering client for pharmacy {current_user.pharmacy_id}")
        signup = await supabase.sign_up(get_auth_email(request.phone), request.password)
        auth_user = signup.get("user") or {}
        if not auth_user.get("id"):
            raise HTTPException(status_code=502, detail="Auth provider returned no user")

        client = db_manager.client_service.create_client(
            auth_id=auth_user["id"],
            pharmacy_id=current_user.pharmacy_id,
            name=request.name,
            phone_digits=phone_digits,
            email=request.email,
            date_of_birth=request.date_of_birth,
            monitor_bp=request.monitor_bp,
            monitor_glucose=request.monitor_glucose,
        )
        return {"client": client.to_dict()}

    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to add client: {e}")
        raise HTTPException(status_code=500, detail="Failed to add client")

@router.put("/clients/{client_id}")
async def edit_client(client_id: str, request: ClientUpdateRequest,
                      current_user: UserContext = Depends(require_pharmacy),
                      db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        client = get_owned_client(db_manager, client_id, current_user)
        errors = validate_client_form(request.name, request.phone, request.email)
        if errors:
            raise FormValidationError(errors)

        client = db_manager.client_service.update_client(
            client,
            name=request.name,
            phone_digits=normalize_phone_digits(request.phone),
            email=request.email,
            date_of_birth=request.date_of_birth,
            monitor_bp=request.monitor_bp,
            monitor_glucose=request.monitor_glucose,
        )
        return {"client": client.to_dict()}

    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to edit client {client_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to edit client")

@router.post("/clients/{client_id}/password-recovery")
async def send_password_recovery(client_id: str,
                                 current_user: UserContext = Depends(require_pharmacy),
                                 supabase: SupabaseClient = Depends(get_supabase_client),
                                 db_manager: DatabaseManager = Depends(get_db_manager)):
    """Email the client a password recovery link"""
    try:
        client = get_owned_client(db_manager, client_id, current_user)
        if not client.email or not is_valid_email(client.email):
            raise HTTPException(status_code=400, detail="Client has no valid email")
        await supabase.reset_password_for_email(client.email)
        logger.info(f"📧 Recovery email sent for client {client.id}")
        return {"success": True}

    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to send recovery email: {e}")
        raise HTTPException(status_code=500, detail="Failed to send recovery email")

@router.get("/clients/{client_id}")
async def client_details(client_id: str,
                         current_user: UserContext = Depends(require_pharmacy),
                         db_manager: DatabaseManager = Depends(get_db_manager)):
    """Medications, the last 7 days of doses and today's doses"""
    try:
        client = get_owned_client(db_manager, client_id, current_user)
        medications = db_manager.medications_service.get_medications(client.id)
        doses = [d.to_dict() for d in db_manager.dose_records_service.get_recent_doses(client.id)]
        return {
            "client": client.to_dict(),
            "medications": [m.to_dict() for m in medications],
            "doses": doses,
            "today_doses": doses_for_day(doses, date.today()),
        }

    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to load client {client_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load client")

@router.put("/doses/{dose_id}/status")
async def override_dose_status(dose_id: str, request: DoseStatusRequest,
                               current_user: UserContext = Depends(require_pharmacy),
                               db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        dose = db_manager.dose_records_service.get_dose(dose_id)
        get_owned_client(db_manager, dose.client_id, current_user)
        dose = db_manager.dose_records_service.set_status(dose, request.status)
        return {"dose": dose.to_dict()}

    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to update dose {dose_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update dose")

@router.get("/clients/{client_id}/events")
async def client_events(client_id: str,
                        current_user: UserContext = Depends(require_pharmacy),
                        db_manager: DatabaseManager = Depends(get_db_manager)):
    """Adverse events and dose corrections of a client"""
    try:
        client = get_owned_client(db_manager, client_id, current_user)
        return db_manager.events_service.get_client_events(client.id)

    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to load events for {client_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to load events")

@router.post("/medications", status_code=201)
async def prescribe_medication(request: PrescriptionRequest,
                               current_user: UserContext = Depends(require_pharmacy),
                               db_manager: DatabaseManager = Depends(get_db_manager)):
    """Prescribe a medication; dose records are generated by the database"""
    try:
        if request.client_id:
            get_owned_client(db_manager, request.client_id, current_user)
        medication = db_manager.medications_service.prescribe(
            pharmacy_id=current_user.pharmacy_id,
            client_id=request.client_id,
            name=request.name,
            dosage=request.dosage,
            unit=request.unit,
            schedules=request.schedules,
            treatment_duration_days=request.treatment_duration_days,
            start_date=request.start_date,
            notes=request.notes,
            recurrence_type=request.recurrence_type,
            custom_dates=request.custom_dates,
        )
        return {"medication": medication.to_dict()}

    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to prescribe medication: {e}")
        raise HTTPException(status_code=500, detail="Failed to prescribe medication")

@router.get("/ads")
async def list_ads(current_user: UserContext = Depends(require_pharmacy),
                   db_manager: DatabaseManager = Depends(get_db_manager)):
    ads = db_manager.ads_service.list_ads(current_user.pharmacy_id)
    return {"ads": [ad.to_dict() for ad in ads]}

@router.post("/ads", status_code=201)
async def create_ad(image: Optional[UploadFile] = File(None),
                    whatsapp_phone: Optional[str] = Form(None),
                    whatsapp_message: Optional[str] = Form(None),
                    current_user: UserContext = Depends(require_pharmacy),
                    supabase: SupabaseClient = Depends(get_supabase_client),
                    db_manager: DatabaseManager = Depends(get_db_manager)):
    """Upload the banner image to storage and create the ad"""
    try:
        if image is None or not image.filename:
            raise HTTPException(status_code=400, detail="Select an image for the ad")

        content = await image.read()
        path = banner_object_path(current_user.pharmacy_id, image.filename)
        await supabase.upload_file(BANNERS_BUCKET, path, content,
                                   image.content_type or "application/octet-stream")
        image_url = supabase.get_public_url(BANNERS_BUCKET, path)

        ad = db_manager.ads_service.create_ad(current_user.pharmacy_id, image_url,
                                              whatsapp_phone, whatsapp_message)
        return {"ad": ad.to_dict()}

    except HTTPException:
        raise
    except DoseCareError as e:
        logger.error(f"❌ Banner upload failed: {e.message}")
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to create ad: {e}")
        raise HTTPException(status_code=500, detail="Failed to create ad")

@router.patch("/ads/{ad_id}/toggle")
async def toggle_ad(ad_id: str,
                    current_user: UserContext = Depends(require_pharmacy),
                    db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        ad = db_manager.ads_service.get_ad(ad_id)
        if ad.pharmacy_id != current_user.pharmacy_id:
            raise HTTPException(status_code=403, detail="Access denied")
        return {"ad": db_manager.ads_service.toggle_active(ad).to_dict()}
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)

@router.delete("/ads/{ad_id}")
async def delete_ad(ad_id: str,
                    current_user: UserContext = Depends(require_pharmacy),
                    db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        ad = db_manager.ads_service.get_ad(ad_id)
        if ad.pharmacy_id != current_user.pharmacy_id:
            raise HTTPException(status_code=403, detail="Access denied")
        db_manager.ads_service.delete_ad(ad)
        return {"success": True}
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)

@router.get("/overview")
async def overview(current_user: UserContext = Depends(require_pharmacy),
                   db_manager: DatabaseManager = Depends(get_db_manager)):
    """Top registered / used medications and running-out stock"""
    try:
        pharmacy_id = current_user.pharmacy_id
        medications = [m.to_dict() for m in db_manager.medications_service.get_pharmacy_medications(pharmacy_id)]
        taken = [d.to_dict() for d in db_manager.dose_records_service.get_pharmacy_doses(pharmacy_id, "taken")]
        clients = [c.to_dict() for c in db_manager.client_service.list_clients(pharmacy_id)]
        return pharmacy_overview(medications, taken, clients)
    except Exception as e:
        logger.error(f"❌ Failed to build overview: {e}")
        raise HTTPException(status_code=500, detail="Failed to build overview")

@router.get("/reports")
async def reports(range_key: str = Query("30d", alias="range", pattern="^(7d|30d)$"),
                  current_user: UserContext = Depends(require_pharmacy),
                  db_manager: DatabaseManager = Depends(get_db_manager)):
    """KPIs over the last 7 or 30 days"""
    try:
        pharmacy_id = current_user.pharmacy_id
        clients = [c.to_dict() for c in db_manager.client_service.list_clients(pharmacy_id)]
        medications = [m.to_dict() for m in db_manager.medications_service.get_pharmacy_medications(pharmacy_id)]
        doses = [d.to_dict() for d in db_manager.dose_records_service.get_pharmacy_doses(pharmacy_id)]
        return pharmacy_reports(clients, medications, doses, range_key, datetime.now())
    except Exception as e:
        logger.error(f"❌ Failed to build reports: {e}")
        raise HTTPException(status_code=500, detail="Failed to build reports")
