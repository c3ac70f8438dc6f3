#!/usr/bin/env python3
"""
Client dashboard routes: today's doses, adherence, progress, calendar,
medications, PRN doses, vital signs, adverse events and banners
"""

import logging
from datetime import date, datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from auth.auth import UserContext, require_client
from dal.database import DatabaseManager, get_db_manager
from lib.exceptions import DoseCareError, to_http_exception
from lib.supabase_client import SupabaseClient, get_supabase_client
from services.adherence import calendar_month, daily_adherence, doses_for_day, progress_report
from services.remote_procedures import ClientProcedures
from services.vital_signs import history_view

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/client", tags=["client"])

# Request models
class MonitoringRequest(BaseModel):
    monitor_bp: Optional[bool] = None
    monitor_glucose: Optional[bool] = None

class DoseActionRequest(BaseModel):
    status: str

class ClientMedicationRequest(BaseModel):
    name: str
    dosage: str
    schedules: List[str]
    treatment_duration_days: int = 30
    start_date: Optional[date] = None
    notes: Optional[str] = None

class PrnDoseRequest(BaseModel):
    when: Optional[datetime] = None

class VitalSignRequest(BaseModel):
    measured_at: Optional[datetime] = None
    systolic: Optional[int] = None
    diastolic: Optional[int] = None
    glucose: Optional[int] = None
    notes: Optional[str] = None

def get_procedures(current_user: UserContext = Depends(require_client),
                   supabase: SupabaseClient = Depends(get_supabase_client)) -> ClientProcedures:
    """Remote procedures bound to the signed-in client's session"""
    return ClientProcedures(supabase, current_user.user_id, current_user.token)

@router.get("/monitoring")
async def get_monitoring(current_user: UserContext = Depends(require_client),
                         db_manager: DatabaseManager = Depends(get_db_manager)):
    client = db_manager.client_service.get_client(current_user.user_id)
    return {"monitor_bp": bool(client.monitor_bp), "monitor_glucose": bool(client.monitor_glucose)}

@router.put("/monitoring")
async def set_monitoring(request: MonitoringRequest,
                         current_user: UserContext = Depends(require_client),
                         db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        client = db_manager.client_service.get_client(current_user.user_id)
        client = db_manager.client_service.set_monitoring(client, request.monitor_bp, request.monitor_glucose)
        return {"monitor_bp": bool(client.monitor_bp), "monitor_glucose": bool(client.monitor_glucose)}
    except DoseCareError as e:
        raise to_http_exception(e)

@router.get("/dashboard")
async def dashboard(procedures: ClientProcedures = Depends(get_procedures)):
    """Refresh missed doses, then return medications, today's doses and the adherence card"""
    try:
        await procedures.update_missed_doses()
        medications = await procedures.get_medications()
        records = await procedures.get_dose_records()
        today = date.today()
        return {
            "medications": medications,
            "today_doses": doses_for_day(records, today),
            "adherence": daily_adherence(records, today),
        }
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to load dashboard: {e}")
        raise HTTPException(status_code=500, detail="Failed to load dashboard")

@router.get("/medications")
async def list_medications(procedures: ClientProcedures = Depends(get_procedures)):
    try:
        return {"medications": await procedures.get_medications()}
    except DoseCareError as e:
        raise to_http_exception(e)

@router.get("/doses")
async def list_doses(procedures: ClientProcedures = Depends(get_procedures)):
    try:
        return {"doses": await procedures.get_dose_records()}
    except DoseCareError as e:
        raise to_http_exception(e)

@router.put("/doses/{dose_id}/status")
async def mark_dose(dose_id: str, request: DoseActionRequest,
                    procedures: ClientProcedures = Depends(get_procedures)):
    """Mark one of the client's doses taken or skipped"""
    try:
        result = await procedures.update_dose_status(dose_id, request.status)
        return {"success": True, "result": result}
    except DoseCareError as e:
        raise to_http_exception(e)

@router.post("/medications", status_code=201)
async def add_medication(request: ClientMedicationRequest,
                         current_user: UserContext = Depends(require_client),
                         db_manager: DatabaseManager = Depends(get_db_manager)):
    """Add a medication and generate its pending doses"""
    try:
        medication = db_manager.medications_service.add_for_client(
            pharmacy_id=current_user.pharmacy_id,
            client_id=current_user.user_id,
            name=request.name,
            dosage=request.dosage,
            schedules=request.schedules,
            treatment_duration_days=request.treatment_duration_days,
            start_date=request.start_date,
            notes=request.notes,
        )
        return {"medication": medication.to_dict()}
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to add medication: {e}")
        raise HTTPException(status_code=500, detail="Failed to add medication")

@router.delete("/medications/{medication_id}")
async def delete_medication(medication_id: str, procedures: ClientProcedures = Depends(get_procedures)):
    try:
        deleted = await procedures.delete_medication(medication_id)
        if not deleted:
            raise HTTPException(status_code=404, detail="Medication not found")
        return {"success": True}
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)

@router.post("/medications/{medication_id}/prn", status_code=201)
async def add_prn_dose(medication_id: str, request: PrnDoseRequest,
                       current_user: UserContext = Depends(require_client),
                       db_manager: DatabaseManager = Depends(get_db_manager)):
    """Log an as-needed dose as taken"""
    try:
        medication = db_manager.medications_service.get_medication(medication_id)
        if medication.client_id != current_user.user_id:
            raise HTTPException(status_code=403, detail="Access denied")
        dose = db_manager.dose_records_service.add_prn_dose(medication, request.when)
        return {"dose": dose.to_dict()}
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)

@router.get("/adherence")
async def adherence(procedures: ClientProcedures = Depends(get_procedures)):
    try:
        return daily_adherence(await procedures.get_dose_records())
    except DoseCareError as e:
        raise to_http_exception(e)

@router.get("/progress")
async def progress(period: str = Query("daily", pattern="^(daily|weekly|monthly)$"),
                   ref_date: Optional[date] = Query(None, alias="date"),
                   procedures: ClientProcedures = Depends(get_procedures)):
    """Totals and per-medication adherence for a day, week or month"""
    try:
        medications = await procedures.get_medications()
        records = await procedures.get_dose_records()
        return progress_report(records, medications, period, ref_date)
    except DoseCareError as e:
        raise to_http_exception(e)

@router.get("/calendar")
async def care_calendar(year: Optional[int] = Query(None, ge=1970, le=9999),
                        month: Optional[int] = Query(None, ge=1, le=12),
                        day: Optional[int] = Query(None, ge=1, le=31),
                        procedures: ClientProcedures = Depends(get_procedures)):
    try:
        today = date.today()
        records = await procedures.get_dose_records()
        return calendar_month(records, year or today.year, month or today.month, day)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except DoseCareError as e:
        raise to_http_exception(e)

@router.post("/vital-signs", status_code=201)
async def add_vital_sign(request: VitalSignRequest,
                         current_user: UserContext = Depends(require_client),
                         db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        client = db_manager.client_service.get_client(current_user.user_id)
        vital_sign = db_manager.vital_signs_service.add_vital_sign(
            client,
            measured_at=request.measured_at,
            systolic=request.systolic,
            diastolic=request.diastolic,
            glucose=request.glucose,
            notes=request.notes,
        )
        return {"vital_sign": vital_sign.to_dict()}
    except DoseCareError as e:
        raise to_http_exception(e)

@router.get("/vital-signs")
async def vital_sign_history(kind: str = Query("all", alias="filter", pattern="^(all|bp|glucose)$"),
                             time_range: str = Query("all", alias="range", pattern="^(all|week|month)$"),
                             current_user: UserContext = Depends(require_client),
                             db_manager: DatabaseManager = Depends(get_db_manager)):
    """Latest readings with classification and averages"""
    signs = [s.to_dict() for s in db_manager.vital_signs_service.get_history(current_user.user_id)]
    return history_view(signs, kind, time_range)

@router.delete("/vital-signs/{vital_sign_id}")
async def delete_vital_sign(vital_sign_id: str,
                            current_user: UserContext = Depends(require_client),
                            db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        vital_sign = db_manager.vital_signs_service.get_vital_sign(vital_sign_id)
        if vital_sign.client_id != current_user.user_id:
            raise HTTPException(status_code=403, detail="Access denied")
        db_manager.vital_signs_service.delete_vital_sign(vital_sign)
        return {"success": True}
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)

@router.get("/adverse-events")
async def adverse_events(current_user: UserContext = Depends(require_client),
                         db_manager: DatabaseManager = Depends(get_db_manager)):
    return db_manager.events_service.get_client_events(current_user.user_id)

@router.get("/banners")
async def banners(current_user: UserContext = Depends(require_client),
                  db_manager: DatabaseManager = Depends(get_db_manager)):
    """Active ads of the client's pharmacy"""
    return {"banners": db_manager.ads_service.get_banners(current_user.pharmacy_id)}
