#!/usr/bin/env python3
"""
Routes shared by pharmacies and clients: edit / deactivate medication,
report an issue on a dose and dose details
"""

import logging
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from auth.auth import UserContext, get_current_user, require_client_access
from dal.database import DatabaseManager, get_db_manager
from lib.exceptions import DoseCareError, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/care", tags=["care"])

class MedicationUpdateRequest(BaseModel):
    name: str
    dosage: str
    schedules: List[str]
    unit: Optional[str] = None
    notes: Optional[str] = None

class IssueReportRequest(BaseModel):
    issue_type: str
    description: str = ""
    correction_type: Optional[str] = None
    event_type: Optional[str] = None
    severity: Optional[str] = None

def _authorize(db_manager: DatabaseManager, client_id: str, current_user: UserContext) -> None:
    client = db_manager.client_service.get_client(client_id)
    require_client_access(client, current_user)

@router.put("/medications/{medication_id}")
async def edit_medication(medication_id: str, request: MedicationUpdateRequest,
                          current_user: UserContext = Depends(get_current_user),
                          db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        medication = db_manager.medications_service.get_medication(medication_id)
        _authorize(db_manager, medication.client_id, current_user)
        medication = db_manager.medications_service.update_medication(
            medication,
            name=request.name,
            dosage=request.dosage,
            schedules=request.schedules,
            unit=request.unit,
            notes=request.notes,
        )
        return {"medication": medication.to_dict()}
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to update medication {medication_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update medication")

@router.post("/medications/{medication_id}/deactivate")
async def deactivate_medication(medication_id: str,
                                current_user: UserContext = Depends(get_current_user),
                                db_manager: DatabaseManager = Depends(get_db_manager)):
    try:
        medication = db_manager.medications_service.get_medication(medication_id)
        _authorize(db_manager, medication.client_id, current_user)
        medication = db_manager.medications_service.deactivate(medication)
        return {"medication": medication.to_dict()}
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to deactivate medication {medication_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to deactivate medication")

@router.post("/doses/{dose_id}/issues", status_code=201)
async def report_issue(dose_id: str, request: IssueReportRequest,
                       current_user: UserContext = Depends(get_current_user),
                       db_manager: DatabaseManager = Depends(get_db_manager)):
    """Report a dose correction or an adverse event"""
    try:
        dose = db_manager.dose_records_service.get_dose(dose_id)
        _authorize(db_manager, dose.client_id, current_user)
        record = db_manager.events_service.report_issue(
            dose,
            issue_type=request.issue_type,
            description=request.description,
            correction_type=request.correction_type,
            event_type=request.event_type,
            severity=request.severity,
        )
        return {"issue_type": request.issue_type, "record": record.to_dict()}
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
    except Exception as e:
        logger.error(f"❌ Failed to report issue on dose {dose_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to report issue")

@router.get("/doses/{dose_id}")
async def dose_details(dose_id: str,
                       current_user: UserContext = Depends(get_current_user),
                       db_manager: DatabaseManager = Depends(get_db_manager)):
    """Adverse events and correction recorded against a dose"""
    try:
        dose = db_manager.dose_records_service.get_dose(dose_id)
        _authorize(db_manager, dose.client_id, current_user)
        return db_manager.events_service.get_dose_details(dose)
    except HTTPException:
        raise
    except DoseCareError as e:
        raise to_http_exception(e)
