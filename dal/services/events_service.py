#!/usr/bin/env python3
"""
Events service for adverse events and dose corrections
"""

import logging
from typing import List, Dict, Any, Optional
from datetime import datetime
from sqlalchemy.orm import Session

from .base_service import BaseService
from ..models.adverse_events import AdverseEvents
from ..models.dose_corrections import DoseCorrections
from ..models.dose_records import DoseRecords
from ..models.medications import Medications
from lib.exceptions import FormValidationError
from services.forms import validate_issue_report

logger = logging.getLogger(__name__)

class EventsService(BaseService):
    """Service for handling adverse events and dose corrections"""

    def __init__(self, db_session: Session):
        super().__init__(db_session)

    def get_adverse_events(self, client_id: Optional[str] = None,
                           dose_id: Optional[str] = None) -> List[AdverseEvents]:
        query = self.db.query(AdverseEvents)
        if client_id:
            query = query.filter(AdverseEvents.client_id == client_id)
        if dose_id:
            query = query.filter(AdverseEvents.dose_record_id == dose_id)
        return query.order_by(AdverseEvents.occurred_at.desc()).all()

    def get_corrections(self, client_id: str) -> List[DoseCorrections]:
        return (self.db.query(DoseCorrections)
                .filter(DoseCorrections.client_id == client_id)
                .order_by(DoseCorrections.created_at.desc())
                .all())

    def get_dose_correction(self, dose_id: str) -> Optional[DoseCorrections]:
        return (self.db.query(DoseCorrections)
                .filter(DoseCorrections.original_dose_id == dose_id)
                .order_by(DoseCorrections.created_at.desc())
                .first())

    def get_client_events(self, client_id: str) -> Dict[str, Any]:
        """Adverse events, corrections and a medication id -> name/dosage lookup"""
        events = self.get_adverse_events(client_id=client_id)
        corrections = self.get_corrections(client_id)
        medications = self.db.query(Medications).filter(Medications.client_id == client_id).all()
        return {
            "adverse_events": [e.to_dict() for e in events],
            "corrections": [c.to_dict() for c in corrections],
            "medications": {m.id: {"name": m.name, "dosage": m.dosage} for m in medications},
        }

    def get_dose_details(self, dose: DoseRecords) -> Dict[str, Any]:
        correction = self.get_dose_correction(dose.id)
        return {
            "dose": dose.to_dict(),
            "adverse_events": [e.to_dict() for e in self.get_adverse_events(dose_id=dose.id)],
            "correction": correction.to_dict() if correction else None,
        }

    def report_issue(self, dose: DoseRecords, issue_type: str, description: str,
                     correction_type: Optional[str] = None, event_type: Optional[str] = None,
                     severity: Optional[str] = None):
        """Record a correction or an adverse event and flag the dose"""
        errors = validate_issue_report(issue_type, description, correction_type, event_type, severity)
        if errors:
            raise FormValidationError(errors)

        if issue_type == "correction":
            record = DoseCorrections(
                original_dose_id=dose.id,
                client_id=dose.client_id,
                medication_id=dose.medication_id,
                pharmacy_id=dose.pharmacy_id,
                correction_type=correction_type,
                description=description.strip(),
            )
            dose.has_correction = True
        else:
            record = AdverseEvents(
                client_id=dose.client_id,
                medication_id=dose.medication_id,
                dose_record_id=dose.id,
                pharmacy_id=dose.pharmacy_id,
                event_type=event_type,
                severity=severity,
                description=description.strip(),
                occurred_at=datetime.now(),
            )
            dose.has_adverse_event = True

        self.commit(record, dose)
        logger.info(f"⚠️ {issue_type} reported on dose {dose.id}")
        return record
