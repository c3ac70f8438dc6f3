#!/usr/bin/env python3
"""
Dose records service: listing, status overrides and PRN doses
"""

import logging
from typing import List, Optional
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from .base_service import BaseService
from ..models.dose_records import DoseRecords
from ..models.medications import Medications
from lib.exceptions import DoseCareError
from lib.time_utils import parse_timestamp

logger = logging.getLogger(__name__)

OVERRIDE_STATUSES = ("taken", "skipped")

class DoseRecordsService(BaseService):
    """Service for handling dose record operations"""

    def __init__(self, db_session: Session):
        super().__init__(db_session)

    def get_dose(self, dose_id: str) -> DoseRecords:
        return self.get_or_404(DoseRecords, dose_id, "Dose")

    def get_doses(self, client_id: str, start: Optional[datetime] = None,
                  end: Optional[datetime] = None) -> List[DoseRecords]:
        """Dose records of a client in [start, end), ordered by scheduled time"""
        query = self.db.query(DoseRecords).filter(DoseRecords.client_id == client_id)
        query = self.apply_date_filter(query, DoseRecords, "scheduled_time", start, end)
        return query.order_by(DoseRecords.scheduled_time.asc()).all()

    def get_pharmacy_doses(self, pharmacy_id: str, status: Optional[str] = None) -> List[DoseRecords]:
        query = self.db.query(DoseRecords).filter(DoseRecords.pharmacy_id == pharmacy_id)
        if status:
            query = query.filter(DoseRecords.status == status)
        return query.all()

    def get_recent_doses(self, client_id: str, days: int = 7,
                         now: Optional[datetime] = None) -> List[DoseRecords]:
        now = now or datetime.now()
        return self.get_doses(client_id, start=now - timedelta(days=days))

    def set_status(self, dose: DoseRecords, status: str) -> DoseRecords:
        """Pharmacy override: taken stamps actual_time, skipped clears it"""
        if status not in OVERRIDE_STATUSES:
            raise DoseCareError(f"Invalid status: {status}")
        dose.status = status
        dose.actual_time = datetime.now() if status == "taken" else None
        self.commit(dose)
        logger.info(f"💊 Dose {dose.id} marked {status}")
        return dose

    def add_prn_dose(self, medication: Medications, when: Optional[datetime] = None) -> DoseRecords:
        """Log an as-needed dose, already taken at `when`"""
        when = parse_timestamp(when) if when else datetime.now()
        dose = DoseRecords(
            medication_id=medication.id,
            pharmacy_id=medication.pharmacy_id,
            client_id=medication.client_id,
            scheduled_time=when,
            actual_time=when,
            status="taken",
        )
        self.commit(dose)
        logger.info(f"💊 PRN dose logged for medication {medication.id}")
        return dose
