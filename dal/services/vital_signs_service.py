#!/usr/bin/env python3
"""
Vital signs service for blood pressure and glucose readings
"""

import logging
from typing import List, Optional
from sqlalchemy.orm import Session

from .base_service import BaseService
from ..models.vital_signs import VitalSigns
from ..models.client import Client
from lib.exceptions import FormValidationError
from lib.time_utils import parse_timestamp
from services.vital_signs import HISTORY_LIMIT, validate_vital_sign

logger = logging.getLogger(__name__)

class VitalSignsService(BaseService):
    """Service for handling vital signs operations"""

    def __init__(self, db_session: Session):
        super().__init__(db_session)

    def get_vital_sign(self, vital_sign_id: str) -> VitalSigns:
        return self.get_or_404(VitalSigns, vital_sign_id, "Vital sign")

    def get_history(self, client_id: str, limit: int = HISTORY_LIMIT) -> List[VitalSigns]:
        """Latest readings, newest first"""
        return (self.db.query(VitalSigns)
                .filter(VitalSigns.client_id == client_id)
                .order_by(VitalSigns.measured_at.desc())
                .limit(limit)
                .all())

    def add_vital_sign(self, client: Client, measured_at, systolic: Optional[int] = None,
                       diastolic: Optional[int] = None, glucose: Optional[int] = None,
                       notes: Optional[str] = None) -> VitalSigns:
        errors = validate_vital_sign(systolic, diastolic, glucose, measured_at)
        if errors:
            raise FormValidationError(errors)

        vital_sign = VitalSigns(
            client_id=client.id,
            pharmacy_id=client.pharmacy_id,
            measured_at=parse_timestamp(measured_at),
            systolic=systolic,
            diastolic=diastolic,
            glucose=glucose,
            notes=(notes or "").strip() or None,
        )
        self.commit(vital_sign)
        logger.info(f"🩺 Vital sign recorded for client {client.id}")
        return vital_sign

    def delete_vital_sign(self, vital_sign: VitalSigns) -> None:
        vital_sign_id = vital_sign.id
        self.delete(vital_sign)
        logger.info(f"🗑️ Vital sign {vital_sign_id} deleted")
