#!/usr/bin/env python3
"""
Pharmacy service for pharmacy account rows
"""

import logging
from typing import Optional
from sqlalchemy.orm import Session

from .base_service import BaseService
from ..models.pharmacy import Pharmacy

logger = logging.getLogger(__name__)

class PharmacyService(BaseService):
    """Service for handling pharmacy operations"""

    def __init__(self, db_session: Session):
        super().__init__(db_session)

    def get_by_auth_id(self, auth_id: str) -> Optional[Pharmacy]:
        return self.db.query(Pharmacy).filter(Pharmacy.auth_id == auth_id).first()

    def get_pharmacy(self, pharmacy_id: str) -> Pharmacy:
        return self.get_or_404(Pharmacy, pharmacy_id, "Pharmacy")

    def create_pharmacy(self, auth_id: str, name: str, email: Optional[str] = None,
                        phone: Optional[str] = None, address: Optional[str] = None) -> Pharmacy:
        pharmacy = Pharmacy(auth_id=auth_id, name=name.strip(), email=email,
                            phone=phone, address=address)
        self.commit(pharmacy)
        logger.info(f"🏥 Pharmacy created: {pharmacy.id}")
        return pharmacy
