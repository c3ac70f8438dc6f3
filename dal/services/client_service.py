#!/usr/bin/env python3
"""
Client service: roster, profile and monitoring preferences
"""

import logging
from collections import defaultdict
from datetime import datetime, timedelta
from typing import List, Dict, Any, Optional
from sqlalchemy.orm import Session

from .base_service import BaseService
from ..models.client import Client
from ..models.medications import Medications
from ..models.dose_records import DoseRecords
from lib.exceptions import DuplicateRecordError
from services.reports import roster_entry

logger = logging.getLogger(__name__)

ROSTER_WINDOW_DAYS = 7

class ClientService(BaseService):
    """Service for handling client operations"""

    def __init__(self, db_session: Session):
        super().__init__(db_session)

    def get_by_auth_id(self, auth_id: str) -> Optional[Client]:
        return self.db.query(Client).filter(Client.auth_id == auth_id).first()

    def get_client(self, client_id: str) -> Client:
        return self.get_or_404(Client, client_id, "Client")

    def find_by_phone(self, phone_digits: str) -> Optional[Client]:
        """Lookup by stored (national) phone digits"""
        return self.db.query(Client).filter(Client.phone == phone_digits).first()

    def list_clients(self, pharmacy_id: str) -> List[Client]:
        return (self.db.query(Client)
                .filter(Client.pharmacy_id == pharmacy_id)
                .order_by(Client.created_at.desc())
                .all())

    def get_roster(self, pharmacy_id: str, now: Optional[datetime] = None) -> List[Dict[str, Any]]:
        """Clients (newest first) with medication count and 7-day adherence"""
        now = now or datetime.now()
        window_start = now - timedelta(days=ROSTER_WINDOW_DAYS)
        clients = self.list_clients(pharmacy_id)
        client_ids = [c.id for c in clients]
        if not client_ids:
            return []

        medications = defaultdict(list)
        for med in self.db.query(Medications).filter(Medications.client_id.in_(client_ids)):
            medications[med.client_id].append(med.to_dict())

        doses = defaultdict(list)
        query = self.db.query(DoseRecords).filter(DoseRecords.client_id.in_(client_ids))
        query = self.apply_date_filter(query, DoseRecords, "scheduled_time", start_date=window_start)
        for dose in query:
            doses[dose.client_id].append(dose.to_dict())

        return [roster_entry(c.to_dict(), medications[c.id], doses[c.id]) for c in clients]

    def create_client(self, auth_id: str, pharmacy_id: str, name: str, phone_digits: str,
                      email: Optional[str] = None, date_of_birth=None,
                      monitor_bp: bool = False, monitor_glucose: bool = False) -> Client:
        if phone_digits and self.find_by_phone(phone_digits):
            logger.error(f"❌ Phone already registered: {phone_digits}")
            raise DuplicateRecordError("A client with this phone is already registered")

        client = Client(
            auth_id=auth_id,
            pharmacy_id=pharmacy_id,
            name=name.strip(),
            email=(email or "").strip() or None,
            phone=phone_digits,
            date_of_birth=date_of_birth,
            monitor_bp=bool(monitor_bp),
            monitor_glucose=bool(monitor_glucose),
        )
        self.commit(client)
        logger.info(f"✅ Client created: {client.id}")
        return client

    def update_client(self, client: Client, name: str, phone_digits: str,
                      email: Optional[str] = None, date_of_birth=None,
                      monitor_bp: Optional[bool] = None, monitor_glucose: Optional[bool] = None) -> Client:
        existing = self.find_by_phone(phone_digits)
        if existing and existing.id != client.id:
            raise DuplicateRecordError("A client with this phone is already registered")

        client.name = name.strip()
        client.phone = phone_digits
        client.email = (email or "").strip() or None
        client.date_of_birth = date_of_birth
        return self.set_monitoring(client, monitor_bp, monitor_glucose)

    def set_monitoring(self, client: Client, monitor_bp: Optional[bool] = None,
                       monitor_glucose: Optional[bool] = None) -> Client:
        if monitor_bp is not None:
            client.monitor_bp = monitor_bp
        if monitor_glucose is not None:
            client.monitor_glucose = monitor_glucose
        return self.commit(client)
