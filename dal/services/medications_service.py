#!/usr/bin/env python3
"""
Medications service for prescribing, editing and deactivating medications
"""

import logging
from typing import List, Optional
from datetime import date
from sqlalchemy.orm import Session

from .base_service import BaseService
from ..models.medications import Medications
from ..models.dose_records import DoseRecords
from lib.exceptions import FormValidationError
from services.dose_schedule import (
    DEFAULT_UNIT,
    PRESCRIPTION_UNITS,
    clean_schedules,
    generate_dose_times,
    join_schedules,
    normalize_dosage,
    parse_custom_dates,
    split_dosage,
)
from services.forms import validate_client_medication, validate_pharmacy_medication

logger = logging.getLogger(__name__)

DEFAULT_DURATION_DAYS = 30

class MedicationsService(BaseService):
    """Service for handling medications operations"""

    def __init__(self, db_session: Session):
        super().__init__(db_session)

    def get_medication(self, medication_id: str) -> Medications:
        return self.get_or_404(Medications, medication_id, "Medication")

    def get_medications(self, client_id: str, active_only: bool = False) -> List[Medications]:
        """Medications of a client, newest first"""
        query = self.db.query(Medications).filter(Medications.client_id == client_id)
        if active_only:
            query = query.filter(Medications.is_active.is_(True))
        return query.order_by(Medications.created_at.desc()).all()

    def get_pharmacy_medications(self, pharmacy_id: str) -> List[Medications]:
        return self.db.query(Medications).filter(Medications.pharmacy_id == pharmacy_id).all()

    def prescribe(self, pharmacy_id: str, client_id: Optional[str], name: str, dosage: str,
                  unit: str = DEFAULT_UNIT, schedules: Optional[List[str]] = None,
                  treatment_duration_days: Optional[int] = DEFAULT_DURATION_DAYS,
                  start_date: Optional[date] = None, notes: Optional[str] = None,
                  recurrence_type: str = "continuous",
                  custom_dates: Optional[List[str]] = None) -> Medications:
        """
        Pharmacy-side prescription. Only the medication row is written:
        pending dose records are created by the database trigger.
        """
        errors = validate_pharmacy_medication(client_id, name, dosage, schedules or [],
                                              treatment_duration_days, recurrence_type, custom_dates,
                                              unit or DEFAULT_UNIT)
        if errors:
            raise FormValidationError(errors)

        dates = parse_custom_dates(custom_dates)
        medication = Medications(
            pharmacy_id=pharmacy_id,
            client_id=client_id,
            name=name.strip(),
            dosage=f"{dosage.strip()}{unit or DEFAULT_UNIT}",
            schedules=join_schedules(clean_schedules(schedules)),
            total_quantity=None,
            treatment_duration_days=treatment_duration_days,
            start_date=start_date or date.today(),
            notes=(notes or "").strip() or None,
            is_active=True,
            recurrence_type=recurrence_type,
            recurrence_custom_dates=", ".join(dates) if recurrence_type == "custom" else None,
        )
        self.commit(medication)
        logger.info(f"💊 Medication {medication.id} prescribed to client {client_id}")
        return medication

    def add_for_client(self, pharmacy_id: str, client_id: str, name: str, dosage: str,
                       schedules: List[str], treatment_duration_days: int = DEFAULT_DURATION_DAYS,
                       start_date: Optional[date] = None, notes: Optional[str] = None) -> Medications:
        """Client-side add: insert the medication, then its pending doses"""
        errors = validate_client_medication(name, dosage, schedules, treatment_duration_days)
        if errors:
            raise FormValidationError(errors)

        valid_schedules = clean_schedules(schedules)
        start_date = start_date or date.today()
        medication = Medications(
            pharmacy_id=pharmacy_id,
            client_id=client_id,
            name=name.strip(),
            dosage=normalize_dosage(dosage),
            schedules=join_schedules(valid_schedules),
            treatment_duration_days=treatment_duration_days,
            start_date=start_date,
            notes=(notes or "").strip() or None,
            is_active=True,
        )
        self.commit(medication)

        doses = [
            DoseRecords(
                medication_id=medication.id,
                pharmacy_id=pharmacy_id,
                client_id=client_id,
                scheduled_time=scheduled,
                status="pending",
            )
            for scheduled in generate_dose_times(start_date, treatment_duration_days, valid_schedules)
        ]
        if doses:
            self.db.add_all(doses)
            self.commit()
        logger.info(f"💊 Medication {medication.id} added with {len(doses)} pending doses")
        return medication

    def update_medication(self, medication: Medications, name: str, dosage: str,
                          schedules: List[str], unit: Optional[str] = None,
                          notes: Optional[str] = None) -> Medications:
        """
        Edit form. The dosage value is stored with the unit given, or the unit
        parsed from the previous dosage.
        """
        errors = validate_client_medication(name, dosage, schedules)
        if unit and unit not in PRESCRIPTION_UNITS:
            errors["unit"] = "Invalid unit"
        if errors:
            raise FormValidationError(errors)

        if not unit:
            _, unit = split_dosage(medication.dosage)
        value, _ = split_dosage(dosage)
        medication.name = name.strip()
        medication.dosage = f"{value}{unit}"
        medication.schedules = join_schedules(clean_schedules(schedules))
        medication.notes = (notes or "").strip() or None
        return self.commit(medication)

    def deactivate(self, medication: Medications) -> Medications:
        medication.is_active = False
        self.commit(medication)
        logger.info(f"⏸️ Medication {medication.id} deactivated")
        return medication
