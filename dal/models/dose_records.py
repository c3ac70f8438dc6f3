#!/usr/bin/env python3
"""
Dose Record Model - one scheduled occurrence of a medication
"""

from sqlalchemy import Column, String, DateTime, Boolean, ForeignKey

from .base import Base, new_id, iso, local_now

DOSE_STATUSES = ("pending", "taken", "skipped")

class DoseRecords(Base):
    """Dose records table model"""
    __tablename__ = "dose_records"

    id = Column(String(36), primary_key=True, default=new_id)
    medication_id = Column(String(36), ForeignKey("medications.id"), nullable=False, index=True)
    pharmacy_id = Column(String(36), ForeignKey("pharmacies.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    scheduled_time = Column(DateTime, nullable=False, index=True)
    actual_time = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="pending")  # pending | taken | skipped

    # Set when an issue was reported against this dose
    has_adverse_event = Column(Boolean, nullable=False, default=False)
    has_correction = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=local_now)

    def __repr__(self):
        return f"<DoseRecords(id={self.id}, medication_id={self.medication_id}, status='{self.status}')>"

    def to_dict(self):
        return {
            "id": self.id,
            "medication_id": self.medication_id,
            "pharmacy_id": self.pharmacy_id,
            "client_id": self.client_id,
            "scheduled_time": iso(self.scheduled_time),
            "actual_time": iso(self.actual_time),
            "status": self.status,
            "has_adverse_event": bool(self.has_adverse_event),
            "has_correction": bool(self.has_correction),
            "created_at": iso(self.created_at),
        }
