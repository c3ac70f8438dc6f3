from sqlalchemy import Column, String, DateTime, Text, ForeignKey

from .base import Base, new_id, iso, local_now

EVENT_TYPES = ("symptom", "side_effect", "allergic_reaction", "other")
SEVERITIES = ("mild", "moderate", "severe")

class AdverseEvents(Base):
    __tablename__ = "adverse_events"
    id = Column(String(36), primary_key=True, default=new_id)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    medication_id = Column(String(36), ForeignKey("medications.id"), nullable=True)
    dose_record_id = Column(String(36), ForeignKey("dose_records.id"), nullable=True, index=True)
    pharmacy_id = Column(String(36), ForeignKey("pharmacies.id"), nullable=False)
    event_type = Column(String(30), nullable=False)
    severity = Column(String(20), nullable=False)
    description = Column(Text, nullable=False)
    occurred_at = Column(DateTime, nullable=False, default=local_now)
    created_at = Column(DateTime, nullable=False, default=local_now)

    def to_dict(self):
        return {
            "id": self.id,
            "client_id": self.client_id,
            "medication_id": self.medication_id,
            "dose_record_id": self.dose_record_id,
            "pharmacy_id": self.pharmacy_id,
            "event_type": self.event_type,
            "severity": self.severity,
            "description": self.description,
            "occurred_at": iso(self.occurred_at),
            "created_at": iso(self.created_at),
        }
