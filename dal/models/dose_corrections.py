from sqlalchemy import Column, String, DateTime, Text, ForeignKey

from .base import Base, new_id, iso, local_now

CORRECTION_TYPES = ("double_dose", "wrong_medication", "wrong_time", "missed_then_taken", "other")

class DoseCorrections(Base):
    __tablename__ = "dose_corrections"
    id = Column(String(36), primary_key=True, default=new_id)
    original_dose_id = Column(String(36), ForeignKey("dose_records.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    medication_id = Column(String(36), ForeignKey("medications.id"), nullable=False)
    pharmacy_id = Column(String(36), ForeignKey("pharmacies.id"), nullable=False)
    correction_type = Column(String(30), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False, default=local_now)

    def to_dict(self):
        return {
            "id": self.id,
            "original_dose_id": self.original_dose_id,
            "client_id": self.client_id,
            "medication_id": self.medication_id,
            "pharmacy_id": self.pharmacy_id,
            "correction_type": self.correction_type,
            "description": self.description,
            "created_at": iso(self.created_at),
        }
