from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey

from .base import Base, new_id, iso, local_now

class VitalSigns(Base):
    __tablename__ = "vital_signs"
    id = Column(String(36), primary_key=True, default=new_id)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    pharmacy_id = Column(String(36), ForeignKey("pharmacies.id"), nullable=False)
    measured_at = Column(DateTime, nullable=False, index=True)
    systolic = Column(Integer, nullable=True)
    diastolic = Column(Integer, nullable=True)
    glucose = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, nullable=False, default=local_now)

    def to_dict(self):
        return {
            "id": self.id,
            "client_id": self.client_id,
            "pharmacy_id": self.pharmacy_id,
            "measured_at": iso(self.measured_at),
            "systolic": self.systolic,
            "diastolic": self.diastolic,
            "glucose": self.glucose,
            "notes": self.notes,
            "created_at": iso(self.created_at),
        }
