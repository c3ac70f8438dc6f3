from sqlalchemy import Column, Integer, String, Date, DateTime, Text, Boolean, ForeignKey

from .base import Base, new_id, iso, local_now

class Medications(Base):
    __tablename__ = "medications"
    id = Column(String(36), primary_key=True, default=new_id)
    pharmacy_id = Column(String(36), ForeignKey("pharmacies.id"), nullable=False, index=True)
    client_id = Column(String(36), ForeignKey("clients.id"), nullable=False, index=True)
    name = Column(String(500), nullable=False)
    dosage = Column(String(255), nullable=False)
    schedules = Column(String(500), nullable=False, default="")  # "08:00, 20:00"
    total_quantity = Column(Integer, nullable=True)
    remaining_doses = Column(Integer, nullable=True)  # maintained by database triggers
    treatment_duration_days = Column(Integer, nullable=False, default=30)
    start_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    recurrence_type = Column(String(20), nullable=False, default="continuous")
    recurrence_custom_dates = Column(Text, nullable=True)  # "2024-01-10, 2024-01-20"
    created_at = Column(DateTime, nullable=False, default=local_now)

    def to_dict(self):
        return {
            "id": self.id,
            "pharmacy_id": self.pharmacy_id,
            "client_id": self.client_id,
            "name": self.name,
            "dosage": self.dosage,
            "schedules": self.schedules,
            "total_quantity": self.total_quantity,
            "remaining_doses": self.remaining_doses,
            "treatment_duration_days": self.treatment_duration_days,
            "start_date": iso(self.start_date),
            "notes": self.notes,
            "is_active": bool(self.is_active),
            "recurrence_type": self.recurrence_type,
            "recurrence_custom_dates": self.recurrence_custom_dates,
            "created_at": iso(self.created_at),
        }
