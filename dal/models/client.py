#!/usr/bin/env python3
"""
Client Model - a pharmacy customer following one or more treatments
"""

from sqlalchemy import Column, String, Date, DateTime, Boolean, ForeignKey

from .base import Base, new_id, iso, local_now

class Client(Base):
    """Clients table model"""
    __tablename__ = "clients"

    id = Column(String(36), primary_key=True, default=new_id)
    auth_id = Column(String(36), nullable=True, index=True)
    pharmacy_id = Column(String(36), ForeignKey("pharmacies.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True, index=True)  # national digits, e.g. 11999999999
    date_of_birth = Column(Date, nullable=True)

    # Which vital signs the client wants to track
    monitor_bp = Column(Boolean, nullable=False, default=False)
    monitor_glucose = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, nullable=False, default=local_now)

    def __repr__(self):
        return f"<Client(id={self.id}, pharmacy_id={self.pharmacy_id}, name='{self.name}')>"

    def to_dict(self):
        """Convert to dictionary for JSON serialization"""
        return {
            "id": self.id,
            "pharmacy_id": self.pharmacy_id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "date_of_birth": iso(self.date_of_birth),
            "monitor_bp": bool(self.monitor_bp),
            "monitor_glucose": bool(self.monitor_glucose),
            "created_at": iso(self.created_at),
        }
