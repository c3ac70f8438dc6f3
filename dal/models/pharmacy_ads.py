#!/usr/bin/env python3
"""
Pharmacy Ads Model - promotional banners shown on the client dashboard
"""

from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey

from .base import Base, new_id, iso, local_now

class PharmacyAds(Base):
    """Pharmacy ads table model"""
    __tablename__ = "pharmacy_ads"

    id = Column(String(36), primary_key=True, default=new_id)
    pharmacy_id = Column(String(36), ForeignKey("pharmacies.id"), nullable=False, index=True)
    image_url = Column(String(1000), nullable=False)  # public URL in the banners bucket
    whatsapp_phone = Column(String(32), nullable=True)  # falls back to the pharmacy phone
    whatsapp_message = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    display_order = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=local_now)

    def __repr__(self):
        return f"<PharmacyAds(id={self.id}, pharmacy_id={self.pharmacy_id}, is_active={self.is_active})>"

    def to_dict(self):
        return {
            "id": self.id,
            "pharmacy_id": self.pharmacy_id,
            "image_url": self.image_url,
            "whatsapp_phone": self.whatsapp_phone,
            "whatsapp_message": self.whatsapp_message,
            "is_active": bool(self.is_active),
            "display_order": self.display_order,
            "created_at": iso(self.created_at),
        }
