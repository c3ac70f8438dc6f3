from sqlalchemy import Column, String, DateTime

from .base import Base, new_id, iso, local_now

class Pharmacy(Base):
    __tablename__ = "pharmacies"
    id = Column(String(36), primary_key=True, default=new_id)
    auth_id = Column(String(36), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(32), nullable=True)
    address = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=local_now)

    def __repr__(self):
        return f"<Pharmacy(id={self.id}, name='{self.name}')>"

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "created_at": iso(self.created_at),
        }
