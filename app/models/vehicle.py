# app/models/vehicle.py
"""
Fleet vehicles that can be claimed for a trip.
Deleting a vehicle removes its trip history too (hard delete).
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import relationship
from app.database import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    model = Column(String(255), nullable=False)
    plate = Column(String(20), unique=True, nullable=False, index=True)
    photo_url = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, nullable=False)

    trips = relationship("Trip", back_populates="vehicle", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<Vehicle {self.plate} model={self.model} active={self.is_active}>"
