# app/models/account.py
"""
Accounts table — everyone who can log in and request a vehicle.
Elevated accounts (is_admin) manage the fleet and every trip.
"""

from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.orm import relationship
from app.database import Base


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    job_title = Column(String(100))
    registration_code = Column(String(50), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, nullable=False)

    trips = relationship("Trip", back_populates="account")

    def __repr__(self):
        return f"<Account {self.registration_code} admin={self.is_admin}>"
