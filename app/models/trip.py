# app/models/trip.py
"""
Trips table — one claim-to-return lifecycle of a vehicle by an account.

Lifecycle:
  requested ──start──▶ active ──stop──▶ completed
      │
      └──expire──▶ expired

completed and expired are terminal. At most one open trip (requested or
active) may exist per vehicle; booking_service enforces it and the partial
unique index below rejects anything that slips past.
"""

import enum

from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Index, Integer, Text, text
from sqlalchemy.orm import relationship
from app.database import Base


class TripStatus(str, enum.Enum):
    REQUESTED = "requested"
    ACTIVE = "active"
    COMPLETED = "completed"
    EXPIRED = "expired"


class TripOperation(str, enum.Enum):
    START = "start"
    STOP = "stop"
    EXPIRE = "expire"


OPEN_STATUSES = (TripStatus.REQUESTED, TripStatus.ACTIVE)
TERMINAL_STATUSES = (TripStatus.COMPLETED, TripStatus.EXPIRED)

# (current status, operation) → next status. Missing pairs are rejected.
TRANSITIONS = {
    (TripStatus.REQUESTED, TripOperation.START): TripStatus.ACTIVE,
    (TripStatus.REQUESTED, TripOperation.EXPIRE): TripStatus.EXPIRED,
    (TripStatus.ACTIVE, TripOperation.STOP): TripStatus.COMPLETED,
}


def next_status(current: TripStatus, operation: TripOperation):
    """Target status for an operation, or None when the transition is not allowed."""
    return TRANSITIONS.get((current, operation))


def source_status(operation: TripOperation) -> TripStatus:
    """The single status an operation may be applied to."""
    return next(cur for (cur, op) in TRANSITIONS if op == operation)


_OPEN_STATUS_SQL = "status IN ('requested', 'active')"


class Trip(Base):
    __tablename__ = "trips"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True)
    vehicle_id = Column(Integer, ForeignKey("vehicles.id", ondelete="CASCADE"), nullable=False, index=True)
    justification = Column(Text, nullable=False)
    status = Column(
        Enum(TripStatus, native_enum=False, length=20,
             values_callable=lambda e: [m.value for m in e]),
        default=TripStatus.REQUESTED, nullable=False, index=True,
    )
    created_at = Column(DateTime, nullable=False, index=True)
    started_at = Column(DateTime)
    ended_at = Column(DateTime)
    duration_days = Column(Integer)      # whole days, set on completion
    duration_hours = Column(Float)       # total elapsed hours, set on completion

    account = relationship("Account", back_populates="trips")
    vehicle = relationship("Vehicle", back_populates="trips")

    __table_args__ = (
        Index(
            "uq_trips_one_open_per_vehicle", "vehicle_id", unique=True,
            postgresql_where=text(_OPEN_STATUS_SQL),
            sqlite_where=text(_OPEN_STATUS_SQL),
        ),
    )

    def __repr__(self):
        return f"<Trip {self.id} vehicle={self.vehicle_id} status={self.status}>"
