# app/services/booking_service.py
"""
Trip bookings: every change to a trip's status happens here.

  request_trip   → new trip in `requested` (atomic check-and-insert per vehicle)
  start_trip     → requested → active   (admin)
  stop_trip      → active → completed   (admin, computes durations)
  expire_pending → requested → expired  (bulk, used by the expiry sweeper)

Every transition is a single conditional UPDATE guarded by the expected prior
status, so concurrent attempts resolve to one success and one NotFound.
A transition whose precondition is unmet raises NotFound whether or not the
trip exists; callers cannot tell the two apart.
"""

from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from app.config import settings
from app.models.trip import Trip, TripOperation, TripStatus, next_status, source_status
from app.models.vehicle import Vehicle
from app.services.availability_service import is_available
from app.services.errors import Conflict, InvalidInput, NotFound
from app.services.transaction import atomic
from app.utils.logger import get_logger
from app.utils.timeutils import utcnow

logger = get_logger(__name__)

ONE_DAY = timedelta(days=1)
VEHICLE_CLAIMED = "Vehicle is already claimed"


def compute_duration(started_at: datetime, ended_at: datetime) -> tuple[int, float]:
    """
    Whole days and total hours for one elapsed window.
    Both come from the same elapsed time; hours is NOT days*24 + remainder.
    """
    elapsed = ended_at - started_at
    days = int(elapsed // ONE_DAY)
    hours = round(elapsed.total_seconds() / 3600, 2)
    return days, hours


def request_trip(db: Session, account_id: int, vehicle_id: int, justification: str,
                 now: Optional[datetime] = None) -> Trip:
    justification = (justification or "").strip()
    if not justification:
        raise InvalidInput("Justification is required")
    if vehicle_id is None:
        raise InvalidInput("Vehicle is required")

    now = now or utcnow()
    with atomic(db, conflict_message=VEHICLE_CLAIMED):
        # Row lock serialises concurrent claims on the same vehicle (no-op on SQLite,
        # where the open-trip unique index rejects the loser instead).
        vehicle = (
            db.query(Vehicle)
            .filter(Vehicle.id == vehicle_id)
            .with_for_update()
            .first()
        )
        if not vehicle or not vehicle.is_active:
            raise NotFound("Vehicle not found")
        if not is_available(db, vehicle_id):
            raise Conflict(VEHICLE_CLAIMED)

        trip = Trip(
            account_id=account_id,
            vehicle_id=vehicle_id,
            justification=justification,
            status=TripStatus.REQUESTED,
            created_at=now,
        )
        db.add(trip)
        db.flush()

    logger.info(f"[BOOKING] Trip {trip.id} requested: vehicle={vehicle_id} account={account_id}")
    return trip


def _apply(db: Session, trip_id: int, operation: TripOperation, values: dict) -> Trip:
    """Conditional transition of one trip; NotFound when no row matched."""
    current = source_status(operation)
    target = next_status(current, operation)
    with atomic(db):
        updated = (
            db.query(Trip)
            .filter(Trip.id == trip_id, Trip.status == current)
            .update({Trip.status: target, **values}, synchronize_session=False)
        )
        if updated != 1:
            raise NotFound("Trip not found")

    trip = db.get(Trip, trip_id)
    logger.info(f"[BOOKING] Trip {trip_id}: {current.value} → {target.value}")
    return trip


def start_trip(db: Session, trip_id: int, now: Optional[datetime] = None) -> Trip:
    return _apply(db, trip_id, TripOperation.START, {Trip.started_at: now or utcnow()})


def stop_trip(db: Session, trip_id: int, now: Optional[datetime] = None) -> Trip:
    now = now or utcnow()
    started_at = (
        db.query(Trip.started_at)
        .filter(Trip.id == trip_id, Trip.status == TripStatus.ACTIVE)
        .scalar()
    )
    if started_at is None:
        raise NotFound("Trip not found")

    days, hours = compute_duration(started_at, now)
    return _apply(db, trip_id, TripOperation.STOP, {
        Trip.ended_at: now,
        Trip.duration_days: days,
        Trip.duration_hours: hours,
    })


def expire_pending(db: Session, threshold: Optional[timedelta] = None,
                   now: Optional[datetime] = None) -> int:
    """Move every `requested` trip older than threshold to `expired`. Returns the count."""
    threshold = threshold if threshold is not None else timedelta(minutes=settings.EXPIRY_THRESHOLD_MINUTES)
    cutoff = (now or utcnow()) - threshold
    current = source_status(TripOperation.EXPIRE)
    target = next_status(current, TripOperation.EXPIRE)

    with atomic(db):
        expired = (
            db.query(Trip)
            .filter(Trip.status == current, Trip.created_at < cutoff)
            .update({Trip.status: target}, synchronize_session=False)
        )

    if expired:
        logger.info(f"[EXPIRY] {expired} pending trip(s) expired (requested before {cutoff:%Y-%m-%d %H:%M:%S})")
    return expired
