# app/services/availability_service.py
"""
Vehicle availability: which vehicles can be claimed right now.

A vehicle is available when it is active and has no open trip.
Always computed from the current trips table; nothing is cached.
"""

from sqlalchemy import exists, select
from sqlalchemy.orm import Session
from app.models.trip import Trip, OPEN_STATUSES
from app.models.vehicle import Vehicle


def _open_trip_vehicle_ids():
    return select(Trip.vehicle_id).where(Trip.status.in_(OPEN_STATUSES))


def _has_open_trip(vehicle_id_column):
    return exists().where(Trip.vehicle_id == vehicle_id_column, Trip.status.in_(OPEN_STATUSES))


def list_available(db: Session) -> list[Vehicle]:
    return (
        db.query(Vehicle)
        .filter(Vehicle.is_active.is_(True), Vehicle.id.not_in(_open_trip_vehicle_ids()))
        .order_by(Vehicle.model, Vehicle.id)
        .all()
    )


def is_available(db: Session, vehicle_id: int) -> bool:
    """
    Single-vehicle form of list_available.
    Reads through the caller's session so it shares the caller's transaction.
    """
    return db.query(
        exists().where(
            Vehicle.id == vehicle_id,
            Vehicle.is_active.is_(True),
            ~_has_open_trip(Vehicle.id),
        )
    ).scalar()


def list_vehicles_with_usage(db: Session) -> list[tuple[Vehicle, bool]]:
    """All vehicles, newest first, each paired with an in-use flag."""
    in_use = _has_open_trip(Vehicle.id).label("in_use")
    return [(vehicle, bool(flag)) for vehicle, flag in
            db.query(Vehicle, in_use).order_by(Vehicle.id.desc()).all()]
