# app/services/vehicle_service.py
"""
Fleet management helpers — create, activate/deactivate and remove vehicles.
Used by the vehicles router (admin only).
"""

from typing import Optional

from sqlalchemy import not_
from sqlalchemy.orm import Session
from app.models.vehicle import Vehicle
from app.services.errors import Conflict, InvalidInput, NotFound
from app.services.transaction import atomic
from app.utils.logger import get_logger
from app.utils.timeutils import utcnow

logger = get_logger(__name__)

PLATE_TAKEN = "Plate already registered"


def normalise_plate(plate: str) -> str:
    return (plate or "").strip().upper()


def lookup_vehicle_by_plate(db: Session, plate: str):
    """Find a vehicle by plate. Returns None if not found."""
    return db.query(Vehicle).filter(Vehicle.plate == normalise_plate(plate)).first()


def create_vehicle(db: Session, model: str, plate: str, photo_url: Optional[str] = None) -> Vehicle:
    model = (model or "").strip()
    plate = normalise_plate(plate)
    if not model or not plate:
        raise InvalidInput("Model and plate are required")
    if lookup_vehicle_by_plate(db, plate):
        raise Conflict(PLATE_TAKEN)

    with atomic(db, conflict_message=PLATE_TAKEN):
        vehicle = Vehicle(model=model, plate=plate, photo_url=photo_url,
                          is_active=True, created_at=utcnow())
        db.add(vehicle)
        db.flush()

    logger.info(f"[FLEET] Vehicle registered: {plate} ({model}) photo={'yes' if photo_url else 'no'}")
    return vehicle


def toggle_vehicle(db: Session, vehicle_id: int) -> Vehicle:
    """Flip the active flag in a single UPDATE."""
    with atomic(db):
        updated = (
            db.query(Vehicle)
            .filter(Vehicle.id == vehicle_id)
            .update({Vehicle.is_active: not_(Vehicle.is_active)}, synchronize_session=False)
        )
        if not updated:
            raise NotFound("Vehicle not found")

    vehicle = db.get(Vehicle, vehicle_id)
    logger.info(f"[FLEET] Vehicle {vehicle.plate} active={vehicle.is_active}")
    return vehicle


def delete_vehicle(db: Session, vehicle_id: int):
    """Hard delete. The vehicle's trip history goes with it."""
    with atomic(db):
        vehicle = db.get(Vehicle, vehicle_id)
        if not vehicle:
            raise NotFound("Vehicle not found")
        trip_count = len(vehicle.trips)
        db.delete(vehicle)

    logger.warning(f"[FLEET] Vehicle {vehicle_id} deleted with {trip_count} trip(s) of history")
