# app/services/reporting_service.py
"""
Read-only reporting views over accounts, vehicles and trips.
Feeds the admin dashboard, the requester's history and the XLSX export.
Nothing here writes. Elapsed-time fields are computed at query time.
"""

import math
from datetime import datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.account import Account
from app.models.trip import Trip, TripStatus
from app.models.vehicle import Vehicle
from app.utils.timeutils import BR_DATETIME, BR_DATETIME_SHORT, format_local, utcnow

NO_VALUE = "—"


def _count(db: Session, column, *criteria) -> int:
    return db.query(func.count(column)).filter(*criteria).scalar() or 0


def get_stats(db: Session) -> dict:
    by_status = dict(db.query(Trip.status, func.count(Trip.id)).group_by(Trip.status).all())
    return {
        "total_vehicles": _count(db, Vehicle.id),
        "active_vehicles": _count(db, Vehicle.id, Vehicle.is_active.is_(True)),
        "total_accounts": _count(db, Account.id),
        "pending_trips": by_status.get(TripStatus.REQUESTED, 0),
        "active_trips": by_status.get(TripStatus.ACTIVE, 0),
        "completed_trips": by_status.get(TripStatus.COMPLETED, 0),
        "expired_trips": by_status.get(TripStatus.EXPIRED, 0),
    }


def _trip_fields(trip: Trip) -> dict:
    return {
        "id": trip.id,
        "account_id": trip.account_id,
        "vehicle_id": trip.vehicle_id,
        "justification": trip.justification,
        "status": trip.status.value,
        "created_at": trip.created_at,
        "started_at": trip.started_at,
        "ended_at": trip.ended_at,
        "duration_days": trip.duration_days,
        "duration_hours": trip.duration_hours,
    }


def _joined(db: Session):
    return (
        db.query(Trip, Vehicle, Account)
        .join(Vehicle, Trip.vehicle_id == Vehicle.id)
        .join(Account, Trip.account_id == Account.id)
    )


def list_pending(db: Session, now: Optional[datetime] = None) -> list[dict]:
    """Requested trips, oldest first, with minutes waited so far."""
    now = now or utcnow()
    rows = _joined(db).filter(Trip.status == TripStatus.REQUESTED).order_by(Trip.created_at, Trip.id).all()
    return [
        {
            **_trip_fields(trip),
            "model": vehicle.model,
            "plate": vehicle.plate,
            "account_name": account.name,
            "registration_code": account.registration_code,
            "minutes_waiting": round((now - trip.created_at).total_seconds() / 60, 1),
        }
        for trip, vehicle, account in rows
    ]


def list_active(db: Session) -> list[dict]:
    """Trips in use, earliest start first, with the start time in the report time zone."""
    rows = _joined(db).filter(Trip.status == TripStatus.ACTIVE).order_by(Trip.started_at, Trip.id).all()
    return [
        {
            **_trip_fields(trip),
            "model": vehicle.model,
            "plate": vehicle.plate,
            "account_name": account.name,
            "registration_code": account.registration_code,
            "started_at_local": format_local(trip.started_at, BR_DATETIME),
        }
        for trip, vehicle, account in rows
    ]


def list_own_trips(db: Session, account_id: int, now: Optional[datetime] = None) -> list[dict]:
    now = now or utcnow()
    rows = (
        db.query(Trip, Vehicle)
        .join(Vehicle, Trip.vehicle_id == Vehicle.id)
        .filter(Trip.account_id == account_id)
        .order_by(Trip.created_at.desc(), Trip.id.desc())
        .all()
    )
    return [
        {
            **_trip_fields(trip),
            "model": vehicle.model,
            "plate": vehicle.plate,
            "seconds_since_request": int((now - trip.created_at).total_seconds()),
        }
        for trip, vehicle in rows
    ]


def format_duration(hours: Optional[float]) -> str:
    """12.5 → '12h 30min'. Missing duration renders as a dash."""
    if hours is None:
        return NO_VALUE
    whole = math.floor(hours)
    minutes = round((hours - whole) * 60)
    if minutes == 60:
        whole, minutes = whole + 1, 0
    return f"{whole}h {minutes}min"


def list_completed_for_export(db: Session) -> list[dict]:
    """Finished trips, most recently ended first, with times rendered for the report."""
    rows = (
        _joined(db)
        .filter(Trip.status == TripStatus.COMPLETED)
        .order_by(Trip.ended_at.desc(), Trip.id.desc())
        .all()
    )
    return [
        {
            "account_name": account.name,
            "registration_code": account.registration_code,
            "job_title": account.job_title or NO_VALUE,
            "model": vehicle.model,
            "plate": vehicle.plate,
            "justification": trip.justification,
            "started_at": format_local(trip.started_at, BR_DATETIME_SHORT) or NO_VALUE,
            "ended_at": format_local(trip.ended_at, BR_DATETIME_SHORT) or NO_VALUE,
            "duration": format_duration(trip.duration_hours),
        }
        for trip, vehicle, account in rows
    ]
