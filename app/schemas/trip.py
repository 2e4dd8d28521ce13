# app/schemas/trip.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional
from app.models.trip import TripStatus


class TripRequest(BaseModel):
    vehicle_id: Optional[int] = None
    justification: Optional[str] = None


class TripOut(BaseModel):
    id: int
    account_id: int
    vehicle_id: int
    justification: str
    status: TripStatus
    created_at: datetime
    started_at: Optional[datetime]
    ended_at: Optional[datetime]
    duration_days: Optional[int]
    duration_hours: Optional[float]

    class Config:
        from_attributes = True
        use_enum_values = True


class OwnTripOut(TripOut):
    model: str
    plate: str
    seconds_since_request: int


class PendingTripOut(TripOut):
    model: str
    plate: str
    account_name: str
    registration_code: str
    minutes_waiting: float


class ActiveTripOut(TripOut):
    model: str
    plate: str
    account_name: str
    registration_code: str
    started_at_local: Optional[str]


class StatsOut(BaseModel):
    total_vehicles: int
    active_vehicles: int
    total_accounts: int
    pending_trips: int
    active_trips: int
    completed_trips: int
    expired_trips: int
