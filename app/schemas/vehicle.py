# app/schemas/vehicle.py
from pydantic import BaseModel
from datetime import datetime
from typing import Optional


class VehicleOut(BaseModel):
    id: int
    model: str
    plate: str
    photo_url: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class VehicleUsageOut(VehicleOut):
    in_use: bool


class AvailableVehicleOut(BaseModel):
    id: int
    model: str
    plate: str
    photo_url: Optional[str]

    class Config:
        from_attributes = True
