"""Fleet endpoints — everyone can list, only admins can change the fleet."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_account, require_admin
from app.schemas.vehicle import VehicleOut, VehicleUsageOut
from app.services import availability_service, storage_service, vehicle_service

router = APIRouter()


@router.get("/vehicles", response_model=list[VehicleUsageOut], summary="All vehicles with in-use flag")
def list_vehicles(db: Session = Depends(get_db), _=Depends(get_current_account)):
    return [
        {**VehicleOut.model_validate(vehicle).model_dump(), "in_use": in_use}
        for vehicle, in_use in availability_service.list_vehicles_with_usage(db)
    ]


@router.post("/vehicles", response_model=VehicleOut, summary="Register a vehicle (optional photo)")
def create_vehicle(
    model: Optional[str] = Form(None),
    plate: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    _=Depends(require_admin),
):
    photo_url = None
    if photo is not None:
        data = photo.file.read()
        photo_url = storage_service.upload_image(data, photo.content_type, photo.filename)
    return vehicle_service.create_vehicle(db, model, plate, photo_url)


@router.patch("/vehicles/{vehicle_id}/toggle", response_model=VehicleOut, summary="Activate / deactivate")
def toggle_vehicle(vehicle_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    return vehicle_service.toggle_vehicle(db, vehicle_id)


@router.delete("/vehicles/{vehicle_id}", summary="Remove a vehicle and its trip history")
def delete_vehicle(vehicle_id: int, db: Session = Depends(get_db), _=Depends(require_admin)):
    vehicle_service.delete_vehicle(db, vehicle_id)
    return {"status": "removed", "vehicle_id": vehicle_id}
