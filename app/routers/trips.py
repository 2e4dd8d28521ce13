"""Requester endpoints — see what's free, claim a vehicle, review own history."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import get_current_account
from app.models.account import Account
from app.schemas.trip import OwnTripOut, TripOut, TripRequest
from app.schemas.vehicle import AvailableVehicleOut
from app.services import availability_service, booking_service, reporting_service

router = APIRouter()


@router.get("/trips/available", response_model=list[AvailableVehicleOut], summary="Vehicles free to claim now")
def list_available(db: Session = Depends(get_db), _=Depends(get_current_account)):
    return availability_service.list_available(db)


@router.post("/trips", response_model=TripOut, summary="Claim a vehicle")
def request_trip(body: TripRequest, db: Session = Depends(get_db),
                 account: Account = Depends(get_current_account)):
    return booking_service.request_trip(db, account.id, body.vehicle_id, body.justification)


@router.get("/trips/mine", response_model=list[OwnTripOut], summary="My trips, newest first")
def list_own_trips(db: Session = Depends(get_db), account: Account = Depends(get_current_account)):
    return reporting_service.list_own_trips(db, account.id)
