"""
Admin endpoints — trip lifecycle control, dashboard data and report export.
Every route here requires an elevated account.
"""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session
from app.database import get_db
from app.dependencies import require_admin
from app.schemas.account import PasswordResetRequest
from app.schemas.trip import ActiveTripOut, PendingTripOut, StatsOut, TripOut
from app.services import auth_service, booking_service, export_service, reporting_service
from app.config import settings

router = APIRouter(dependencies=[Depends(require_admin)])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("/admin/trips/pending", response_model=list[PendingTripOut], summary="Requests awaiting start")
def list_pending(db: Session = Depends(get_db)):
    return reporting_service.list_pending(db)


@router.get("/admin/trips/active", response_model=list[ActiveTripOut], summary="Vehicles currently in use")
def list_active(db: Session = Depends(get_db)):
    return reporting_service.list_active(db)


@router.post("/admin/trips/{trip_id}/start", response_model=TripOut, summary="Hand over the vehicle")
def start_trip(trip_id: int, db: Session = Depends(get_db)):
    return booking_service.start_trip(db, trip_id)


@router.post("/admin/trips/{trip_id}/stop", response_model=TripOut, summary="Vehicle returned")
def stop_trip(trip_id: int, db: Session = Depends(get_db)):
    return booking_service.stop_trip(db, trip_id)


@router.get("/admin/trips/export", summary="Completed trips as XLSX")
def export_completed(db: Session = Depends(get_db)):
    rows = reporting_service.list_completed_for_export(db)
    content = export_service.render_completed_trips_xlsx(rows)
    filename = export_service.export_filename()
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )


@router.get("/admin/stats", response_model=StatsOut, summary="Dashboard counters")
def get_stats(db: Session = Depends(get_db)):
    return reporting_service.get_stats(db)


@router.post("/admin/reset-password", summary="Reset an account to the default password")
def reset_password(body: PasswordResetRequest, db: Session = Depends(get_db)):
    account = auth_service.reset_password(db, body.registration_code)
    return {"status": "reset", "registration_code": account.registration_code,
            "message": f"Password reset to {settings.DEFAULT_RESET_PASSWORD}"}
