"""
System health check endpoint.
Returns status of backend + DB + expiry sweeper.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session
from sqlalchemy import text
from app.database import get_db
from app.utils.timeutils import utcnow

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(request: Request, db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Whether the expiry sweeper task is alive
    """
    result = {
        "status": "ok",
        "timestamp": utcnow().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "expiry_sweeper": "stopped",
    }

    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {type(e).__name__}"
        result["status"] = "degraded"

    task = getattr(request.app.state, "expiry_sweeper", None)
    if task is not None and not task.done():
        result["expiry_sweeper"] = "running"

    return result
