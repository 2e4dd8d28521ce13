# app/services/expiry_sweeper.py
"""
Expiry sweeper — background task that expires stale pending trips.

Started once at backend startup and cancelled at shutdown (see app.main).
Each tick opens its own DB session and calls booking_service.expire_pending,
the same operation any other caller uses. A failed tick is logged and the
next tick retries; the loop itself never dies on a store error.
"""

import asyncio
from datetime import timedelta
from typing import Optional

from app.config import settings
from app.database import SessionLocal
from app.services.booking_service import expire_pending
from app.utils.logger import get_logger

logger = get_logger(__name__)


def sweep_once(threshold_minutes: int = None) -> Optional[int]:
    """Run one expiry pass. Returns the number expired, or None if the pass failed."""
    minutes = threshold_minutes if threshold_minutes is not None else settings.EXPIRY_THRESHOLD_MINUTES
    db = SessionLocal()
    try:
        return expire_pending(db, timedelta(minutes=minutes))
    except Exception as e:
        logger.error(f"[EXPIRY] Sweep failed, retrying next tick: {e}", exc_info=True)
        return None
    finally:
        db.close()


async def run_expiry_sweeper(interval_seconds: int = None):
    """Sweep forever at a fixed interval. Cancel the task to stop it."""
    interval = interval_seconds or settings.EXPIRY_SWEEP_INTERVAL_SECONDS
    logger.info(f"⏱  Expiry sweeper running every {interval}s "
                f"(threshold {settings.EXPIRY_THRESHOLD_MINUTES} min)")
    while True:
        # DB calls block; run them off the event loop
        await asyncio.to_thread(sweep_once)
        await asyncio.sleep(interval)


def start_expiry_sweeper(interval_seconds: int = None) -> asyncio.Task:
    return asyncio.create_task(run_expiry_sweeper(interval_seconds), name="expiry-sweeper")


async def stop_expiry_sweeper(task: Optional[asyncio.Task]):
    if task is None or task.done():
        return
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass
    logger.info("🛑 Expiry sweeper stopped")
