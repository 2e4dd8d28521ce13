# app/services/transaction.py
"""
Commit-or-rollback wrapper for service writes.
Translates store failures into domain errors so no partial state survives a failed write.
"""

from contextlib import contextmanager

from sqlalchemy.exc import DBAPIError, IntegrityError, OperationalError
from sqlalchemy.orm import Session

from app.services.errors import Conflict, Unavailable
from app.utils.logger import get_logger

logger = get_logger(__name__)


@contextmanager
def atomic(db: Session, conflict_message: str = "Conflicting record"):
    """
    Run the block as one transaction. Commits on success; rolls back on any error.
    IntegrityError becomes Conflict, connection-level errors become Unavailable.
    Nothing is retried here.
    """
    try:
        yield db
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info(f"Integrity violation rolled back: {e.orig}")
        raise Conflict(conflict_message) from e
    except (OperationalError, DBAPIError) as e:
        db.rollback()
        logger.error(f"Store unavailable: {e}")
        raise Unavailable() from e
    except Exception:
        db.rollback()
        raise
