"""Shared fixtures: a throwaway SQLite database and record factories."""

import sys
import os
import tempfile
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before anything imports app.config
_TMP_DIR = tempfile.mkdtemp(prefix="fleet-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'fleet.db')}"
os.environ["JWT_SECRET"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["SWEEPER_ENABLED"] = "false"
os.environ.pop("GCS_BUCKET_NAME", None)
os.environ.pop("GCP_SERVICE_ACCOUNT_KEY", None)

import pytest
from werkzeug.security import generate_password_hash
from app.database import Base, SessionLocal, create_tables, engine
from app.models.account import Account
from app.models.vehicle import Vehicle
from app.utils.timeutils import utcnow


@pytest.fixture
def db():
    create_tables()
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def make_account(db, code="111111", name="Ana", is_admin=False, password="secret"):
    account = Account(name=name, registration_code=code, job_title="Analyst",
                      password_hash=generate_password_hash(password),
                      is_admin=is_admin, created_at=utcnow())
    db.add(account)
    db.commit()
    return account


def make_vehicle(db, plate="ABC-123", model="Sedan", is_active=True):
    vehicle = Vehicle(model=model, plate=plate, is_active=is_active, created_at=utcnow())
    db.add(vehicle)
    db.commit()
    return vehicle
