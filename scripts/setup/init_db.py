# scripts/setup/init_db.py
"""
Initialize database — creates all tables and the default admin account.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect, text
from werkzeug.security import generate_password_hash

from app.config import settings
from app.database import SessionLocal, create_tables, engine
from app.models.account import Account
from app.utils.timeutils import utcnow

DEFAULT_ADMIN_NAME = "Administrator"
DEFAULT_ADMIN_PASSWORD = "admin123"


def seed_admin(db) -> bool:
    """Create the default admin account if its registration code is free."""
    code = settings.ADMIN_REGISTRATION_CODE
    if db.query(Account.id).filter(Account.registration_code == code).first():
        return False
    db.add(Account(
        name=DEFAULT_ADMIN_NAME,
        job_title=DEFAULT_ADMIN_NAME,
        registration_code=code,
        password_hash=generate_password_hash(DEFAULT_ADMIN_PASSWORD),
        is_admin=True,
        created_at=utcnow(),
    ))
    db.commit()
    return True


def main():
    print("🗄️  Fleet Booking DB Initialization")
    print("=" * 40)
    print(f"📡 Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("✅ Database connection OK")
    except Exception as e:
        print(f"❌ Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running and DATABASE_URL is correct.")
        sys.exit(1)

    print("\n📋 Creating tables...")
    create_tables()
    tables = sorted(inspect(engine).get_table_names())
    print(f"📊 Tables in database ({len(tables)} total):")
    for t in tables:
        print(f"   ✓ {t}")

    db = SessionLocal()
    try:
        if seed_admin(db):
            print(f"\n👤 Default admin created: {settings.ADMIN_REGISTRATION_CODE} / {DEFAULT_ADMIN_PASSWORD}")
            print("   Change this password after first login.")
        else:
            print(f"\n👤 Admin {settings.ADMIN_REGISTRATION_CODE} already exists — skipped")
    finally:
        db.close()

    print("\n🎉 Database ready! You can now start the backend:")
    print("   uvicorn app.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
