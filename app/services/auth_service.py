# app/services/auth_service.py
"""
Accounts: registration, login, bearer tokens and credential reset.
Tokens are HS256 JWTs carrying the account id and role flag.
"""

from datetime import timedelta
from typing import Optional

import jwt
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from app.config import settings
from app.models.account import Account
from app.services.errors import Conflict, InvalidInput, NotFound, Unauthorized
from app.services.transaction import atomic
from app.utils.logger import get_logger
from app.utils.timeutils import utcnow

logger = get_logger(__name__)

MIN_REGISTRATION_CODE_LENGTH = 6


def _secret() -> str:
    if not settings.JWT_SECRET:
        raise RuntimeError("JWT_SECRET is not configured")
    return settings.JWT_SECRET


def issue_token(account: Account) -> str:
    now = utcnow()
    payload = {
        "sub": str(account.id),
        "registration_code": account.registration_code,
        "is_admin": bool(account.is_admin),
        "iat": now,
        "exp": now + timedelta(hours=settings.TOKEN_TTL_HOURS),
    }
    return jwt.encode(payload, _secret(), algorithm=settings.JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    """Verify signature and expiry. Raises Unauthorized on any failure."""
    try:
        claims = jwt.decode(token, _secret(), algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")
    if "sub" not in claims:
        raise Unauthorized("Invalid token")
    return claims


def register_account(db: Session, name: str, registration_code: str, password: str,
                     job_title: Optional[str] = None) -> tuple[Account, str]:
    name = (name or "").strip()
    registration_code = (registration_code or "").strip()
    if not name or not registration_code or not password:
        raise InvalidInput("Name, registration code and password are required")

    if db.query(Account.id).filter(Account.registration_code == registration_code).first():
        raise Conflict("Registration code already in use")

    is_admin = registration_code == settings.ADMIN_REGISTRATION_CODE
    with atomic(db, conflict_message="Registration code already in use"):
        account = Account(
            name=name,
            job_title=(job_title or None),
            registration_code=registration_code,
            password_hash=generate_password_hash(password),
            is_admin=is_admin,
            created_at=utcnow(),
        )
        db.add(account)
        db.flush()

    logger.info(f"[AUTH] Account registered: {registration_code} admin={is_admin}")
    return account, issue_token(account)


def authenticate(db: Session, registration_code: str, password: str) -> tuple[Account, str]:
    if not registration_code or not password:
        raise InvalidInput("Registration code and password are required")

    account = db.query(Account).filter(Account.registration_code == registration_code.strip()).first()
    if not account or not check_password_hash(account.password_hash, password):
        logger.warning(f"[AUTH] Failed login for {registration_code}")
        raise Unauthorized("Invalid credentials")
    return account, issue_token(account)


def reset_password(db: Session, registration_code: str) -> Account:
    """Reset an account's credential to the configured default password."""
    registration_code = (registration_code or "").strip()
    if len(registration_code) < MIN_REGISTRATION_CODE_LENGTH:
        raise InvalidInput("Invalid registration code")

    with atomic(db):
        account = db.query(Account).filter(Account.registration_code == registration_code).first()
        if not account:
            raise NotFound("Account not found")
        account.password_hash = generate_password_hash(settings.DEFAULT_RESET_PASSWORD)

    logger.warning(f"[AUTH] Password reset to default for {registration_code}")
    return account


def get_account_for_token(db: Session, token: Optional[str]) -> Account:
    if not token:
        raise Unauthorized("Token not provided")
    claims = decode_token(token)
    try:
        account_id = int(claims["sub"])
    except (TypeError, ValueError):
        raise Unauthorized("Invalid token")
    account = db.get(Account, account_id)
    if not account:
        raise Unauthorized("Invalid token")
    return account
