# app/dependencies.py
"""FastAPI dependencies: resolve the caller's account from a bearer token and guard admin routes."""

from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.account import Account
from app.services.auth_service import get_account_for_token
from app.services.errors import Forbidden


def _extract_token(request: Request) -> Optional[str]:
    # Query-string token lets the export link be opened directly in a browser
    auth = request.headers.get("Authorization", "")
    if auth.startswith("Bearer "):
        return auth[7:].strip() or None
    return request.query_params.get("token")


def get_current_account(request: Request, db: Session = Depends(get_db)) -> Account:
    return get_account_for_token(db, _extract_token(request))


def require_admin(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_admin:
        raise Forbidden()
    return account
