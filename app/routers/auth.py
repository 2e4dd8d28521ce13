"""Registration and login — the only endpoints reachable without a token."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.schemas.account import LoginRequest, RegisterRequest, TokenOut
from app.services.auth_service import authenticate, register_account

router = APIRouter()


@router.post("/auth/register", response_model=TokenOut, summary="Create an account")
def register(body: RegisterRequest, db: Session = Depends(get_db)):
    account, token = register_account(db, body.name, body.registration_code, body.password, body.job_title)
    return {"token": token, "account": account}


@router.post("/auth/login", response_model=TokenOut, summary="Exchange credentials for a bearer token")
def login(body: LoginRequest, db: Session = Depends(get_db)):
    account, token = authenticate(db, body.registration_code, body.password)
    return {"token": token, "account": account}
