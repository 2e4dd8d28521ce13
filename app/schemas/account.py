# app/schemas/account.py
from pydantic import BaseModel
from typing import Optional


class RegisterRequest(BaseModel):
    name: Optional[str] = None
    registration_code: Optional[str] = None
    password: Optional[str] = None
    job_title: Optional[str] = None


class LoginRequest(BaseModel):
    registration_code: Optional[str] = None
    password: Optional[str] = None


class PasswordResetRequest(BaseModel):
    registration_code: Optional[str] = None


class AccountOut(BaseModel):
    id: int
    name: str
    registration_code: str
    job_title: Optional[str]
    is_admin: bool

    class Config:
        from_attributes = True


class TokenOut(BaseModel):
    token: str
    account: AccountOut
