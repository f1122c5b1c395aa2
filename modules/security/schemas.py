# modules/security/schemas.py
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str


class LoginResponse(BaseModel):
    success: bool
    message: str
    employee_id: Optional[int] = None
    require_password_change: bool = False


class PasswordChangeRequest(BaseModel):
    old_password: Optional[str] = None
    new_password: str
    is_first_login: bool = False


class TemporaryPasswordRequest(BaseModel):
    employee_id: int
    # ว่างไว้ = ให้ระบบสุ่มให้
    password: Optional[str] = None


class TemporaryPasswordResponse(BaseModel):
    success: bool
    message: str
    temporary_password: Optional[str] = None


class PasswordValidateRequest(BaseModel):
    password: str


class PasswordValidateResponse(BaseModel):
    is_valid: bool
    message: Optional[str] = None


class OperationResult(BaseModel):
    success: bool
    message: str
