# modules/security/deps.py
from __future__ import annotations

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.data_management import services as employee_services

ADMIN_ROLE = "ADMIN"


def _get_session_user_id(request: Request) -> int | None:
    return request.session.get("employee_id")


def get_current_employee_id(request: Request) -> int:
    uid = _get_session_user_id(request)
    if not uid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="LOGIN_REQUIRED")
    return int(uid)


def get_current_employee(request: Request, db: Session = Depends(get_db)):
    """
    คืน employee ปัจจุบันจาก session; ถ้าไม่ล็อกอิน -> 401
    """
    uid = get_current_employee_id(request)
    emp = employee_services.get_employee(db, uid)
    if not emp or not emp.is_active:
        # session มี uid แต่หาใน DB ไม่เจอ/ไม่ active -> บังคับให้ล็อกอินใหม่
        request.session.clear()
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="LOGIN_REQUIRED")

    # ให้ role ใน session ตรงกับ DB เสมอ
    if request.session.get("role") != emp.role:
        request.session["role"] = emp.role
    return emp


def require_admin(emp=Depends(get_current_employee)):
    """อนุญาตเฉพาะ role 'ADMIN'"""
    if emp.role != ADMIN_ROLE:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Administrator required")
    return emp
