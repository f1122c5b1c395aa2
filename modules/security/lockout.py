# modules/security/lockout.py
from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from config.settings import settings
from database.base import utcnow  # noqa: F401
from modules.data_management.models import Employee

logger = logging.getLogger(__name__)

MAX_FAILED_ATTEMPTS = settings.AUTH_MAX_FAILED_ATTEMPTS
LOCK_DURATION = timedelta(minutes=settings.AUTH_LOCK_DURATION_MINUTES)


def is_locked(emp: Employee, now: datetime) -> bool:
    """Locked and the window has not passed yet. An expired lock counts as unlocked."""
    return bool(emp.account_locked and emp.locked_until is not None and now < emp.locked_until)


def minutes_remaining(emp: Employee, now: datetime) -> int:
    if not emp.locked_until or now >= emp.locked_until:
        return 0
    return math.ceil((emp.locked_until - now).total_seconds() / 60)


def clear_lock(db: Session, emp: Employee) -> None:
    emp.account_locked = False
    emp.failed_login_attempts = 0
    emp.locked_until = None
    db.flush()
    logger.info("Lock cleared for employee_id=%s", emp.id)


def register_failure(db: Session, emp: Employee, now: datetime) -> int:
    """
    นับครั้งที่ผิดด้วย UPDATE เดียว (attempts = attempts + 1) ไม่อ่านค่ามาบวกเอง
    ครบ MAX_FAILED_ATTEMPTS เมื่อไหร่ก็ล็อกในคำสั่งเดียวกัน คืนจำนวนครั้งล่าสุด
    """
    new_attempts = Employee.failed_login_attempts + 1
    reaches_limit = new_attempts >= MAX_FAILED_ATTEMPTS
    db.execute(
        update(Employee)
        .where(Employee.id == emp.id)
        .values(
            failed_login_attempts=new_attempts,
            account_locked=case((reaches_limit, True), else_=Employee.account_locked),
            locked_until=case((reaches_limit, now + LOCK_DURATION), else_=Employee.locked_until),
        )
        .execution_options(synchronize_session=False)
    )
    db.refresh(emp)
    if emp.account_locked:
        logger.warning(
            "Account locked: employee_id=%s attempts=%s until=%s",
            emp.id, emp.failed_login_attempts, emp.locked_until,
        )
    return emp.failed_login_attempts


def register_success(db: Session, emp: Employee, now: datetime) -> None:
    emp.failed_login_attempts = 0
    emp.account_locked = False
    emp.locked_until = None
    emp.last_login_at = now
    db.flush()
