# modules/security/auth_service.py
"""
Employee self-service login and password management.

Every function takes explicit ids/emails and a database session; nothing here
reads a web session. Each call is one unit of work (see ``database.connection.transaction``).
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from datetime import datetime
from functools import lru_cache
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from core.errors import AuthenticationFailure, ValidationError
from database.connection import transaction
from modules.data_management import services as employee_services
from modules.security import lockout
from modules.security.passwords import (
    generate_temporary_password,
    hash_password,
    needs_rehash,
    validate_password_strength,
    verify_password,
)

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password."


class LoginStatus(str, enum.Enum):
    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"
    PASSWORD_NOT_SET = "password_not_set"
    EMPLOYEE_NOT_FOUND_OR_INACTIVE = "employee_not_found_or_inactive"


class ChangeStatus(str, enum.Enum):
    SUCCESS = "success"
    WEAK_PASSWORD = "weak_password"
    WRONG_OLD_PASSWORD = "wrong_old_password"
    EMPLOYEE_NOT_FOUND = "employee_not_found"


@dataclass(frozen=True)
class LoginOutcome:
    status: LoginStatus
    message: str
    employee_id: Optional[int] = None
    require_password_change: bool = False
    attempts_remaining: Optional[int] = None
    minutes_remaining: Optional[int] = None

    @property
    def success(self) -> bool:
        return self.status is LoginStatus.SUCCESS

    @property
    def public_status(self) -> LoginStatus:
        # อีเมลที่ไม่มี/ไม่ active ต้องดูเหมือนรหัสผ่านผิดทุกประการ
        if self.status is LoginStatus.EMPLOYEE_NOT_FOUND_OR_INACTIVE:
            return LoginStatus.INVALID_CREDENTIALS
        return self.status

    def raise_for_failure(self) -> None:
        if not self.success:
            raise AuthenticationFailure(self.message, reason=self.status.value, status=self.public_status.value)


@dataclass(frozen=True)
class ChangeOutcome:
    status: ChangeStatus
    message: str

    @property
    def success(self) -> bool:
        return self.status is ChangeStatus.SUCCESS


@lru_cache(maxsize=1)
def _timing_decoy_hash() -> str:
    return hash_password("timing-decoy")


def _check_email(email: str) -> str:
    email = (email or "").strip()
    if not email or "@" not in email or email.startswith("@") or email.endswith("@"):
        raise ValidationError("A valid email address is required")
    return email


# ------------------------------------------------------------
# Login
# ------------------------------------------------------------
def login(db: Session, email: str, password: str, now: Optional[datetime] = None) -> LoginOutcome:
    email = _check_email(email)
    now = now or lockout.utcnow()

    with transaction(db):
        emp = employee_services.find_active_by_email(db, email)
        if emp is None:
            # เสียเวลาเท่ากับการตรวจรหัสจริง กันการเดาว่าอีเมลมีอยู่หรือไม่จากเวลาตอบกลับ
            verify_password(password, _timing_decoy_hash())
            logger.warning("Login rejected: reason=%s", LoginStatus.EMPLOYEE_NOT_FOUND_OR_INACTIVE.value)
            return LoginOutcome(LoginStatus.EMPLOYEE_NOT_FOUND_OR_INACTIVE, INVALID_CREDENTIALS_MESSAGE)

        if emp.account_locked:
            if lockout.is_locked(emp, now):
                minutes = lockout.minutes_remaining(emp, now)
                logger.warning("Login rejected: reason=account_locked employee_id=%s", emp.id)
                return LoginOutcome(
                    LoginStatus.ACCOUNT_LOCKED,
                    f"Account is locked. Try again in {minutes} minutes.",
                    minutes_remaining=minutes,
                )
            lockout.clear_lock(db, emp)

        if not emp.password_hash:
            logger.warning("Login rejected: reason=password_not_set employee_id=%s", emp.id)
            return LoginOutcome(LoginStatus.PASSWORD_NOT_SET, "Password not set. Contact administrator.")

        if not verify_password(password, emp.password_hash):
            attempts = lockout.register_failure(db, emp, now)
            remaining = lockout.MAX_FAILED_ATTEMPTS - attempts
            logger.warning(
                "Login rejected: reason=invalid_password employee_id=%s attempts=%s", emp.id, attempts
            )
            if remaining <= 0:
                minutes = lockout.minutes_remaining(emp, now)
                return LoginOutcome(
                    LoginStatus.ACCOUNT_LOCKED,
                    f"Account locked due to too many failed attempts. Try again in {minutes} minutes.",
                    minutes_remaining=minutes,
                )
            return LoginOutcome(
                LoginStatus.INVALID_CREDENTIALS,
                INVALID_CREDENTIALS_MESSAGE,
                attempts_remaining=remaining,
            )

        lockout.register_success(db, emp, now)
        if needs_rehash(emp.password_hash):
            emp.password_hash = hash_password(password)
            logger.info("Password hash upgraded for employee_id=%s", emp.id)

        logger.info("Login ok: employee_id=%s first_login=%s", emp.id, emp.is_first_login)
        return LoginOutcome(
            LoginStatus.SUCCESS,
            "Login successful",
            employee_id=emp.id,
            require_password_change=bool(emp.is_first_login),
        )


# ------------------------------------------------------------
# Password change / admin reset
# ------------------------------------------------------------
def change_password(
    db: Session,
    employee_id: int,
    old_password: Optional[str],
    new_password: str,
    is_first_login: bool = False,
    now: Optional[datetime] = None,
) -> ChangeOutcome:
    check = validate_password_strength(new_password)
    if not check.is_valid:
        return ChangeOutcome(ChangeStatus.WEAK_PASSWORD, check.message or "Password does not meet requirements")

    now = now or lockout.utcnow()
    with transaction(db):
        emp = employee_services.get_employee(db, employee_id, for_update=True)
        if emp is None:
            return ChangeOutcome(ChangeStatus.EMPLOYEE_NOT_FOUND, "Employee not found")

        # ข้ามการตรวจรหัสเดิมได้เฉพาะเมื่อทั้งผู้เรียกและข้อมูลในระบบยืนยันว่าเป็นการล็อกอินครั้งแรก
        skip_old_check = (is_first_login and emp.is_first_login) or not emp.password_hash
        if not skip_old_check and not verify_password(old_password or "", emp.password_hash):
            logger.warning("Password change rejected: reason=wrong_old_password employee_id=%s", emp.id)
            return ChangeOutcome(ChangeStatus.WRONG_OLD_PASSWORD, "Current password is incorrect")

        emp.password_hash = hash_password(new_password)
        emp.is_first_login = False
        emp.password_changed_at = now
        db.flush()

    logger.info("Password changed: employee_id=%s", employee_id)
    return ChangeOutcome(
        ChangeStatus.SUCCESS, "Password changed successfully. Please login with your new password."
    )


def set_temporary_password(
    db: Session, employee_id: int, password: str, now: Optional[datetime] = None
) -> ChangeOutcome:
    """Administrator action: store ``password`` and force a change on next login."""
    if not password:
        raise ValidationError("Temporary password must not be empty")

    now = now or lockout.utcnow()
    with transaction(db):
        emp = employee_services.get_employee(db, employee_id, for_update=True)
        if emp is None:
            return ChangeOutcome(ChangeStatus.EMPLOYEE_NOT_FOUND, "Employee not found")
        emp.password_hash = hash_password(password)
        emp.is_first_login = True
        emp.password_changed_at = now
        db.flush()

    logger.info("Temporary password set: employee_id=%s", employee_id)
    return ChangeOutcome(ChangeStatus.SUCCESS, "Temporary password set successfully")


def issue_temporary_password(
    db: Session, employee_id: int, length: Optional[int] = None, now: Optional[datetime] = None
) -> Tuple[ChangeOutcome, Optional[str]]:
    temp = generate_temporary_password(length)
    outcome = set_temporary_password(db, employee_id, temp, now=now)
    return outcome, (temp if outcome.success else None)
