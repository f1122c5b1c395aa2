# modules/compensation/increments.py
"""
Salary increment workflow: pending -> applied | rejected.

Approval and application are one step: approving writes the new current
compensation record through the ledger and marks the increment ``applied``
in the same transaction.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.errors import NotFoundError, StateTransitionError, ValidationError
from database.base import utcnow
from database.connection import transaction
from modules.data_management import services as employee_services
from . import ledger, models, schemas

logger = logging.getLogger(__name__)


def derive_percentage(previous_basic: float, new_basic: float) -> float:
    if not previous_basic:
        raise StateTransitionError("Cannot derive increment percentage when previous basic salary is zero")
    return round((new_basic - previous_basic) / previous_basic * 100, 2)


def _apply_amounts(obj: models.SalaryIncrement, pct_supplied: bool) -> None:
    obj.increment_amount = round(float(obj.new_basic) - float(obj.previous_basic), 2)
    if not pct_supplied:
        obj.increment_percentage = derive_percentage(float(obj.previous_basic), float(obj.new_basic))


def _require(db: Session, increment_id: int) -> models.SalaryIncrement:
    obj = get_increment(db, increment_id)
    if not obj:
        raise NotFoundError(f"Salary increment {increment_id} not found")
    return obj


def _require_pending(obj: models.SalaryIncrement, action: str) -> None:
    if obj.status != models.IncrementStatus.PENDING:
        raise StateTransitionError(
            f"Cannot {action} increment {obj.id}: status is {obj.status.value}, expected pending"
        )


# -------------------- Queries --------------------
def get_increment(db: Session, increment_id: int) -> Optional[models.SalaryIncrement]:
    return db.get(models.SalaryIncrement, increment_id)


def list_increments(
    db: Session,
    employee_id: Optional[int] = None,
    status: Optional[models.IncrementStatus] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[models.SalaryIncrement]:
    stmt = select(models.SalaryIncrement)
    if employee_id:
        stmt = stmt.where(models.SalaryIncrement.employee_id == employee_id)
    if status:
        stmt = stmt.where(models.SalaryIncrement.status == status)
    stmt = stmt.order_by(models.SalaryIncrement.effective_date.desc(), models.SalaryIncrement.id.desc())
    return db.execute(stmt.offset(skip).limit(limit)).scalars().all()


# -------------------- CRUD (pending only) --------------------
def create_increment(db: Session, data: schemas.IncrementCreate) -> models.SalaryIncrement:
    payload = data.model_dump()
    pct_supplied = payload.get("increment_percentage") is not None
    obj = models.SalaryIncrement(**payload, status=models.IncrementStatus.PENDING)
    _apply_amounts(obj, pct_supplied)

    with transaction(db):
        employee_services.require_employee(db, data.employee_id)
        db.add(obj)
    db.refresh(obj)
    logger.info("Increment created: id=%s employee_id=%s amount=%s", obj.id, obj.employee_id, obj.increment_amount)
    return obj


def update_increment(db: Session, increment_id: int, data: schemas.IncrementUpdate) -> models.SalaryIncrement:
    patch = data.model_dump(exclude_unset=True)
    with transaction(db):
        obj = _require(db, increment_id)
        _require_pending(obj, "update")
        for k, v in patch.items():
            setattr(obj, k, v)
        if obj.previous_basic is None or obj.new_basic is None:
            raise ValidationError("previous_basic and new_basic are required")
        # เปลี่ยนฐานเงินเดือนแต่ไม่ได้ส่ง % มา -> คำนวณ % ใหม่
        pct_supplied = patch.get("increment_percentage") is not None
        if not pct_supplied and not ({"previous_basic", "new_basic"} & patch.keys()):
            pct_supplied = obj.increment_percentage is not None
        _apply_amounts(obj, pct_supplied)
    db.refresh(obj)
    return obj


def delete_increment(db: Session, increment_id: int) -> bool:
    with transaction(db):
        obj = _require(db, increment_id)
        _require_pending(obj, "delete")
        db.delete(obj)
    logger.info("Increment deleted: id=%s", increment_id)
    return True


# -------------------- Transitions --------------------
def approve_increment(
    db: Session,
    increment_id: int,
    compensation: schemas.CompensationCreate,
    approved_by: Optional[int] = None,
    now: Optional[datetime] = None,
) -> models.SalaryIncrement:
    now = now or utcnow()
    with transaction(db):
        obj = _require(db, increment_id)
        if compensation.employee_id != obj.employee_id:
            raise ValidationError("Compensation record belongs to a different employee")

        # lock แถวพนักงานก่อน แล้วอ่านสถานะใหม่ เพื่อให้ approve ซ้อนกันทำงานทีละตัว
        employee_services.require_employee(db, obj.employee_id, for_update=True)
        db.refresh(obj)
        _require_pending(obj, "approve")

        record = ledger.build_record(compensation)
        ledger.set_current(db, obj.employee_id, record)

        obj.status = models.IncrementStatus.APPLIED
        obj.compensation_id = record.id
        obj.approved_by = approved_by
        obj.approved_at = now
    db.refresh(obj)
    logger.info(
        "Increment applied: id=%s employee_id=%s compensation_id=%s",
        obj.id, obj.employee_id, obj.compensation_id,
    )
    return obj


def reject_increment(db: Session, increment_id: int, reason: str) -> models.SalaryIncrement:
    reason = (reason or "").strip()
    if not reason:
        raise StateTransitionError("A rejection reason is required")
    with transaction(db):
        obj = _require(db, increment_id)
        _require_pending(obj, "reject")
        obj.status = models.IncrementStatus.REJECTED
        obj.rejection_reason = reason
    db.refresh(obj)
    logger.info("Increment rejected: id=%s", obj.id)
    return obj
