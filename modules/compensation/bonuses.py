# modules/compensation/bonuses.py
"""Bonus workflow: pending -> approved -> paid, pending|approved -> cancelled."""
from __future__ import annotations

import logging
from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import extract, select
from sqlalchemy.orm import Session

from core.errors import NotFoundError, StateTransitionError, ValidationError
from database.base import utcnow
from database.connection import transaction
from modules.data_management import services as employee_services
from . import models, schemas

logger = logging.getLogger(__name__)

Status = models.BonusPaymentStatus


def _validate(obj: models.EmployeeBonus) -> None:
    if obj.is_taxable and float(obj.tax_amount or 0) > float(obj.amount):
        raise ValidationError("Tax amount cannot exceed the bonus amount")
    if obj.bonus_period_start and obj.bonus_period_end and obj.bonus_period_end < obj.bonus_period_start:
        raise ValidationError("Bonus period end cannot be earlier than its start")


def _require(db: Session, bonus_id: int) -> models.EmployeeBonus:
    obj = get_bonus(db, bonus_id)
    if not obj:
        raise NotFoundError(f"Bonus {bonus_id} not found")
    return obj


def _require_status(obj: models.EmployeeBonus, action: str, *allowed: Status) -> None:
    if obj.payment_status not in allowed:
        expected = " or ".join(s.value for s in allowed)
        raise StateTransitionError(
            f"Cannot {action} bonus {obj.id}: status is {obj.payment_status.value}, expected {expected}"
        )


# -------------------- Queries --------------------
def get_bonus(db: Session, bonus_id: int) -> Optional[models.EmployeeBonus]:
    return db.get(models.EmployeeBonus, bonus_id)


def list_bonuses(
    db: Session,
    employee_id: Optional[int] = None,
    status: Optional[Status] = None,
    year: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
) -> List[models.EmployeeBonus]:
    stmt = select(models.EmployeeBonus)
    if employee_id:
        stmt = stmt.where(models.EmployeeBonus.employee_id == employee_id)
    if status:
        stmt = stmt.where(models.EmployeeBonus.payment_status == status)
    if year:
        stmt = stmt.where(extract("year", models.EmployeeBonus.created_at) == year)
    stmt = stmt.order_by(models.EmployeeBonus.created_at.desc(), models.EmployeeBonus.id.desc())
    return db.execute(stmt.offset(skip).limit(limit)).scalars().all()


# -------------------- CRUD (pending only) --------------------
def create_bonus(db: Session, data: schemas.BonusCreate) -> models.EmployeeBonus:
    obj = models.EmployeeBonus(**data.model_dump(), payment_status=Status.PENDING)
    _validate(obj)
    obj.recompute_net()
    with transaction(db):
        employee_services.require_employee(db, data.employee_id)
        db.add(obj)
    db.refresh(obj)
    logger.info("Bonus created: id=%s employee_id=%s amount=%s", obj.id, obj.employee_id, obj.amount)
    return obj


def update_bonus(db: Session, bonus_id: int, data: schemas.BonusUpdate) -> models.EmployeeBonus:
    patch = data.model_dump(exclude_unset=True)
    with transaction(db):
        obj = _require(db, bonus_id)
        _require_status(obj, "update", Status.PENDING)
        for k, v in patch.items():
            setattr(obj, k, v)
        _validate(obj)
        obj.recompute_net()
    db.refresh(obj)
    return obj


def delete_bonus(db: Session, bonus_id: int) -> bool:
    with transaction(db):
        obj = _require(db, bonus_id)
        _require_status(obj, "delete", Status.PENDING)
        db.delete(obj)
    logger.info("Bonus deleted: id=%s", bonus_id)
    return True


# -------------------- Transitions --------------------
def approve_bonus(
    db: Session, bonus_id: int, approved_by: Optional[int] = None, now: Optional[datetime] = None
) -> models.EmployeeBonus:
    with transaction(db):
        obj = _require(db, bonus_id)
        _require_status(obj, "approve", Status.PENDING)
        obj.payment_status = Status.APPROVED
        obj.approved_by = approved_by
        obj.approved_at = now or utcnow()
    db.refresh(obj)
    logger.info("Bonus approved: id=%s", obj.id)
    return obj


def mark_paid(db: Session, bonus_id: int, payment_date: date) -> models.EmployeeBonus:
    if payment_date is None:
        raise ValidationError("payment_date is required")
    with transaction(db):
        obj = _require(db, bonus_id)
        # ต้องผ่าน approved ก่อนเสมอ
        _require_status(obj, "mark as paid", Status.APPROVED)
        obj.payment_status = Status.PAID
        obj.payment_date = payment_date
    db.refresh(obj)
    logger.info("Bonus paid: id=%s payment_date=%s", obj.id, payment_date)
    return obj


def cancel_bonus(db: Session, bonus_id: int) -> models.EmployeeBonus:
    with transaction(db):
        obj = _require(db, bonus_id)
        _require_status(obj, "cancel", Status.PENDING, Status.APPROVED)
        obj.payment_status = Status.CANCELLED
    db.refresh(obj)
    logger.info("Bonus cancelled: id=%s", obj.id)
    return obj
