# modules/compensation/ledger.py
"""
Effective-dated compensation records.

Per employee at most one row carries ``is_current = True``. Writes lock the
employee row first so concurrent writers for the same employee queue up, and
the old current row is cleared and flushed before the new one is inserted,
all inside a single transaction (plus a partial unique index as the last line).
"""
from __future__ import annotations

import logging
from datetime import timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.errors import NotFoundError, StateTransitionError, ValidationError
from database.connection import transaction
from modules.data_management import services as employee_services
from modules.payroll.salary_calculator import compute_breakdown
from . import models, schemas

logger = logging.getLogger(__name__)


# -------------------- Helpers --------------------
def _money(x) -> float:
    return round(float(x or 0), 2)


def _supersede_current(db: Session, employee_id: int, new_effective_from=None, exclude_id: Optional[int] = None) -> None:
    stmt = select(models.EmployeeCompensation).where(
        models.EmployeeCompensation.employee_id == employee_id,
        models.EmployeeCompensation.is_current.is_(True),
    )
    if exclude_id is not None:
        stmt = stmt.where(models.EmployeeCompensation.id != exclude_id)

    for old in db.execute(stmt).scalars().all():
        old.is_current = False
        if old.effective_to is None and new_effective_from and new_effective_from > old.effective_from:
            old.effective_to = new_effective_from - timedelta(days=1)
        logger.info("Compensation superseded: id=%s employee_id=%s", old.id, employee_id)
    # ต้อง flush การล้างแถวเก่าก่อน insert แถวใหม่ (partial unique index)
    db.flush()


def set_current(db: Session, employee_id: int, record: models.EmployeeCompensation) -> models.EmployeeCompensation:
    """
    Insert ``record`` as the employee's current compensation, clearing the
    previous current row. Runs inside the caller's transaction; the caller is
    expected to hold the employee row lock.
    """
    _supersede_current(db, employee_id, record.effective_from)
    record.employee_id = employee_id
    record.is_current = True
    record.recompute_totals()
    db.add(record)
    db.flush()
    return record


def _validate_dates(obj: models.EmployeeCompensation) -> None:
    if obj.effective_to is not None and obj.effective_to < obj.effective_from:
        raise ValidationError("effective_to cannot be earlier than effective_from")


# -------------------- Queries --------------------
def get_compensation(db: Session, compensation_id: int) -> Optional[models.EmployeeCompensation]:
    return db.get(models.EmployeeCompensation, compensation_id)


def get_current(db: Session, employee_id: int) -> Optional[models.EmployeeCompensation]:
    return db.execute(
        select(models.EmployeeCompensation).where(
            models.EmployeeCompensation.employee_id == employee_id,
            models.EmployeeCompensation.is_current.is_(True),
        )
    ).scalar_one_or_none()


def history(db: Session, employee_id: int) -> List[models.EmployeeCompensation]:
    return db.execute(
        select(models.EmployeeCompensation)
        .where(models.EmployeeCompensation.employee_id == employee_id)
        .order_by(models.EmployeeCompensation.effective_from.desc(), models.EmployeeCompensation.id.desc())
    ).scalars().all()


def list_compensations(
    db: Session, employee_id: Optional[int] = None, current_only: bool = False, skip: int = 0, limit: int = 100
) -> List[models.EmployeeCompensation]:
    stmt = select(models.EmployeeCompensation)
    if employee_id:
        stmt = stmt.where(models.EmployeeCompensation.employee_id == employee_id)
    if current_only:
        stmt = stmt.where(models.EmployeeCompensation.is_current.is_(True))
    stmt = stmt.order_by(models.EmployeeCompensation.effective_from.desc(), models.EmployeeCompensation.id.desc())
    return db.execute(stmt.offset(skip).limit(limit)).scalars().all()


# -------------------- Writes --------------------
def build_record(data: schemas.CompensationBase) -> models.EmployeeCompensation:
    payload = data.model_dump(exclude={"is_current"})
    return models.EmployeeCompensation(**payload)


def create_compensation(db: Session, data: schemas.CompensationCreate) -> models.EmployeeCompensation:
    with transaction(db):
        employee_services.require_employee(db, data.employee_id, for_update=True)
        record = build_record(data)
        if data.is_current:
            set_current(db, data.employee_id, record)
        else:
            record.is_current = False
            record.recompute_totals()
            db.add(record)
            db.flush()
    db.refresh(record)
    logger.info("Compensation created: id=%s employee_id=%s current=%s", record.id, record.employee_id, record.is_current)
    return record


def create_compensation_from_gross(db: Session, data: schemas.CompensationFromGross) -> models.EmployeeCompensation:
    b = compute_breakdown(
        data.monthly_gross,
        basic_pct=data.basic_pct,
        hra_pct=data.hra_pct,
        other_allowances=data.other_allowances,
        other_deductions=data.other_deductions,
    )
    payload = schemas.CompensationCreate(
        employee_id=data.employee_id,
        basic_salary=_money(b.basic_salary),
        hra=_money(b.hra),
        da=_money(b.da),
        special_allowance=_money(b.special_allowance),
        transport_allowance=_money(b.transport_allowance),
        medical_allowance=_money(b.medical_allowance),
        other_allowances=_money(b.other_allowances),
        esi_contribution=_money(b.esi),
        professional_tax=_money(b.professional_tax),
        tds=_money(b.tds),
        other_deductions=_money(b.other_deductions),
        effective_from=data.effective_from,
        notes=data.notes,
        created_by=data.created_by,
        is_current=True,
    )
    return create_compensation(db, payload)


def update_compensation(
    db: Session, compensation_id: int, data: schemas.CompensationUpdate
) -> models.EmployeeCompensation:
    patch = data.model_dump(exclude_unset=True)
    make_current = patch.pop("is_current", None)

    with transaction(db):
        obj = get_compensation(db, compensation_id)
        if not obj:
            raise NotFoundError(f"Compensation record {compensation_id} not found")
        employee_services.require_employee(db, obj.employee_id, for_update=True)

        for k, v in patch.items():
            setattr(obj, k, v)
        _validate_dates(obj)

        if make_current is True and not obj.is_current:
            _supersede_current(db, obj.employee_id, obj.effective_from, exclude_id=obj.id)
            obj.is_current = True
            obj.effective_to = None
        elif make_current is False:
            obj.is_current = False

        obj.recompute_totals()
        db.flush()
    db.refresh(obj)
    return obj


def delete_compensation(db: Session, compensation_id: int) -> bool:
    with transaction(db):
        obj = get_compensation(db, compensation_id)
        if not obj:
            raise NotFoundError(f"Compensation record {compensation_id} not found")
        if obj.is_current:
            raise StateTransitionError("The current compensation record cannot be deleted")
        linked = db.execute(
            select(models.SalaryIncrement.id).where(models.SalaryIncrement.compensation_id == obj.id)
        ).first()
        if linked:
            raise StateTransitionError("Compensation record is referenced by an applied increment")
        db.delete(obj)
    logger.info("Compensation deleted: id=%s", compensation_id)
    return True
