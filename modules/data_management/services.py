# modules/data_management/services.py
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.errors import NotFoundError, ValidationError
from database.connection import transaction
from . import models, schemas


def _normalize_employment_status(value):
    # frontend อาจส่งมาเป็น "Active", "on leave" ฯลฯ
    if value is None:
        return None
    if isinstance(value, models.EmploymentStatus):
        return value
    v = str(value).strip().lower().replace(" ", "_").replace("-", "_")
    try:
        return models.EmploymentStatus(v)
    except ValueError:
        raise ValidationError(f"Unknown employment status: {value!r}")


def get_employee(db: Session, employee_id: int, for_update: bool = False) -> Optional[models.Employee]:
    stmt = select(models.Employee).where(models.Employee.id == employee_id)
    if for_update:
        stmt = stmt.with_for_update()
    return db.execute(stmt).scalar_one_or_none()


def require_employee(db: Session, employee_id: int, for_update: bool = False) -> models.Employee:
    emp = get_employee(db, employee_id, for_update=for_update)
    if emp is None:
        raise NotFoundError(f"Employee {employee_id} not found")
    return emp


def find_active_by_email(db: Session, email: str) -> Optional[models.Employee]:
    """Case-insensitive lookup restricted to employees whose status is active."""
    return db.execute(
        select(models.Employee).where(
            func.lower(models.Employee.email) == (email or "").strip().lower(),
            models.Employee.employment_status == models.EmploymentStatus.ACTIVE,
        )
    ).scalar_one_or_none()


def create_employee(db: Session, employee: schemas.EmployeeCreate) -> models.Employee:
    data = employee.model_dump()
    data["email"] = data["email"].strip().lower()
    data["employment_status"] = _normalize_employment_status(data.get("employment_status"))
    obj = models.Employee(**data)
    with transaction(db):
        db.add(obj)
        try:
            db.flush()
        except IntegrityError:
            raise ValidationError("Employee number or email already exists")
    db.refresh(obj)
    return obj
