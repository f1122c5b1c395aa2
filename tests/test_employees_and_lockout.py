from datetime import timedelta

import pytest
from sqlalchemy.orm import sessionmaker

from conftest import FIXED_NOW
from core.errors import NotFoundError, ValidationError
from modules.data_management import schemas as dm_schemas
from modules.data_management import services as dm_services
from modules.data_management.models import Employee, EmploymentStatus
from modules.security import lockout


def test_duplicate_email_is_a_validation_error(db, employee):
    with pytest.raises(ValidationError):
        dm_services.create_employee(
            db,
            dm_schemas.EmployeeCreate(employee_number="EMP9999", first_name="Dup", email=employee.email),
        )


def test_find_active_by_email_skips_inactive(db, make_employee):
    active = make_employee(email="Active.One@company.in")
    make_employee(email="gone@company.in", status=EmploymentStatus.TERMINATED)

    assert dm_services.find_active_by_email(db, "  active.one@COMPANY.in ").id == active.id
    assert dm_services.find_active_by_email(db, "gone@company.in") is None


def test_require_employee(db):
    with pytest.raises(NotFoundError):
        dm_services.require_employee(db, 12345)


def test_failures_from_stale_sessions_are_not_lost(db, engine, employee):
    other = sessionmaker(bind=engine, autoflush=False)()
    try:
        stale = other.get(Employee, employee.id)
        assert stale.failed_login_attempts == 0

        assert lockout.register_failure(db, employee, FIXED_NOW) == 1
        db.commit()
        # ค่าใน stale ยังเป็น 0 แต่ UPDATE ต้องบวกจากค่าจริงในฐานข้อมูล
        assert lockout.register_failure(other, stale, FIXED_NOW) == 2
        other.commit()
    finally:
        other.close()


def test_lock_is_set_by_the_same_update(db, employee):
    for _ in range(lockout.MAX_FAILED_ATTEMPTS - 1):
        lockout.register_failure(db, employee, FIXED_NOW)
    assert not lockout.is_locked(employee, FIXED_NOW)

    lockout.register_failure(db, employee, FIXED_NOW)
    assert lockout.is_locked(employee, FIXED_NOW)
    assert lockout.minutes_remaining(employee, FIXED_NOW) == 30
    assert not lockout.is_locked(employee, FIXED_NOW + lockout.LOCK_DURATION)
    assert lockout.minutes_remaining(employee, FIXED_NOW + timedelta(hours=1)) == 0
