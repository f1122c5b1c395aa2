from datetime import timedelta

import bcrypt
import pytest
from werkzeug.security import generate_password_hash

from conftest import DEFAULT_PASSWORD, FIXED_NOW
from core.errors import AuthenticationFailure, ValidationError
from modules.data_management.models import EmploymentStatus
from modules.security import auth_service
from modules.security.auth_service import ChangeStatus, LoginStatus
from modules.security.passwords import needs_rehash, verify_password


def _fail(db, emp, times, now=FIXED_NOW):
    outcome = None
    for _ in range(times):
        outcome = auth_service.login(db, emp.email, "Wrong#999", now=now)
    return outcome


def test_login_success_resets_counters(db, employee):
    _fail(db, employee, 2)
    outcome = auth_service.login(db, employee.email, DEFAULT_PASSWORD, now=FIXED_NOW)
    assert outcome.success
    assert outcome.employee_id == employee.id
    assert outcome.require_password_change is False

    db.refresh(employee)
    assert employee.failed_login_attempts == 0
    assert employee.last_login_at == FIXED_NOW


def test_login_is_case_insensitive_on_email(db, employee):
    assert auth_service.login(db, employee.email.upper(), DEFAULT_PASSWORD, now=FIXED_NOW).success


def test_first_login_requires_password_change(db, make_employee):
    emp = make_employee(is_first_login=True)
    outcome = auth_service.login(db, emp.email, DEFAULT_PASSWORD, now=FIXED_NOW)
    assert outcome.success
    assert outcome.require_password_change is True


def test_wrong_password_counts_down(db, employee):
    outcome = _fail(db, employee, 1)
    assert outcome.status is LoginStatus.INVALID_CREDENTIALS
    assert outcome.message == "Invalid email or password."
    assert outcome.attempts_remaining == 4

    db.refresh(employee)
    assert employee.failed_login_attempts == 1
    assert employee.account_locked is False


def test_fifth_failure_locks_account(db, employee):
    outcome = _fail(db, employee, 5)
    assert outcome.status is LoginStatus.ACCOUNT_LOCKED
    assert outcome.minutes_remaining == 30
    assert outcome.message == "Account locked due to too many failed attempts. Try again in 30 minutes."

    db.refresh(employee)
    assert employee.account_locked is True
    assert employee.locked_until == FIXED_NOW + timedelta(minutes=30)


def test_locked_account_rejects_correct_password(db, employee):
    _fail(db, employee, 5)
    later = FIXED_NOW + timedelta(minutes=10, seconds=30)
    outcome = auth_service.login(db, employee.email, DEFAULT_PASSWORD, now=later)
    assert outcome.status is LoginStatus.ACCOUNT_LOCKED
    assert outcome.minutes_remaining == 20
    assert outcome.message == "Account is locked. Try again in 20 minutes."


def test_lock_expires_lazily(db, employee):
    _fail(db, employee, 5)
    after = FIXED_NOW + timedelta(minutes=30, seconds=1)
    outcome = auth_service.login(db, employee.email, DEFAULT_PASSWORD, now=after)
    assert outcome.success

    db.refresh(employee)
    assert employee.failed_login_attempts == 0
    assert employee.account_locked is False
    assert employee.locked_until is None


def test_wrong_password_after_lock_expiry_starts_fresh_count(db, employee):
    _fail(db, employee, 5)
    outcome = _fail(db, employee, 1, now=FIXED_NOW + timedelta(hours=1))
    assert outcome.status is LoginStatus.INVALID_CREDENTIALS
    assert outcome.attempts_remaining == 4


def test_unknown_email_looks_like_wrong_password(db, employee):
    wrong_pw = _fail(db, employee, 1)
    unknown = auth_service.login(db, "nobody@company.in", "Wrong#999", now=FIXED_NOW)

    assert unknown.status is LoginStatus.EMPLOYEE_NOT_FOUND_OR_INACTIVE
    assert unknown.public_status is LoginStatus.INVALID_CREDENTIALS
    assert unknown.message == wrong_pw.message


def test_inactive_employee_cannot_login(db, make_employee):
    emp = make_employee(status=EmploymentStatus.RESIGNED)
    outcome = auth_service.login(db, emp.email, DEFAULT_PASSWORD, now=FIXED_NOW)
    assert outcome.status is LoginStatus.EMPLOYEE_NOT_FOUND_OR_INACTIVE
    assert outcome.public_status is LoginStatus.INVALID_CREDENTIALS


def test_password_not_set(db, make_employee):
    emp = make_employee(password=None)
    outcome = auth_service.login(db, emp.email, "anything", now=FIXED_NOW)
    assert outcome.status is LoginStatus.PASSWORD_NOT_SET
    assert outcome.message == "Password not set. Contact administrator."


@pytest.mark.parametrize("email", ["", "no-at-sign", "@company.in", "user@"])
def test_malformed_email_is_a_validation_error(db, email):
    with pytest.raises(ValidationError):
        auth_service.login(db, email, DEFAULT_PASSWORD)


def test_raise_for_failure_hides_internal_reason(db):
    outcome = auth_service.login(db, "nobody@company.in", "x", now=FIXED_NOW)
    with pytest.raises(AuthenticationFailure) as exc_info:
        outcome.raise_for_failure()
    assert exc_info.value.reason == "employee_not_found_or_inactive"
    assert exc_info.value.status == "invalid_credentials"


@pytest.mark.parametrize(
    "legacy",
    [
        lambda pw: bcrypt.hashpw(pw.encode(), bcrypt.gensalt(rounds=4)).decode(),
        lambda pw: generate_password_hash(pw, method="pbkdf2:sha256:1000"),
    ],
    ids=["bcrypt", "werkzeug"],
)
def test_legacy_hash_is_upgraded_on_login(db, employee, legacy):
    employee.password_hash = legacy(DEFAULT_PASSWORD)
    db.commit()

    assert auth_service.login(db, employee.email, DEFAULT_PASSWORD, now=FIXED_NOW).success
    db.refresh(employee)
    assert employee.password_hash.startswith("pbkdf2:sha256:100000$")
    assert not needs_rehash(employee.password_hash)
    assert verify_password(DEFAULT_PASSWORD, employee.password_hash)


# ------------------------------------------------------------
# Password change / temporary password
# ------------------------------------------------------------
def test_change_password(db, employee):
    outcome = auth_service.change_password(db, employee.id, DEFAULT_PASSWORD, "Better#456", now=FIXED_NOW)
    assert outcome.status is ChangeStatus.SUCCESS
    assert outcome.message == "Password changed successfully. Please login with your new password."

    db.refresh(employee)
    assert employee.password_changed_at == FIXED_NOW
    assert employee.is_first_login is False
    assert auth_service.login(db, employee.email, "Better#456", now=FIXED_NOW).success
    assert not auth_service.login(db, employee.email, DEFAULT_PASSWORD, now=FIXED_NOW).success


def test_change_password_rejects_wrong_old_password(db, employee):
    outcome = auth_service.change_password(db, employee.id, "Nope#0000", "Better#456")
    assert outcome.status is ChangeStatus.WRONG_OLD_PASSWORD
    assert outcome.message == "Current password is incorrect"


def test_change_password_rejects_weak_password_before_anything_else(db, employee):
    outcome = auth_service.change_password(db, employee.id, "Nope#0000", "short")
    assert outcome.status is ChangeStatus.WEAK_PASSWORD
    assert outcome.message == "Password must be at least 8 characters long"


def test_first_login_skips_old_password_check(db, make_employee):
    emp = make_employee(is_first_login=True)
    outcome = auth_service.change_password(db, emp.id, None, "Better#456", is_first_login=True)
    assert outcome.success


def test_first_login_flag_is_ignored_once_password_was_changed(db, employee):
    outcome = auth_service.change_password(db, employee.id, None, "Better#456", is_first_login=True)
    assert outcome.status is ChangeStatus.WRONG_OLD_PASSWORD


def test_change_password_unknown_employee(db):
    outcome = auth_service.change_password(db, 9999, "x", "Better#456")
    assert outcome.status is ChangeStatus.EMPLOYEE_NOT_FOUND


def test_set_temporary_password_forces_change(db, employee):
    outcome = auth_service.set_temporary_password(db, employee.id, "Temp#1234", now=FIXED_NOW)
    assert outcome.success
    assert outcome.message == "Temporary password set successfully"

    login = auth_service.login(db, employee.email, "Temp#1234", now=FIXED_NOW)
    assert login.success
    assert login.require_password_change is True


def test_issue_temporary_password_returns_plaintext_once(db, employee):
    outcome, temp = auth_service.issue_temporary_password(db, employee.id)
    assert outcome.success
    assert auth_service.login(db, employee.email, temp, now=FIXED_NOW).success


def test_issue_temporary_password_unknown_employee(db):
    outcome, temp = auth_service.issue_temporary_password(db, 9999)
    assert outcome.status is ChangeStatus.EMPLOYEE_NOT_FOUND
    assert temp is None
