# modules/security/password_routes.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.security import auth_service, schemas
from modules.security.auth_service import ChangeStatus
from modules.security.deps import get_current_employee_id, require_admin
from modules.security.passwords import validate_password_strength

api_pw = APIRouter(prefix="/api/v1/security/password", tags=["security"])

_CHANGE_HTTP_STATUS = {
    ChangeStatus.WEAK_PASSWORD: status.HTTP_400_BAD_REQUEST,
    ChangeStatus.WRONG_OLD_PASSWORD: status.HTTP_400_BAD_REQUEST,
    ChangeStatus.EMPLOYEE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
}


def _raise_for(outcome: auth_service.ChangeOutcome) -> None:
    if not outcome.success:
        raise HTTPException(status_code=_CHANGE_HTTP_STATUS[outcome.status], detail=outcome.message)


@api_pw.post("/change", response_model=schemas.OperationResult)
def change_password(
    body: schemas.PasswordChangeRequest,
    request: Request,
    db: Session = Depends(get_db),
    me_id: int = Depends(get_current_employee_id),
):
    outcome = auth_service.change_password(
        db, me_id, body.old_password, body.new_password, is_first_login=body.is_first_login
    )
    _raise_for(outcome)
    # ต้องล็อกอินใหม่ด้วยรหัสใหม่
    request.session.clear()
    return schemas.OperationResult(success=True, message=outcome.message)


@api_pw.post("/temporary", response_model=schemas.TemporaryPasswordResponse, dependencies=[Depends(require_admin)])
def set_temporary_password(body: schemas.TemporaryPasswordRequest, db: Session = Depends(get_db)):
    if body.password:
        outcome = auth_service.set_temporary_password(db, body.employee_id, body.password)
        temp = None
    else:
        outcome, temp = auth_service.issue_temporary_password(db, body.employee_id)
    _raise_for(outcome)
    return schemas.TemporaryPasswordResponse(success=True, message=outcome.message, temporary_password=temp)


@api_pw.post("/validate", response_model=schemas.PasswordValidateResponse)
def validate_password(body: schemas.PasswordValidateRequest):
    check = validate_password_strength(body.password)
    return schemas.PasswordValidateResponse(is_valid=check.is_valid, message=check.message)
