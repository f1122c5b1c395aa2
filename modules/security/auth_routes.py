# modules/security/auth_routes.py
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.data_management import services as employee_services
from modules.security import auth_service, schemas

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


@router.post("/login", response_model=schemas.LoginResponse)
def do_login(body: schemas.LoginRequest, request: Request, db: Session = Depends(get_db)):
    outcome = auth_service.login(db, body.email, body.password)
    outcome.raise_for_failure()

    emp = employee_services.require_employee(db, outcome.employee_id)
    request.session.clear()
    request.session["employee_id"] = emp.id
    request.session["email"] = emp.email
    request.session["role"] = emp.role

    return schemas.LoginResponse(
        success=True,
        message=outcome.message,
        employee_id=emp.id,
        require_password_change=outcome.require_password_change,
    )


@router.post("/logout", response_model=schemas.OperationResult)
def logout(request: Request):
    request.session.clear()
    return schemas.OperationResult(success=True, message="Logged out")
