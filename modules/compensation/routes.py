# modules/compensation/routes.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from database.connection import get_db
from modules.compensation import bonuses, increments, ledger, reports, schemas
from modules.compensation.models import BonusPaymentStatus, IncrementStatus
from modules.security.deps import get_current_employee_id, require_admin

api_router = APIRouter(prefix="/api/v1", dependencies=[Depends(get_current_employee_id)])

# เขียน/อนุมัติข้อมูลเงินเดือนได้เฉพาะ ADMIN
ADMIN_ONLY = [Depends(require_admin)]


def _or_404(obj, what: str):
    if not obj:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")
    return obj


# ---------- API ROUTES : Compensation ----------
@api_router.post("/compensation/", response_model=schemas.CompensationInDB, status_code=status.HTTP_201_CREATED, dependencies=ADMIN_ONLY, tags=["compensation"])
def create_compensation_route(data: schemas.CompensationCreate, db: Session = Depends(get_db)):
    return ledger.create_compensation(db, data)


@api_router.post("/compensation/from-gross", response_model=schemas.CompensationInDB, status_code=status.HTTP_201_CREATED, dependencies=ADMIN_ONLY, tags=["compensation"])
def create_compensation_from_gross_route(data: schemas.CompensationFromGross, db: Session = Depends(get_db)):
    return ledger.create_compensation_from_gross(db, data)


@api_router.get("/compensation/", response_model=List[schemas.CompensationInDB], tags=["compensation"])
def read_compensations_route(
    employee_id: Optional[int] = None,
    current_only: bool = False,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return ledger.list_compensations(db, employee_id=employee_id, current_only=current_only, skip=skip, limit=limit)


@api_router.get("/compensation/employee/{employee_id}/current", response_model=Optional[schemas.CompensationInDB], tags=["compensation"])
def read_current_compensation_route(employee_id: int, db: Session = Depends(get_db)):
    return ledger.get_current(db, employee_id)


@api_router.get("/compensation/employee/{employee_id}/history", response_model=List[schemas.CompensationInDB], tags=["compensation"])
def read_compensation_history_route(employee_id: int, db: Session = Depends(get_db)):
    return ledger.history(db, employee_id)


@api_router.get("/compensation/employee/{employee_id}/summary", response_model=schemas.CompensationSummary, tags=["compensation"])
def read_compensation_summary_route(employee_id: int, db: Session = Depends(get_db)):
    return reports.employee_compensation_summary(db, employee_id)


@api_router.get("/compensation/{compensation_id}", response_model=schemas.CompensationInDB, tags=["compensation"])
def read_compensation_route(compensation_id: int, db: Session = Depends(get_db)):
    return _or_404(ledger.get_compensation(db, compensation_id), "Compensation record")


@api_router.put("/compensation/{compensation_id}", response_model=schemas.CompensationInDB, dependencies=ADMIN_ONLY, tags=["compensation"])
def update_compensation_route(compensation_id: int, data: schemas.CompensationUpdate, db: Session = Depends(get_db)):
    return ledger.update_compensation(db, compensation_id, data)


@api_router.delete("/compensation/{compensation_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=ADMIN_ONLY, tags=["compensation"])
def delete_compensation_route(compensation_id: int, db: Session = Depends(get_db)):
    ledger.delete_compensation(db, compensation_id)


# ---------- API ROUTES : Salary Increments ----------
@api_router.post("/increments/", response_model=schemas.IncrementInDB, status_code=status.HTTP_201_CREATED, dependencies=ADMIN_ONLY, tags=["increments"])
def create_increment_route(data: schemas.IncrementCreate, db: Session = Depends(get_db)):
    return increments.create_increment(db, data)


@api_router.get("/increments/", response_model=List[schemas.IncrementInDB], tags=["increments"])
def read_increments_route(
    employee_id: Optional[int] = None,
    status_filter: Optional[IncrementStatus] = Query(None, alias="status"),
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return increments.list_increments(db, employee_id=employee_id, status=status_filter, skip=skip, limit=limit)


@api_router.get("/increments/{increment_id}", response_model=schemas.IncrementInDB, tags=["increments"])
def read_increment_route(increment_id: int, db: Session = Depends(get_db)):
    return _or_404(increments.get_increment(db, increment_id), "Salary increment")


@api_router.put("/increments/{increment_id}", response_model=schemas.IncrementInDB, dependencies=ADMIN_ONLY, tags=["increments"])
def update_increment_route(increment_id: int, data: schemas.IncrementUpdate, db: Session = Depends(get_db)):
    return increments.update_increment(db, increment_id, data)


@api_router.delete("/increments/{increment_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=ADMIN_ONLY, tags=["increments"])
def delete_increment_route(increment_id: int, db: Session = Depends(get_db)):
    increments.delete_increment(db, increment_id)


@api_router.post("/increments/{increment_id}/approve", response_model=schemas.IncrementInDB, tags=["increments"])
def approve_increment_route(
    increment_id: int,
    data: schemas.IncrementApprove,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    return increments.approve_increment(db, increment_id, data.compensation, approved_by=data.approved_by or admin.id)


@api_router.post("/increments/{increment_id}/reject", response_model=schemas.IncrementInDB, dependencies=ADMIN_ONLY, tags=["increments"])
def reject_increment_route(increment_id: int, data: schemas.IncrementReject, db: Session = Depends(get_db)):
    return increments.reject_increment(db, increment_id, data.reason)


# ---------- API ROUTES : Bonuses ----------
@api_router.post("/bonuses/", response_model=schemas.BonusInDB, status_code=status.HTTP_201_CREATED, dependencies=ADMIN_ONLY, tags=["bonuses"])
def create_bonus_route(data: schemas.BonusCreate, db: Session = Depends(get_db)):
    return bonuses.create_bonus(db, data)


@api_router.get("/bonuses/", response_model=List[schemas.BonusInDB], tags=["bonuses"])
def read_bonuses_route(
    employee_id: Optional[int] = None,
    status_filter: Optional[BonusPaymentStatus] = Query(None, alias="status"),
    year: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
):
    return bonuses.list_bonuses(db, employee_id=employee_id, status=status_filter, year=year, skip=skip, limit=limit)


@api_router.get("/bonuses/{bonus_id}", response_model=schemas.BonusInDB, tags=["bonuses"])
def read_bonus_route(bonus_id: int, db: Session = Depends(get_db)):
    return _or_404(bonuses.get_bonus(db, bonus_id), "Bonus")


@api_router.put("/bonuses/{bonus_id}", response_model=schemas.BonusInDB, dependencies=ADMIN_ONLY, tags=["bonuses"])
def update_bonus_route(bonus_id: int, data: schemas.BonusUpdate, db: Session = Depends(get_db)):
    return bonuses.update_bonus(db, bonus_id, data)


@api_router.delete("/bonuses/{bonus_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=ADMIN_ONLY, tags=["bonuses"])
def delete_bonus_route(bonus_id: int, db: Session = Depends(get_db)):
    bonuses.delete_bonus(db, bonus_id)


@api_router.post("/bonuses/{bonus_id}/approve", response_model=schemas.BonusInDB, tags=["bonuses"])
def approve_bonus_route(
    bonus_id: int,
    data: schemas.BonusApprove,
    db: Session = Depends(get_db),
    admin=Depends(require_admin),
):
    return bonuses.approve_bonus(db, bonus_id, approved_by=data.approved_by or admin.id)


@api_router.post("/bonuses/{bonus_id}/mark-paid", response_model=schemas.BonusInDB, dependencies=ADMIN_ONLY, tags=["bonuses"])
def mark_bonus_paid_route(bonus_id: int, data: schemas.BonusMarkPaid, db: Session = Depends(get_db)):
    return bonuses.mark_paid(db, bonus_id, data.payment_date)


@api_router.post("/bonuses/{bonus_id}/cancel", response_model=schemas.BonusInDB, dependencies=ADMIN_ONLY, tags=["bonuses"])
def cancel_bonus_route(bonus_id: int, db: Session = Depends(get_db)):
    return bonuses.cancel_bonus(db, bonus_id)
