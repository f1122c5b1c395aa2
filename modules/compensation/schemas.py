# modules/compensation/schemas.py
from __future__ import annotations
from datetime import date, datetime
from typing import Optional, List
from pydantic import BaseModel, Field, ConfigDict

from .models import IncrementType, IncrementStatus, BonusType, BonusPaymentStatus


# =========================================================
# Compensation
# =========================================================
class CompensationBase(BaseModel):
    employee_id: int
    basic_salary: float = Field(..., ge=0)
    hra: float = Field(0.0, ge=0)
    da: float = Field(0.0, ge=0)
    special_allowance: float = 0.0
    transport_allowance: float = Field(0.0, ge=0)
    medical_allowance: float = Field(0.0, ge=0)
    other_allowances: float = Field(0.0, ge=0)
    pf_contribution: float = Field(0.0, ge=0)
    esi_contribution: float = Field(0.0, ge=0)
    professional_tax: float = Field(0.0, ge=0)
    tds: float = Field(0.0, ge=0)
    other_deductions: float = Field(0.0, ge=0)
    effective_from: date
    notes: Optional[str] = None
    created_by: Optional[int] = None


class CompensationCreate(CompensationBase):
    is_current: bool = True


class CompensationUpdate(BaseModel):
    basic_salary: Optional[float] = Field(None, ge=0)
    hra: Optional[float] = Field(None, ge=0)
    da: Optional[float] = Field(None, ge=0)
    special_allowance: Optional[float] = None
    transport_allowance: Optional[float] = Field(None, ge=0)
    medical_allowance: Optional[float] = Field(None, ge=0)
    other_allowances: Optional[float] = Field(None, ge=0)
    pf_contribution: Optional[float] = Field(None, ge=0)
    esi_contribution: Optional[float] = Field(None, ge=0)
    professional_tax: Optional[float] = Field(None, ge=0)
    tds: Optional[float] = Field(None, ge=0)
    other_deductions: Optional[float] = Field(None, ge=0)
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    is_current: Optional[bool] = None
    notes: Optional[str] = None


class CompensationFromGross(BaseModel):
    """สร้าง compensation อัตโนมัติจากเงินเดือนรวม (auto-fill)"""
    employee_id: int
    monthly_gross: float = Field(..., gt=0)
    effective_from: date
    basic_pct: Optional[float] = Field(None, gt=0, le=1)
    hra_pct: Optional[float] = Field(None, gt=0, le=1)
    other_allowances: float = Field(0.0, ge=0)
    other_deductions: float = Field(0.0, ge=0)
    notes: Optional[str] = None
    created_by: Optional[int] = None


class CompensationInDB(CompensationBase):
    model_config = ConfigDict(from_attributes=True)
    id: int
    gross_salary: float
    total_deductions: float
    net_salary: float
    effective_to: Optional[date] = None
    is_current: bool
    created_at: datetime
    updated_at: datetime


# =========================================================
# Salary increments
# =========================================================
class IncrementCreate(BaseModel):
    employee_id: int
    increment_type: IncrementType
    previous_basic: float = Field(..., ge=0)
    new_basic: float = Field(..., ge=0)
    previous_gross: Optional[float] = Field(None, ge=0)
    new_gross: Optional[float] = Field(None, ge=0)
    increment_percentage: Optional[float] = None
    effective_date: date
    reason: Optional[str] = None
    remarks: Optional[str] = None
    created_by: Optional[int] = None


class IncrementUpdate(BaseModel):
    increment_type: Optional[IncrementType] = None
    previous_basic: Optional[float] = Field(None, ge=0)
    new_basic: Optional[float] = Field(None, ge=0)
    previous_gross: Optional[float] = Field(None, ge=0)
    new_gross: Optional[float] = Field(None, ge=0)
    increment_percentage: Optional[float] = None
    effective_date: Optional[date] = None
    reason: Optional[str] = None
    remarks: Optional[str] = None


class IncrementApprove(BaseModel):
    compensation: CompensationCreate
    approved_by: Optional[int] = None


class IncrementReject(BaseModel):
    reason: str


class IncrementInDB(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    employee_id: int
    increment_type: IncrementType
    previous_basic: float
    new_basic: float
    previous_gross: Optional[float] = None
    new_gross: Optional[float] = None
    increment_amount: float
    increment_percentage: Optional[float] = None
    effective_date: date
    status: IncrementStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    rejection_reason: Optional[str] = None
    compensation_id: Optional[int] = None
    reason: Optional[str] = None
    remarks: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime


# =========================================================
# Bonuses
# =========================================================
class BonusCreate(BaseModel):
    employee_id: int
    bonus_type: BonusType
    bonus_name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    bonus_period_start: Optional[date] = None
    bonus_period_end: Optional[date] = None
    is_taxable: bool = True
    tax_amount: float = Field(0.0, ge=0)
    reason: Optional[str] = None
    remarks: Optional[str] = None
    created_by: Optional[int] = None


class BonusUpdate(BaseModel):
    bonus_type: Optional[BonusType] = None
    bonus_name: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    bonus_period_start: Optional[date] = None
    bonus_period_end: Optional[date] = None
    is_taxable: Optional[bool] = None
    tax_amount: Optional[float] = Field(None, ge=0)
    reason: Optional[str] = None
    remarks: Optional[str] = None


class BonusApprove(BaseModel):
    approved_by: Optional[int] = None


class BonusMarkPaid(BaseModel):
    payment_date: date


class BonusInDB(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    employee_id: int
    bonus_type: BonusType
    bonus_name: str
    amount: float
    is_taxable: bool
    tax_amount: float
    net_amount: float
    bonus_period_start: Optional[date] = None
    bonus_period_end: Optional[date] = None
    payment_date: Optional[date] = None
    payment_status: BonusPaymentStatus
    approved_by: Optional[int] = None
    approved_at: Optional[datetime] = None
    reason: Optional[str] = None
    remarks: Optional[str] = None
    created_by: Optional[int] = None
    created_at: datetime


# =========================================================
# Summary
# =========================================================
class CompensationSummary(BaseModel):
    current_compensation: Optional[CompensationInDB] = None
    total_bonuses_paid: float
    total_bonuses_this_year: float
    total_increments: int
    latest_increment: Optional[IncrementInDB] = None
    pending_bonuses: int
    history: List[CompensationInDB] = []
