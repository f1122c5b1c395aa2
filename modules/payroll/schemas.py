# modules/payroll/schemas.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SalaryBreakdownRequest(BaseModel):
    monthly_gross: float = Field(..., gt=0)
    basic_pct: Optional[float] = Field(None, gt=0, le=1)
    hra_pct: Optional[float] = Field(None, gt=0, le=1)
    other_allowances: float = Field(0.0, ge=0)
    other_deductions: float = Field(0.0, ge=0)
    fiscal_year: Optional[str] = None


class SalaryBreakdownOut(BaseModel):
    # Earnings
    basic_salary: float
    hra: float
    special_allowance: float
    transport_allowance: float
    medical_allowance: float
    da: float
    other_allowances: float
    gross_salary: float
    # Deductions
    professional_tax: float
    esi: float
    tds: float
    other_deductions: float
    total_deductions: float
    # Net
    net_salary: float

    fiscal_year: str
    is_valid_structure: bool
    warnings: List[str] = []
    summary: str
