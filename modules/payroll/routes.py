# modules/payroll/routes.py
from __future__ import annotations

from fastapi import APIRouter

from modules.payroll import schemas
from modules.payroll.salary_calculator import compute_breakdown, format_breakdown, validate_salary_structure
from modules.payroll.tax_tables import get_tax_tables

router = APIRouter(prefix="/api/v1/payroll", tags=["payroll"])


@router.post("/salary-breakdown", response_model=schemas.SalaryBreakdownOut)
def salary_breakdown_route(body: schemas.SalaryBreakdownRequest):
    tables = get_tax_tables(body.fiscal_year)
    b = compute_breakdown(
        body.monthly_gross,
        basic_pct=body.basic_pct,
        hra_pct=body.hra_pct,
        other_allowances=body.other_allowances,
        other_deductions=body.other_deductions,
        tables=tables,
    )
    ok, warnings = validate_salary_structure(b, tables)
    return schemas.SalaryBreakdownOut(
        **b.as_dict(),
        fiscal_year=tables.fiscal_year,
        is_valid_structure=ok,
        warnings=warnings,
        summary=format_breakdown(b),
    )
