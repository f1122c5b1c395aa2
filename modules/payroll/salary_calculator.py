"""
Salary breakdown from a single monthly gross figure.

  • Earnings split: basic / HRA / special allowance (special absorbs rounding)
  • Professional tax (step table), ESI (below wage limit)
  • TDS: annualised new-regime slab tax + cess - 87A rebate, spread over 12 months
  • Net take-home

All amounts are whole rupees, rounded half-up.
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Dict, List, Optional, Tuple, Union

from core.errors import ValidationError
from modules.payroll.tax_tables import TaxTables, get_tax_tables

Number = Union[int, float, str, Decimal]

DEFAULT_BASIC_PCT = Decimal("0.40")
DEFAULT_HRA_PCT = Decimal("0.40")
SPECIAL_ALLOWANCE_PCT = Decimal("0.20")


def _dec(value: Number, field: str) -> Decimal:
    try:
        d = Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{field} must be a number")
    if not d.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    return d


def round_rupee(amount: Decimal) -> Decimal:
    return amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class SalaryBreakdown:
    # Earnings
    basic_salary: Decimal
    hra: Decimal
    special_allowance: Decimal
    transport_allowance: Decimal
    medical_allowance: Decimal
    da: Decimal
    other_allowances: Decimal
    gross_salary: Decimal
    # Deductions
    professional_tax: Decimal
    esi: Decimal
    tds: Decimal
    other_deductions: Decimal
    total_deductions: Decimal
    # Net
    net_salary: Decimal

    @property
    def total_earnings(self) -> Decimal:
        return (self.basic_salary + self.hra + self.special_allowance + self.transport_allowance
                + self.medical_allowance + self.da + self.other_allowances)

    def as_dict(self) -> Dict[str, Union[int, float]]:
        return {
            k: int(v) if v == v.to_integral_value() else float(v)
            for k, v in asdict(self).items()
        }


# ---------------------------------------------------------------------------
# Statutory components
# ---------------------------------------------------------------------------

def professional_tax(monthly_gross: Number, tables: Optional[TaxTables] = None) -> Decimal:
    tables = tables or get_tax_tables()
    return tables.professional_tax(_dec(monthly_gross, "monthly_gross"))


def esi_contribution(monthly_gross: Number, tables: Optional[TaxTables] = None) -> Decimal:
    tables = tables or get_tax_tables()
    gross = _dec(monthly_gross, "monthly_gross")
    if gross > tables.esi_wage_limit:
        return Decimal(0)
    return round_rupee(gross * tables.esi_employee_rate)


def slab_tax(annual_income: Number, tables: Optional[TaxTables] = None) -> Decimal:
    """Marginal slab tax before cess and rebate (unrounded)."""
    tables = tables or get_tax_tables()
    income = _dec(annual_income, "annual_income")

    prev = Decimal(0)
    tax = Decimal(0)
    for slab in tables.income_tax_slabs:
        if income <= prev:
            break
        tax += (min(income, slab.upper) - prev) * slab.rate
        prev = slab.upper
    return tax


def annual_income_tax(annual_gross: Number, tables: Optional[TaxTables] = None) -> Decimal:
    tables = tables or get_tax_tables()
    income = _dec(annual_gross, "annual_gross")

    tax = slab_tax(income, tables) * (1 + tables.cess_rate)
    if income <= tables.rebate_income_limit:
        tax = max(Decimal(0), tax - tables.rebate_amount)
    return round_rupee(tax)


def monthly_tds(monthly_gross: Number, tables: Optional[TaxTables] = None) -> Decimal:
    # ต้องคิดจากรายได้ทั้งปีแล้วหาร 12 ห้ามคิด slab จากเงินเดือนรายเดือนตรง ๆ
    gross = _dec(monthly_gross, "monthly_gross")
    return round_rupee(annual_income_tax(gross * 12, tables) / 12)


# ---------------------------------------------------------------------------
# Breakdown
# ---------------------------------------------------------------------------

def compute_breakdown(
    monthly_gross: Number,
    basic_pct: Optional[Number] = None,
    hra_pct: Optional[Number] = None,
    other_allowances: Number = 0,
    other_deductions: Number = 0,
    tables: Optional[TaxTables] = None,
) -> SalaryBreakdown:
    tables = tables or get_tax_tables()
    gross = _dec(monthly_gross, "monthly_gross")
    if gross <= 0:
        raise ValidationError("Monthly gross salary must be greater than zero")

    basic_pct = DEFAULT_BASIC_PCT if basic_pct is None else _dec(basic_pct, "basic_pct")
    hra_pct = DEFAULT_HRA_PCT if hra_pct is None else _dec(hra_pct, "hra_pct")
    for name, pct in (("basic_pct", basic_pct), ("hra_pct", hra_pct)):
        if not (0 < pct <= 1):
            raise ValidationError(f"{name} must be between 0 and 1")

    other_allowances = _dec(other_allowances, "other_allowances")
    other_deductions = _dec(other_deductions, "other_deductions")
    if other_allowances < 0 or other_deductions < 0:
        raise ValidationError("Other allowances and deductions cannot be negative")

    basic = round_rupee(gross * basic_pct)
    hra = round_rupee(gross * hra_pct)
    special = round_rupee(gross * SPECIAL_ALLOWANCE_PCT)
    transport = medical = da = Decimal(0)

    # special allowance รับส่วนต่างจากการปัดเศษ ให้ผลรวมรายได้เท่ากับ gross พอดี
    adjustment = gross - (basic + hra + special + transport + medical + da + other_allowances)
    special += adjustment
    if special < 0:
        raise ValidationError("Earnings components exceed the monthly gross salary")

    pt = tables.professional_tax(gross)
    esi = esi_contribution(gross, tables)
    tds = monthly_tds(gross, tables)
    total_deductions = pt + esi + tds + other_deductions

    return SalaryBreakdown(
        basic_salary=basic,
        hra=hra,
        special_allowance=special,
        transport_allowance=transport,
        medical_allowance=medical,
        da=da,
        other_allowances=other_allowances,
        gross_salary=gross,
        professional_tax=pt,
        esi=esi,
        tds=tds,
        other_deductions=other_deductions,
        total_deductions=total_deductions,
        net_salary=gross - total_deductions,
    )


def calculate_net_salary(monthly_gross: Number) -> Decimal:
    return compute_breakdown(monthly_gross).net_salary


def format_inr(amount: Decimal) -> str:
    """Indian digit grouping: 1234567 -> ₹12,34,567."""
    sign = "-" if amount < 0 else ""
    amount = abs(amount).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    whole = int(amount)
    frac = amount - whole
    digits = str(whole)
    if len(digits) > 3:
        head, tail = digits[:-3], digits[-3:]
        groups = []
        while len(head) > 2:
            groups.insert(0, head[-2:])
            head = head[:-2]
        if head:
            groups.insert(0, head)
        digits = ",".join(groups + [tail])
    if frac:
        digits += str(frac)[1:]
    return f"{sign}₹{digits}"


def _pct(part: Decimal, whole: Decimal) -> str:
    return f"{round_rupee(part / whole * 100)}%"


def format_breakdown(b: SalaryBreakdown) -> str:
    lines = [
        f"Gross Salary: {format_inr(b.gross_salary)}",
        f"Basic: {format_inr(b.basic_salary)} ({_pct(b.basic_salary, b.gross_salary)})",
        f"HRA: {format_inr(b.hra)} ({_pct(b.hra, b.gross_salary)})",
        f"Special Allowance: {format_inr(b.special_allowance)} ({_pct(b.special_allowance, b.gross_salary)})",
        "",
        "Deductions:",
        f"Professional Tax: {format_inr(b.professional_tax)}",
        f"ESI: {format_inr(b.esi)}",
        f"TDS: {format_inr(b.tds)}",
        "",
        f"Net Salary: {format_inr(b.net_salary)}",
    ]
    return "\n".join(lines)


def salary_summary(monthly_gross: Number) -> str:
    return format_breakdown(compute_breakdown(monthly_gross))


def validate_salary_structure(
    breakdown: SalaryBreakdown, tables: Optional[TaxTables] = None
) -> Tuple[bool, List[str]]:
    tables = tables or get_tax_tables()
    errors: List[str] = []
    gross = breakdown.gross_salary
    if gross <= 0:
        return False, ["Gross salary must be greater than zero"]

    if breakdown.basic_salary / gross * 100 < 40:
        errors.append("Basic salary should be at least 40% of gross salary")
    if breakdown.hra / gross * 100 > 50:
        errors.append("HRA should not exceed 50% of gross salary")
    if gross <= tables.esi_wage_limit and breakdown.esi == 0:
        errors.append(f"ESI should be deducted for gross salary <= {format_inr(tables.esi_wage_limit)}")
    if gross > tables.esi_wage_limit and breakdown.esi > 0:
        errors.append(f"ESI should not be deducted for gross salary > {format_inr(tables.esi_wage_limit)}")

    return len(errors) == 0, errors
