"""
Statutory tables used by the salary calculator (India).

Income tax: new regime slabs (annual). Professional tax: Maharashtra monthly
step table. ESI: employee share below the monthly wage limit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Optional, Tuple

from config.settings import settings
from core.errors import ValidationError

INF = Decimal("Infinity")


@dataclass(frozen=True)
class TaxSlab:
    upper: Decimal   # inclusive upper bound of the slab (annual income)
    rate: Decimal


@dataclass(frozen=True)
class ProfessionalTaxSlab:
    upper: Decimal   # inclusive upper bound (monthly gross)
    amount: Decimal


@dataclass(frozen=True)
class TaxTables:
    fiscal_year: str
    income_tax_slabs: Tuple[TaxSlab, ...]
    professional_tax_slabs: Tuple[ProfessionalTaxSlab, ...]
    esi_wage_limit: Decimal
    esi_employee_rate: Decimal
    cess_rate: Decimal
    rebate_income_limit: Decimal
    rebate_amount: Decimal

    def professional_tax(self, monthly_gross: Decimal) -> Decimal:
        for slab in self.professional_tax_slabs:
            if monthly_gross <= slab.upper:
                return slab.amount
        return self.professional_tax_slabs[-1].amount


# ---------------------------------------------------------------------------
# FY 2025-26
# ---------------------------------------------------------------------------

FY_2025_26 = TaxTables(
    fiscal_year="2025-26",
    income_tax_slabs=(
        TaxSlab(Decimal(300_000), Decimal("0.00")),
        TaxSlab(Decimal(700_000), Decimal("0.05")),
        TaxSlab(Decimal(1_000_000), Decimal("0.10")),
        TaxSlab(Decimal(1_200_000), Decimal("0.15")),
        TaxSlab(Decimal(1_500_000), Decimal("0.20")),
        TaxSlab(INF, Decimal("0.30")),
    ),
    professional_tax_slabs=(
        ProfessionalTaxSlab(Decimal(7_500), Decimal(0)),
        ProfessionalTaxSlab(Decimal(10_000), Decimal(175)),
        ProfessionalTaxSlab(INF, Decimal(200)),
    ),
    esi_wage_limit=Decimal(21_000),
    esi_employee_rate=Decimal("0.0075"),
    cess_rate=Decimal("0.04"),             # health & education cess
    rebate_income_limit=Decimal(700_000),  # rebate u/s 87A
    rebate_amount=Decimal(25_000),
)

TAX_TABLES: Dict[str, TaxTables] = {
    FY_2025_26.fiscal_year: FY_2025_26,
}


def get_tax_tables(fiscal_year: Optional[str] = None) -> TaxTables:
    year = fiscal_year or settings.TAX_FISCAL_YEAR
    try:
        return TAX_TABLES[year]
    except KeyError:
        raise ValidationError(f"No tax tables configured for fiscal year {year!r}")
