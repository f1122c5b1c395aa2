from decimal import Decimal

import pytest

from core.errors import ValidationError
from modules.payroll import salary_calculator as calc
from modules.payroll.tax_tables import FY_2025_26, get_tax_tables


def test_reference_breakdown_for_50000():
    b = calc.compute_breakdown(50000)
    assert b.basic_salary == 20000
    assert b.hra == 20000
    assert b.special_allowance == 10000
    assert b.professional_tax == 200
    assert b.esi == 0
    assert b.tds == 0
    assert b.total_deductions == 200
    assert b.net_salary == 49800


def test_breakdown_for_100000_has_tds():
    # 12L/year: 5% of 4L + 10% of 3L + 15% of 2L = 80,000; +4% cess = 83,200; /12
    b = calc.compute_breakdown(100000)
    assert b.tds == 6933
    assert b.net_salary == 100000 - 200 - 6933


@pytest.mark.parametrize("gross", [1, 999, 7501, 10001, 12345.67, 33333, 58333.34, 250000.5])
def test_earnings_reconcile_to_gross(gross):
    b = calc.compute_breakdown(gross)
    assert b.total_earnings == Decimal(str(gross))
    assert b.net_salary == b.gross_salary - b.total_deductions


def test_rounding_residual_goes_to_special_allowance():
    b = calc.compute_breakdown(10001)
    assert (b.basic_salary, b.hra) == (4000, 4000)
    assert b.special_allowance == 2001


def test_custom_split_and_extras():
    b = calc.compute_breakdown(60000, basic_pct="0.5", hra_pct="0.2", other_allowances=1000, other_deductions=500)
    assert b.basic_salary == 30000
    assert b.hra == 12000
    assert b.special_allowance == 60000 - 30000 - 12000 - 1000
    assert b.other_deductions == 500
    assert b.total_deductions == b.professional_tax + b.esi + b.tds + 500


@pytest.mark.parametrize(
    "gross, expected",
    [(7500, 0), (7501, 175), (10000, 175), (10001, 200), (500000, 200)],
)
def test_professional_tax_steps(gross, expected):
    assert calc.professional_tax(gross) == expected


def test_esi_threshold():
    assert calc.esi_contribution(21000) == 158  # 157.5 rounds half-up
    assert calc.esi_contribution(21001) == 0
    assert calc.compute_breakdown(21000).esi > 0
    assert calc.compute_breakdown(21001).esi == 0


def test_slab_tax_is_marginal():
    assert calc.slab_tax(300000) == 0
    assert calc.slab_tax(700000) == 20000
    assert calc.slab_tax(1000000) == 50000
    assert calc.slab_tax(2000000) == 20000 + 30000 + 30000 + 60000 + 150000


def test_rebate_boundary():
    assert calc.annual_income_tax(700000) == 0
    # 20,000.10 * 1.04 with no rebate
    assert calc.annual_income_tax(700001) == 20800


def test_monthly_tds_divides_annual_tax():
    assert calc.monthly_tds(Decimal(700000) / 12) == 0
    assert calc.monthly_tds(100000) == calc.round_rupee(calc.annual_income_tax(1200000) / 12)


@pytest.mark.parametrize("gross", [0, -1, "abc", float("nan")])
def test_invalid_gross(gross):
    with pytest.raises(ValidationError):
        calc.compute_breakdown(gross)


@pytest.mark.parametrize("kwargs", [{"basic_pct": 0}, {"hra_pct": "1.5"}, {"other_allowances": -1}, {"other_deductions": -1}])
def test_invalid_options(kwargs):
    with pytest.raises(ValidationError):
        calc.compute_breakdown(50000, **kwargs)


def test_components_exceeding_gross_rejected():
    with pytest.raises(ValidationError):
        calc.compute_breakdown(50000, basic_pct="0.5", hra_pct="0.6")


def test_as_dict_uses_plain_numbers():
    d = calc.compute_breakdown(50000).as_dict()
    assert d["net_salary"] == 49800
    assert isinstance(d["net_salary"], int)


def test_calculate_net_salary():
    assert calc.calculate_net_salary(50000) == 49800


@pytest.mark.parametrize(
    "amount, expected",
    [
        (Decimal(999), "₹999"),
        (Decimal(1234567), "₹12,34,567"),
        (Decimal("1234.5"), "₹1,234.50"),
        (Decimal(-100000), "-₹1,00,000"),
    ],
)
def test_format_inr(amount, expected):
    assert calc.format_inr(amount) == expected


def test_salary_summary():
    text = calc.salary_summary(50000)
    assert "Gross Salary: ₹50,000" in text
    assert "Basic: ₹20,000 (40%)" in text
    assert "Net Salary: ₹49,800" in text


def test_validate_salary_structure():
    ok, errors = calc.validate_salary_structure(calc.compute_breakdown(50000))
    assert ok and errors == []

    ok, errors = calc.validate_salary_structure(calc.compute_breakdown(50000, basic_pct="0.3", hra_pct="0.55"))
    assert not ok
    assert "Basic salary should be at least 40% of gross salary" in errors
    assert "HRA should not exceed 50% of gross salary" in errors


def test_tax_tables_lookup():
    assert get_tax_tables() is FY_2025_26
    with pytest.raises(ValidationError):
        get_tax_tables("1999-00")
