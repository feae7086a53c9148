"""Unit tests for the business tax option comparison."""

from __future__ import annotations

import pytest

from pesotax.backend.app.models import BusinessTaxInput, BusinessType
from pesotax.backend.app.services.calculators import (
    compute_business_tax,
    recommend_option,
)


def build_input(**overrides) -> BusinessTaxInput:
    return BusinessTaxInput.model_validate({"tax_year": 2024, **overrides})


def test_graduated_option_wins_when_deductions_are_large(brackets, rules) -> None:
    payload = build_input(gross_receipts=500_000, total_deductions=200_000)

    result = compute_business_tax(payload, brackets, rules)

    assert result.eight_percent_tax == pytest.approx(40_000)
    assert result.net_income == 300_000
    assert result.taxable_income == 300_000
    assert result.graduated_tax == pytest.approx(10_000)
    assert result.recommended_option == "graduated"
    assert result.savings == pytest.approx(30_000)
    assert result.business_type is BusinessType.SOLE_PROPRIETORSHIP


def test_flat_option_wins_for_high_margin_business(brackets, rules) -> None:
    payload = build_input(gross_receipts=1_000_000, total_deductions=100_000)

    result = compute_business_tax(payload, brackets, rules)

    assert result.eight_percent_tax == pytest.approx(80_000)
    assert result.graduated_tax == pytest.approx(160_000)
    assert result.recommended_option == "8%"
    assert result.savings == pytest.approx(80_000)


def test_optional_standard_deduction_ignores_declared_deductions(brackets, rules) -> None:
    payload = build_input(
        gross_receipts=1_000_000,
        total_deductions=900_000,
        optional_standard_deduction=True,
    )

    result = compute_business_tax(payload, brackets, rules)

    assert result.optional_standard_deduction_applied is True
    assert result.taxable_income == 600_000
    assert result.net_income == 100_000
    assert result.graduated_tax == pytest.approx(80_000)


def test_equal_taxes_recommend_the_flat_option(brackets, rules) -> None:
    payload = build_input(gross_receipts=1_000_000, optional_standard_deduction=True)

    result = compute_business_tax(payload, brackets, rules)

    assert result.eight_percent_tax == pytest.approx(result.graduated_tax)
    assert result.recommended_option == "8%"
    assert result.savings == 0


def test_losses_floor_taxable_income_at_zero(brackets, rules) -> None:
    payload = build_input(gross_receipts=100_000, total_deductions=150_000)

    result = compute_business_tax(payload, brackets, rules)

    assert result.net_income == -50_000
    assert result.taxable_income == 0
    assert result.graduated_tax == 0
    assert result.recommended_option == "graduated"


def test_monthly_receipts_are_annualised(brackets, rules) -> None:
    payload = build_input(gross_receipts=50_000, total_deductions=10_000, period="monthly")

    result = compute_business_tax(payload, brackets, rules)

    assert result.eight_percent_tax == pytest.approx(48_000)
    assert result.net_income == 480_000


def test_recommend_option_prefers_flat_on_tie() -> None:
    assert recommend_option(10_000, 10_000) == "8%"
    assert recommend_option(10_000, 9_999.99) == "graduated"
    assert recommend_option(10_000, 10_000.01) == "8%"
