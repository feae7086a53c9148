"""Comparison of the 8% flat tax against the graduated schedule for businesses."""

from __future__ import annotations

from collections.abc import Sequence

from pesotax.backend.app.models import (
    BusinessTaxInput,
    BusinessTaxResult,
    BusinessType,
    RecommendedOption,
    ValidationError,
)
from pesotax.backend.config.schema import TaxBracket, TaxRules

from .progressive import compute_tax
from .utils import ensure_non_negative, round_breakdown, round_currency

FLAT_OPTION: RecommendedOption = "8%"
GRADUATED_OPTION: RecommendedOption = "graduated"


def _validate_business_type(business_type: BusinessType) -> BusinessType:
    if business_type in {
        BusinessType.SOLE_PROPRIETORSHIP,
        BusinessType.PARTNERSHIP,
        BusinessType.CORPORATION,
    }:
        return business_type
    raise ValidationError(f"Unsupported business type: {business_type!r}")


def recommend_option(flat_tax: float, graduated_tax: float) -> RecommendedOption:
    """Return the cheaper option; a tie keeps the simpler flat tax."""

    return GRADUATED_OPTION if graduated_tax < flat_tax else FLAT_OPTION


def compute_business_tax(
    payload: BusinessTaxInput,
    brackets: Sequence[TaxBracket],
    rules: TaxRules,
) -> BusinessTaxResult:
    """Compare both statutory methods for ``payload`` and recommend one."""

    payload = payload.annualised()
    business_type = _validate_business_type(payload.business_type)
    gross_receipts = ensure_non_negative(payload.gross_receipts, "gross_receipts")
    deductions = ensure_non_negative(payload.total_deductions, "total_deductions")

    # The flat option is always levied on gross receipts.
    eight_percent_tax = gross_receipts * rules.flat_business_rate

    net_income = gross_receipts - deductions
    if payload.optional_standard_deduction:
        osd = gross_receipts * rules.optional_standard_deduction_rate
        taxable_income = gross_receipts - osd
    else:
        taxable_income = net_income
    taxable_income = max(0.0, taxable_income)

    bracket_tax = compute_tax(taxable_income, brackets)
    graduated_tax = bracket_tax.total_tax

    return BusinessTaxResult(
        tax_year=payload.tax_year,
        business_type=business_type,
        eight_percent_tax=round_currency(eight_percent_tax),
        graduated_tax=round_currency(graduated_tax),
        recommended_option=recommend_option(eight_percent_tax, graduated_tax),
        savings=round_currency(abs(eight_percent_tax - graduated_tax)),
        net_income=round_currency(net_income),
        taxable_income=round_currency(taxable_income),
        optional_standard_deduction_applied=payload.optional_standard_deduction,
        breakdown=round_breakdown(bracket_tax.breakdown),
    )


__all__ = ["FLAT_OPTION", "GRADUATED_OPTION", "compute_business_tax", "recommend_option"]
