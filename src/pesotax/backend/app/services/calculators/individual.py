"""Annual income tax for individual compensation earners."""

from __future__ import annotations

from collections.abc import Sequence

from pesotax.backend.app.models import (
    DeductionType,
    IndividualTaxInput,
    IndividualTaxResult,
    ValidationError,
)
from pesotax.backend.config.schema import TaxBracket, TaxRules

from .progressive import compute_tax
from .utils import ensure_non_negative, round_breakdown, round_currency, round_rate


def _exempt_amounts(payload: IndividualTaxInput, rules: TaxRules) -> tuple[float, float]:
    # 13th-month pay and other benefits share a single exemption ceiling.
    exempt_thirteenth = min(payload.thirteenth_month_pay, rules.exemption_cap)
    exempt_other = min(payload.other_benefits, rules.exemption_cap - exempt_thirteenth)
    return exempt_thirteenth, exempt_other


def _deduction_amount(payload: IndividualTaxInput, rules: TaxRules) -> float:
    if payload.deduction_type is DeductionType.STANDARD:
        return rules.standard_deduction
    if payload.deduction_type is DeductionType.ITEMIZED:
        if payload.itemized_deductions is None:
            raise ValidationError(
                "Field 'itemized_deductions' is required when the deduction type "
                "is itemized"
            )
        return ensure_non_negative(payload.itemized_deductions, "itemized_deductions")
    raise ValidationError(f"Unsupported deduction type: {payload.deduction_type!r}")


def compute_individual_tax(
    payload: IndividualTaxInput,
    brackets: Sequence[TaxBracket],
    rules: TaxRules,
) -> IndividualTaxResult:
    """Compute annual income tax, withholding balance and rates for ``payload``."""

    payload = payload.annualised()
    for field_name in (
        "gross_annual_income",
        "thirteenth_month_pay",
        "other_benefits",
        "withholding_tax",
    ):
        ensure_non_negative(getattr(payload, field_name), field_name)

    exempt_thirteenth, exempt_other = _exempt_amounts(payload, rules)
    exempt_income = exempt_thirteenth + exempt_other

    gross_income = (
        payload.gross_annual_income + payload.thirteenth_month_pay + payload.other_benefits
    )
    deduction = _deduction_amount(payload, rules)
    taxable_income = max(0.0, gross_income - exempt_income - deduction)

    bracket_tax = compute_tax(taxable_income, brackets)
    tax_due = bracket_tax.total_tax

    withholding = payload.withholding_tax
    tax_payable = max(0.0, tax_due - withholding)
    tax_refund = max(0.0, withholding - tax_due)
    effective_rate = (tax_due / gross_income) * 100 if gross_income > 0 else 0.0

    return IndividualTaxResult(
        tax_year=payload.tax_year,
        gross_income=round_currency(gross_income),
        exempt_income=round_currency(exempt_income),
        exempt_thirteenth_month=round_currency(exempt_thirteenth),
        exempt_other_benefits=round_currency(exempt_other),
        deduction_type=payload.deduction_type,
        deduction_applied=round_currency(deduction),
        taxable_income=round_currency(taxable_income),
        tax_due=round_currency(tax_due),
        withholding_tax=round_currency(withholding),
        tax_payable=round_currency(tax_payable),
        tax_refund=round_currency(tax_refund),
        effective_rate=round_rate(effective_rate),
        marginal_rate=round_rate(bracket_tax.marginal_rate),
        breakdown=round_breakdown(bracket_tax.breakdown),
    )


__all__ = ["compute_individual_tax"]
