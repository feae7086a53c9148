"""Flat-rate creditable withholding by income category and residency."""

from __future__ import annotations

from pesotax.backend.app.models import (
    IncomeCategory,
    ValidationError,
    WithholdingTaxInput,
    WithholdingTaxResult,
)
from pesotax.backend.config.schema import TaxRules

from .utils import ensure_non_negative, round_currency, round_rate


def withholding_rate(category: IncomeCategory, is_resident: bool, rules: TaxRules) -> float:
    """Return the rate for ``category``; resident compensation is withheld via payroll."""

    if category not in rules.withholding_rates:
        raise ValidationError(f"Unknown income category: {category!r}")
    return rules.withholding_rate(category, is_resident)


def compute_withholding(payload: WithholdingTaxInput, rules: TaxRules) -> WithholdingTaxResult:
    """Return the amount withheld from ``payload.amount`` over a year."""

    payload = payload.annualised()
    amount = ensure_non_negative(payload.amount, "amount")
    rate = withholding_rate(payload.tax_type, payload.is_resident, rules)

    return WithholdingTaxResult(
        tax_year=payload.tax_year,
        amount=round_currency(amount),
        tax_type=payload.tax_type,
        is_resident=payload.is_resident,
        rate=round_rate(rate),
        withheld=round_currency(amount * rate),
    )


__all__ = ["compute_withholding", "withholding_rate"]
