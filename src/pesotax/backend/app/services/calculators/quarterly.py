"""Quarterly instalments of the graduated income tax."""

from __future__ import annotations

from collections.abc import Sequence

from pesotax.backend.app.models import (
    QuarterlyInstallment,
    QuarterlyTaxInput,
    QuarterlyTaxResult,
)
from pesotax.backend.config.schema import TaxBracket

from .deadlines import get_deadlines
from .progressive import compute_tax
from .utils import ensure_non_negative, round_currency

QUARTERS = 4


def compute_quarterly_tax(
    payload: QuarterlyTaxInput, brackets: Sequence[TaxBracket]
) -> QuarterlyTaxResult:
    """Split the annual tax on ``payload`` into four equal instalments.

    Rounding differences are absorbed by the final instalment so that the
    instalments always add up to the rounded annual tax.
    """

    taxable_income = ensure_non_negative(
        payload.annual_taxable_income, "annual_taxable_income"
    )
    annual_tax = round_currency(compute_tax(taxable_income, brackets).total_tax)
    quarterly_tax = round_currency(annual_tax / QUARTERS)
    final_installment = round_currency(annual_tax - quarterly_tax * (QUARTERS - 1))

    due_dates = get_deadlines(payload.tax_year).individual.quarterly
    quarters = [
        QuarterlyInstallment(
            quarter=index,
            due_date=due_date,
            amount=final_installment if index == QUARTERS else quarterly_tax,
        )
        for index, due_date in enumerate(due_dates, start=1)
    ]

    return QuarterlyTaxResult(
        tax_year=payload.tax_year,
        annual_taxable_income=round_currency(taxable_income),
        annual_tax=annual_tax,
        quarterly_tax=quarterly_tax,
        quarters=quarters,
    )


__all__ = ["compute_quarterly_tax"]
