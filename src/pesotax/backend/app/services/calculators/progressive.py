"""Progressive bracket tax shared by the individual, business and quarterly engines.

Tax is the sum of the marginal slices: each bracket the income enters taxes
only the part of the income that falls inside it. The ``base_tax`` column of a
bracket table is the cumulative slice tax of every lower bracket, so it is
never added on top of the slices. :func:`tax_from_base` evaluates the same
schedule through the statutory "base tax plus rate on the excess" form and
must always agree with :func:`compute_tax`.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

from pesotax.backend.app.models import BracketBreakdownEntry, BracketTaxResult
from pesotax.backend.config.schema import TaxBracket

from .utils import ensure_non_negative


def compute_tax(taxable_income: float, brackets: Sequence[TaxBracket]) -> BracketTaxResult:
    """Calculate progressive tax for ``taxable_income`` using ordered ``brackets``."""

    ensure_non_negative(taxable_income, "taxable_income")

    total = 0.0
    marginal_rate = 0.0
    breakdown: list[BracketBreakdownEntry] = []

    for bracket in brackets:
        if taxable_income <= bracket.min_income:
            break

        upper = bracket.max_income if bracket.max_income is not None else math.inf
        taxable_slice = min(taxable_income, upper) - bracket.min_income
        if taxable_slice <= 0:
            continue

        slice_tax = taxable_slice * bracket.rate
        total += slice_tax
        marginal_rate = bracket.rate * 100
        breakdown.append(
            BracketBreakdownEntry(
                bracket=bracket.order,
                min_income=bracket.min_income,
                max_income=bracket.max_income,
                taxable_amount=taxable_slice,
                rate=bracket.rate * 100,
                tax_amount=slice_tax,
            )
        )

    return BracketTaxResult(
        total_tax=total,
        breakdown=tuple(breakdown),
        marginal_rate=marginal_rate,
    )


def find_bracket(amount: float, brackets: Sequence[TaxBracket]) -> TaxBracket | None:
    """Return the bracket whose range contains ``amount`` (``None`` at zero)."""

    for bracket in brackets:
        if bracket.contains(amount):
            return bracket
    return None


def tax_from_base(taxable_income: float, brackets: Sequence[TaxBracket]) -> float:
    """Evaluate the schedule as ``base_tax + rate * (income - excess_over)``."""

    ensure_non_negative(taxable_income, "taxable_income")

    bracket = find_bracket(taxable_income, brackets)
    if bracket is None:
        return 0.0
    return bracket.base_tax + (taxable_income - bracket.excess_over) * bracket.rate


__all__ = ["compute_tax", "find_bracket", "tax_from_base"]
