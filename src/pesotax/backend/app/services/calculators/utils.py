"""Utility helpers for calculator modules."""

from __future__ import annotations

import math
from collections.abc import Iterable

from pesotax.backend.app.models import BracketBreakdownEntry, ValidationError


def ensure_non_negative(value: float, field_name: str) -> float:
    """Return ``value`` or raise when it is negative or not a finite number."""

    if not math.isfinite(value):
        raise ValidationError(f"Field '{field_name}' must be a finite number")
    if value < 0:
        raise ValidationError(f"Field '{field_name}' cannot be negative")
    return value


def round_currency(value: float) -> float:
    """Round monetary amounts to two decimals."""

    return round(value, 2)


def round_rate(value: float) -> float:
    """Round rate values to four decimals."""

    return round(value, 4)


def round_breakdown(
    entries: Iterable[BracketBreakdownEntry],
) -> list[BracketBreakdownEntry]:
    """Return breakdown rows with monetary fields rounded for output."""

    return [
        entry.model_copy(
            update={
                "taxable_amount": round_currency(entry.taxable_amount),
                "tax_amount": round_currency(entry.tax_amount),
                "rate": round_rate(entry.rate),
            }
        )
        for entry in entries
    ]
