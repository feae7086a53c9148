"""Typed inputs, results, and intermediate values shared by the engines.

Inputs and results are frozen Pydantic models so that the HTTP layer and any
persistence collaborator can serialise them without hidden state. Values that
only live between the bracket calculator and an engine use plain dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass

from pesotax.backend.config.schema import (
    BusinessType,
    DeductionType,
    IncomeCategory,
    TaxpayerCategory,
)

from .api import (
    BracketBreakdownEntry,
    BusinessTaxInput,
    BusinessTaxResult,
    DeadlineEntry,
    DeadlineSchedule,
    IndividualTaxInput,
    IndividualTaxResult,
    PeriodType,
    QuarterlyInstallment,
    QuarterlyTaxInput,
    QuarterlyTaxResult,
    RecommendedOption,
    TaxDeadlineSet,
    ValidationError,
    WithholdingTaxInput,
    WithholdingTaxResult,
    format_validation_error,
)

__all__ = [
    "BracketBreakdownEntry",
    "BracketTaxResult",
    "BusinessTaxInput",
    "BusinessTaxResult",
    "BusinessType",
    "DeadlineEntry",
    "DeadlineSchedule",
    "DeductionType",
    "IncomeCategory",
    "IndividualTaxInput",
    "IndividualTaxResult",
    "PeriodType",
    "QuarterlyInstallment",
    "QuarterlyTaxInput",
    "QuarterlyTaxResult",
    "RecommendedOption",
    "TaxDeadlineSet",
    "TaxpayerCategory",
    "ValidationError",
    "WithholdingTaxInput",
    "WithholdingTaxResult",
    "format_validation_error",
]


@dataclass(frozen=True, slots=True)
class BracketTaxResult:
    """Unrounded output of the progressive bracket calculation."""

    total_tax: float
    breakdown: tuple[BracketBreakdownEntry, ...]
    marginal_rate: float

    @property
    def top_bracket(self) -> int | None:
        if not self.breakdown:
            return None
        return self.breakdown[-1].bracket
