"""Pydantic models describing the public calculation surface."""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from typing_extensions import Self

from pesotax.backend.config.schema import (
    BusinessType,
    DeductionType,
    IncomeCategory,
    TaxpayerCategory,
)

__all__ = [
    "BracketBreakdownEntry",
    "BusinessTaxInput",
    "BusinessTaxResult",
    "DeadlineEntry",
    "DeadlineSchedule",
    "IndividualTaxInput",
    "IndividualTaxResult",
    "PeriodType",
    "QuarterlyInstallment",
    "QuarterlyTaxInput",
    "QuarterlyTaxResult",
    "RecommendedOption",
    "TaxDeadlineSet",
    "ValidationError",
    "WithholdingTaxInput",
    "WithholdingTaxResult",
    "format_validation_error",
]

MONTHS_PER_YEAR = 12

RecommendedOption = Literal["8%", "graduated"]


class ValidationError(ValueError):
    """Raised when calculation inputs are rejected."""


class PeriodType(str, Enum):
    """Period in which monetary inputs are expressed."""

    MONTHLY = "monthly"
    ANNUAL = "annual"


class _CalculationModel(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class _TaxYearInput(_CalculationModel):
    tax_year: int = Field(..., ge=1900, le=2100)


class IndividualTaxInput(_TaxYearInput):
    """Annual compensation income supplied by an individual taxpayer."""

    gross_annual_income: float = Field(default=0.0, ge=0)
    thirteenth_month_pay: float = Field(default=0.0, ge=0)
    other_benefits: float = Field(default=0.0, ge=0)
    deduction_type: DeductionType = DeductionType.STANDARD
    itemized_deductions: float | None = Field(default=None, ge=0)
    withholding_tax: float = Field(default=0.0, ge=0)
    period: PeriodType = PeriodType.ANNUAL

    @field_validator("withholding_tax", mode="before")
    @classmethod
    def _default_withholding(cls, value: Any) -> Any:
        return 0.0 if value is None else value

    def annualised(self) -> Self:
        """Return a copy with every amount expressed per year."""

        if self.period is PeriodType.ANNUAL:
            return self
        itemized = self.itemized_deductions
        return self.model_copy(
            update={
                "gross_annual_income": self.gross_annual_income * MONTHS_PER_YEAR,
                "thirteenth_month_pay": self.thirteenth_month_pay * MONTHS_PER_YEAR,
                "other_benefits": self.other_benefits * MONTHS_PER_YEAR,
                "itemized_deductions": (
                    itemized * MONTHS_PER_YEAR if itemized is not None else None
                ),
                "withholding_tax": self.withholding_tax * MONTHS_PER_YEAR,
                "period": PeriodType.ANNUAL,
            }
        )


class BusinessTaxInput(_TaxYearInput):
    """Gross receipts and deductions declared by a business taxpayer."""

    gross_receipts: float = Field(default=0.0, ge=0)
    total_deductions: float = Field(default=0.0, ge=0)
    business_type: BusinessType = BusinessType.SOLE_PROPRIETORSHIP
    optional_standard_deduction: bool = False
    period: PeriodType = PeriodType.ANNUAL

    def annualised(self) -> Self:
        if self.period is PeriodType.ANNUAL:
            return self
        return self.model_copy(
            update={
                "gross_receipts": self.gross_receipts * MONTHS_PER_YEAR,
                "total_deductions": self.total_deductions * MONTHS_PER_YEAR,
                "period": PeriodType.ANNUAL,
            }
        )


class WithholdingTaxInput(_TaxYearInput):
    """Single payment subject to creditable withholding."""

    amount: float = Field(..., ge=0)
    tax_type: IncomeCategory
    is_resident: bool = True
    period: PeriodType = PeriodType.ANNUAL

    def annualised(self) -> Self:
        if self.period is PeriodType.ANNUAL:
            return self
        return self.model_copy(
            update={"amount": self.amount * MONTHS_PER_YEAR, "period": PeriodType.ANNUAL}
        )


class QuarterlyTaxInput(_TaxYearInput):
    """Annual taxable income to be split into quarterly instalments."""

    annual_taxable_income: float = Field(..., ge=0)


class BracketBreakdownEntry(_CalculationModel):
    """Tax attributable to one bracket; ``rate`` is a percentage."""

    bracket: int
    min_income: float
    max_income: float | None
    taxable_amount: float
    rate: float
    tax_amount: float


class IndividualTaxResult(_CalculationModel):
    tax_year: int
    gross_income: float
    exempt_income: float
    exempt_thirteenth_month: float
    exempt_other_benefits: float
    deduction_type: DeductionType
    deduction_applied: float
    taxable_income: float
    tax_due: float
    withholding_tax: float
    tax_payable: float
    tax_refund: float
    effective_rate: float
    marginal_rate: float
    breakdown: list[BracketBreakdownEntry] = Field(default_factory=list)


class BusinessTaxResult(_CalculationModel):
    tax_year: int
    business_type: BusinessType
    eight_percent_tax: float
    graduated_tax: float
    recommended_option: RecommendedOption
    savings: float
    net_income: float
    taxable_income: float
    optional_standard_deduction_applied: bool
    breakdown: list[BracketBreakdownEntry] = Field(default_factory=list)


class WithholdingTaxResult(_CalculationModel):
    tax_year: int
    amount: float
    tax_type: IncomeCategory
    is_resident: bool
    rate: float
    withheld: float


class QuarterlyInstallment(_CalculationModel):
    quarter: int = Field(..., ge=1, le=4)
    due_date: date
    amount: float


class QuarterlyTaxResult(_CalculationModel):
    tax_year: int
    annual_taxable_income: float
    annual_tax: float
    quarterly_tax: float
    quarters: list[QuarterlyInstallment]


class DeadlineSchedule(_CalculationModel):
    """Annual filing date plus the four quarterly payment dates."""

    annual: date
    quarterly: list[date] = Field(..., min_length=4, max_length=4)


class TaxDeadlineSet(_CalculationModel):
    tax_year: int
    individual: DeadlineSchedule
    business: DeadlineSchedule
    corporate: DeadlineSchedule

    def for_category(self, category: TaxpayerCategory) -> DeadlineSchedule:
        return getattr(self, category.value)


class DeadlineEntry(_CalculationModel):
    """Flattened deadline suitable for calendar displays."""

    id: str
    title: str
    taxpayer: TaxpayerCategory
    category: Literal["annual", "quarterly"]
    form_type: str
    due_date: date
    is_overdue: bool
    days_until: int
    priority: Literal["high", "medium"]


def format_validation_error(error: PydanticValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
