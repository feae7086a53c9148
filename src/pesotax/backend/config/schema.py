"""Pydantic models describing the tax year configuration schema."""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

# Cumulative base tax figures are published rounded to the peso.
_BASE_TAX_TOLERANCE = 0.5


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class DeductionType(str, Enum):
    """Deduction regimes available to individual taxpayers."""

    STANDARD = "standard"
    ITEMIZED = "itemized"


class IncomeCategory(str, Enum):
    """Income categories subject to creditable withholding."""

    COMPENSATION = "compensation"
    PROFESSIONAL_FEES = "professional_fees"
    RENTAL_INCOME = "rental_income"
    INTEREST_INCOME = "interest_income"
    DIVIDEND_INCOME = "dividend_income"


class BusinessType(str, Enum):
    """Organisational forms accepted by the business tax comparison."""

    SOLE_PROPRIETORSHIP = "sole_proprietorship"
    PARTNERSHIP = "partnership"
    CORPORATION = "corporation"


class TaxpayerCategory(str, Enum):
    """Taxpayer groups with their own filing calendar."""

    INDIVIDUAL = "individual"
    BUSINESS = "business"
    CORPORATE = "corporate"


class TaxBracket(ImmutableModel):
    """Represents a single progressive tax bracket for one tax year."""

    tax_year: int
    order: int = Field(alias="bracket_order")
    min_income: float
    max_income: float | None = None
    base_tax: float = 0.0
    rate: float = Field(alias="tax_rate")
    excess_over: float
    is_active: bool = True

    @model_validator(mode="before")
    @classmethod
    def _default_excess_over(cls, data: Any) -> Any:
        if isinstance(data, Mapping) and "excess_over" not in data:
            prepared = dict(data)
            prepared["excess_over"] = prepared.get("min_income", 0.0)
            return prepared
        return data

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.order <= 0:
            raise ConfigurationError("Bracket order must be a positive integer")
        if not 0 <= self.rate <= 1:
            raise ConfigurationError("Tax rates must be between 0 and 1")
        if self.min_income < 0:
            raise ConfigurationError("Bracket lower bounds must be non-negative")
        if self.max_income is not None and self.max_income <= self.min_income:
            raise ConfigurationError("Bracket upper bounds must exceed the lower bound")
        if self.base_tax < 0:
            raise ConfigurationError("Base tax amounts must be non-negative")
        return self

    @property
    def is_open_ended(self) -> bool:
        return self.max_income is None

    def contains(self, amount: float) -> bool:
        """Return ``True`` when ``amount`` falls inside ``(min_income, max_income]``."""

        if amount <= self.min_income:
            return False
        return self.max_income is None or amount <= self.max_income


class BracketTable(ImmutableModel):
    """Ordered set of active brackets for a single tax year."""

    tax_year: int
    brackets: Sequence[TaxBracket]

    @field_validator("brackets", mode="after")
    @classmethod
    def _order_active_brackets(cls, value: Sequence[TaxBracket]) -> tuple[TaxBracket, ...]:
        active = [bracket for bracket in value if bracket.is_active]
        active.sort(key=lambda bracket: (bracket.order, bracket.min_income))
        return tuple(active)

    @model_validator(mode="after")
    def _validate_sequence(self) -> BracketTable:
        if not self.brackets:
            raise ConfigurationError("At least one active tax bracket must be defined")

        if self.brackets[0].min_income != 0:
            raise ConfigurationError("The first tax bracket must start at zero income")

        cumulative_tax = 0.0
        previous: TaxBracket | None = None
        for bracket in self.brackets:
            if bracket.tax_year != self.tax_year:
                raise ConfigurationError(
                    f"Bracket {bracket.order} belongs to {bracket.tax_year}, "
                    f"expected {self.tax_year}"
                )
            if bracket.excess_over != bracket.min_income:
                raise ConfigurationError(
                    f"Bracket {bracket.order} must tax the excess over its lower bound"
                )
            if previous is not None:
                if previous.max_income is None:
                    raise ConfigurationError("Only the final tax bracket may be open-ended")
                if bracket.min_income != previous.max_income:
                    raise ConfigurationError(
                        f"Bracket {bracket.order} must start where bracket "
                        f"{previous.order} ends"
                    )
                if bracket.rate < previous.rate:
                    raise ConfigurationError("Tax rates must not decrease across brackets")
            if abs(bracket.base_tax - cumulative_tax) > _BASE_TAX_TOLERANCE:
                raise ConfigurationError(
                    f"Bracket {bracket.order} base tax {bracket.base_tax:,.2f} does not "
                    f"match the cumulative tax of lower brackets ({cumulative_tax:,.2f})"
                )
            if bracket.max_income is not None:
                cumulative_tax += (bracket.max_income - bracket.min_income) * bracket.rate
            previous = bracket

        if self.brackets[-1].max_income is not None:
            raise ConfigurationError("Final tax bracket must have an open upper bound")
        return self

    @classmethod
    def from_rows(cls, tax_year: int, rows: Sequence[Any]) -> BracketTable:
        """Validate raw store rows (mappings or brackets) into a table."""

        try:
            return cls.model_validate({"tax_year": tax_year, "brackets": list(rows)})
        except ValidationError as error:
            raise ConfigurationError(
                f"Tax bracket validation failed for {tax_year}: {error}"
            ) from error


class WithholdingRate(ImmutableModel):
    """Resident and non-resident withholding rates for an income category."""

    resident: float
    non_resident: float

    @model_validator(mode="after")
    def _validate_rates(self) -> WithholdingRate:
        for rate in (self.resident, self.non_resident):
            if not 0 <= rate <= 1:
                raise ConfigurationError("Withholding rates must be between 0 and 1")
        return self


def _default_withholding_rates() -> dict[IncomeCategory, WithholdingRate]:
    return {
        IncomeCategory.COMPENSATION: WithholdingRate(resident=0.0, non_resident=0.25),
        IncomeCategory.PROFESSIONAL_FEES: WithholdingRate(resident=0.10, non_resident=0.25),
        IncomeCategory.RENTAL_INCOME: WithholdingRate(resident=0.05, non_resident=0.25),
        IncomeCategory.INTEREST_INCOME: WithholdingRate(resident=0.20, non_resident=0.25),
        IncomeCategory.DIVIDEND_INCOME: WithholdingRate(resident=0.10, non_resident=0.25),
    }


class TaxRules(ImmutableModel):
    """Statutory constants applied by the calculation engines."""

    exemption_cap: float = 90_000.0
    standard_deduction: float = 90_000.0
    flat_business_rate: float = 0.08
    optional_standard_deduction_rate: float = 0.40
    withholding_rates: Mapping[IncomeCategory, WithholdingRate] = Field(
        default_factory=_default_withholding_rates
    )

    @model_validator(mode="after")
    def _validate_rules(self) -> Self:
        if self.exemption_cap < 0:
            raise ConfigurationError("'exemption_cap' must be non-negative")
        if self.standard_deduction < 0:
            raise ConfigurationError("'standard_deduction' must be non-negative")
        for name in ("flat_business_rate", "optional_standard_deduction_rate"):
            value = getattr(self, name)
            if not 0 <= value <= 1:
                raise ConfigurationError(f"'{name}' must be between 0 and 1")
        missing = [
            category.value
            for category in IncomeCategory
            if category not in self.withholding_rates
        ]
        if missing:
            raise ConfigurationError(
                f"Withholding rates missing for categories: {', '.join(missing)}"
            )
        return self

    def withholding_rate(self, category: IncomeCategory, is_resident: bool) -> float:
        entry = self.withholding_rates[category]
        return entry.resident if is_resident else entry.non_resident


class YearConfiguration(ImmutableModel):
    """Structured representation of a tax year configuration."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    brackets: BracketTable
    rules: TaxRules = Field(default_factory=TaxRules)

    @model_validator(mode="before")
    @classmethod
    def _prepare_sections(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        year = prepared.get("year")
        rows = prepared.get("brackets")
        if isinstance(rows, Sequence) and not isinstance(rows, (str, bytes)):
            prepared_rows = []
            for row in rows:
                if not isinstance(row, Mapping):
                    raise ConfigurationError("Tax bracket entries must be mappings")
                entry = dict(row)
                entry.setdefault("tax_year", year)
                prepared_rows.append(entry)
            prepared["brackets"] = {"tax_year": year, "brackets": prepared_rows}
        elif not isinstance(rows, (Mapping, BracketTable)):
            raise ConfigurationError("Configuration must include a 'brackets' list")

        if prepared.get("rules") is None:
            prepared["rules"] = {}
        return prepared


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported tax year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available tax year configuration files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "BracketTable",
    "BusinessType",
    "ConfigurationError",
    "DeductionType",
    "ImmutableModel",
    "IncomeCategory",
    "TaxBracket",
    "TaxRules",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "TaxpayerCategory",
    "WithholdingRate",
    "YearConfiguration",
    "ValidationError",
]
