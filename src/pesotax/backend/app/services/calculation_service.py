"""Validate payloads, resolve year data, and dispatch to the calculation engines.

Each entry point accepts either a raw mapping (as decoded from JSON) or the
already-validated input model, resolves brackets through the caller's
:class:`BracketRepository` and the statutory rules through the year
configuration, and returns the engine's frozen result model. Pydantic errors
are translated into :class:`ValidationError` so callers handle a single
exception type.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from datetime import date
from time import perf_counter
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from pesotax.backend.app.models import (
    BusinessTaxInput,
    BusinessTaxResult,
    DeadlineEntry,
    IndividualTaxInput,
    IndividualTaxResult,
    QuarterlyTaxInput,
    QuarterlyTaxResult,
    TaxDeadlineSet,
    ValidationError,
    WithholdingTaxInput,
    WithholdingTaxResult,
    format_validation_error,
)
from pesotax.backend.config.year_config import load_tax_rules

from .bracket_repository import BracketRepository
from .calculators import (
    compute_business_tax,
    compute_individual_tax,
    compute_quarterly_tax,
    compute_withholding,
    get_deadlines,
    list_deadlines,
)

_LOGGER = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("PESOTAX_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _log_timings(operation: str, timings: dict[str, float] | None) -> None:
    if timings is None:
        return
    _LOGGER.debug(
        "%s timings (ms): %s",
        operation,
        {name: round(duration * 1000, 3) for name, duration in timings.items()},
    )


def _parse_payload(model: type[ModelT], payload: Mapping[str, Any] | ModelT) -> ModelT:
    if isinstance(payload, model):
        return payload
    if not isinstance(payload, Mapping):
        raise ValidationError("Payload must be a mapping")
    if "tax_year" not in payload:
        raise ValidationError("Payload must include a tax year")
    try:
        return model.model_validate(dict(payload))
    except PydanticValidationError as exc:
        raise ValidationError(format_validation_error(exc)) from exc


def calculate_individual_tax(
    payload: Mapping[str, Any] | IndividualTaxInput,
    repository: BracketRepository,
) -> IndividualTaxResult:
    """Compute individual income tax for ``payload``."""

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    request = _parse_payload(IndividualTaxInput, payload)

    with _profile_section("resolve_year", timings):
        brackets = repository.get_brackets(request.tax_year)
        rules = load_tax_rules(request.tax_year)

    with _profile_section("compute", timings):
        result = compute_individual_tax(request, brackets, rules)

    _log_timings("calculate_individual_tax", timings)
    return result


def calculate_business_tax(
    payload: Mapping[str, Any] | BusinessTaxInput,
    repository: BracketRepository,
) -> BusinessTaxResult:
    """Compare the flat and graduated business tax options for ``payload``."""

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    request = _parse_payload(BusinessTaxInput, payload)

    with _profile_section("resolve_year", timings):
        brackets = repository.get_brackets(request.tax_year)
        rules = load_tax_rules(request.tax_year)

    with _profile_section("compute", timings):
        result = compute_business_tax(request, brackets, rules)

    _log_timings("calculate_business_tax", timings)
    return result


def calculate_withholding_tax(
    payload: Mapping[str, Any] | WithholdingTaxInput,
) -> WithholdingTaxResult:
    """Return the creditable withholding for a single payment."""

    request = _parse_payload(WithholdingTaxInput, payload)
    return compute_withholding(request, load_tax_rules(request.tax_year))


def calculate_quarterly_tax(
    payload: Mapping[str, Any] | QuarterlyTaxInput,
    repository: BracketRepository,
) -> QuarterlyTaxResult:
    """Split the annual graduated tax into quarterly instalments."""

    request = _parse_payload(QuarterlyTaxInput, payload)
    brackets = repository.get_brackets(request.tax_year)
    return compute_quarterly_tax(request, brackets)


def deadline_schedule(tax_year: int) -> TaxDeadlineSet:
    """Return the filing and payment deadlines for ``tax_year``."""

    return get_deadlines(tax_year)


def deadline_calendar(tax_year: int, today: date | None = None) -> list[DeadlineEntry]:
    """Return the deadlines for ``tax_year`` as date-ordered calendar entries."""

    return list_deadlines(tax_year, today)


__all__ = [
    "calculate_business_tax",
    "calculate_individual_tax",
    "calculate_quarterly_tax",
    "calculate_withholding_tax",
    "deadline_calendar",
    "deadline_schedule",
]
