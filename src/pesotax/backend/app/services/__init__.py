"""Service-layer helpers for the PesoTax backend."""

from .bracket_repository import BracketCache, BracketRepository, default_bracket_table
from .calculation_service import (
    calculate_business_tax,
    calculate_individual_tax,
    calculate_quarterly_tax,
    calculate_withholding_tax,
    deadline_calendar,
    deadline_schedule,
)
from .tin import format_tin, validate_tin

__all__ = [
    "BracketCache",
    "BracketRepository",
    "calculate_business_tax",
    "calculate_individual_tax",
    "calculate_quarterly_tax",
    "calculate_withholding_tax",
    "deadline_calendar",
    "deadline_schedule",
    "default_bracket_table",
    "format_tin",
    "validate_tin",
]
