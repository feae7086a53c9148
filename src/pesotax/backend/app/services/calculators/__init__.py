"""Domain-specific calculation helpers."""

from .business import compute_business_tax, recommend_option
from .deadlines import get_deadlines, list_deadlines
from .individual import compute_individual_tax
from .progressive import compute_tax, find_bracket, tax_from_base
from .quarterly import compute_quarterly_tax
from .utils import round_currency, round_rate
from .withholding import compute_withholding, withholding_rate

__all__ = [
    "compute_business_tax",
    "compute_individual_tax",
    "compute_quarterly_tax",
    "compute_tax",
    "compute_withholding",
    "find_bracket",
    "get_deadlines",
    "list_deadlines",
    "recommend_option",
    "round_currency",
    "round_rate",
    "tax_from_base",
    "withholding_rate",
]
