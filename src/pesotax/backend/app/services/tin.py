"""Taxpayer Identification Number helpers."""

from __future__ import annotations

import re

_TIN_PATTERN = re.compile(r"\d{3}-\d{3}-\d{3}-\d{3}")
_NON_DIGITS = re.compile(r"\D")
TIN_DIGITS = 12


def validate_tin(tin: str) -> bool:
    """Return ``True`` when ``tin`` uses the dashed ``XXX-XXX-XXX-XXX`` form."""

    return _TIN_PATTERN.fullmatch(tin) is not None


def format_tin(tin: str) -> str:
    """Format a 12-digit TIN with dashes; other input is returned unchanged."""

    digits = _NON_DIGITS.sub("", tin)
    if len(digits) != TIN_DIGITS:
        return tin
    return "-".join(digits[index : index + 3] for index in range(0, TIN_DIGITS, 3))


__all__ = ["TIN_DIGITS", "format_tin", "validate_tin"]
