"""Unit tests for TIN helpers."""

from __future__ import annotations

import pytest

from pesotax.backend.app.services import format_tin, validate_tin


@pytest.mark.parametrize(
    ("tin", "expected"),
    [
        ("123-456-789-000", True),
        ("123-456-789-000\n", False),
        (" 123-456-789-000", False),
        ("123456789000", False),
        ("123-456-789", False),
        ("123-456-789-0000", False),
        ("abc-def-ghi-jkl", False),
        ("", False),
    ],
)
def test_validate_tin(tin: str, expected: bool) -> None:
    assert validate_tin(tin) is expected


def test_format_tin_inserts_dashes_for_twelve_digits() -> None:
    assert format_tin("123456789000") == "123-456-789-000"
    assert format_tin("123 456 789 000") == "123-456-789-000"


def test_format_tin_leaves_other_lengths_unchanged() -> None:
    assert format_tin("12345") == "12345"
    assert format_tin("123-456-789") == "123-456-789"
