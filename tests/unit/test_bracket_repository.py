"""Unit tests for bracket retrieval, caching and fallback."""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta, timezone

import pytest

from pesotax.backend.app.services.bracket_repository import (
    DEFAULT_BRACKET_YEAR,
    BracketCache,
    BracketRepository,
    default_bracket_table,
)
from pesotax.backend.config.schema import ConfigurationError


def bracket_rows(tax_year: int) -> list[dict[str, object]]:
    return [
        {
            "tax_year": tax_year,
            "bracket_order": 1,
            "min_income": 0,
            "max_income": 100_000,
            "base_tax": 0,
            "tax_rate": 0.0,
        },
        {
            "tax_year": tax_year,
            "bracket_order": 2,
            "min_income": 100_000,
            "max_income": None,
            "base_tax": 0,
            "tax_rate": 0.10,
        },
    ]


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class RecordingSource:
    def __init__(self, rows_for_year=bracket_rows) -> None:
        self.calls: list[int] = []
        self._rows_for_year = rows_for_year

    def fetch(self, tax_year: int):
        self.calls.append(tax_year)
        return self._rows_for_year(tax_year)


class FailingSource:
    def __init__(self) -> None:
        self.calls = 0

    def fetch(self, tax_year: int):
        self.calls += 1
        raise ConnectionError("bracket store unavailable")


def test_successful_fetch_is_cached_per_year() -> None:
    source = RecordingSource()
    repository = BracketRepository(source)

    first = repository.get_brackets(2030)
    second = repository.get_brackets(2030)
    repository.get_brackets(2031)

    assert first == second
    assert source.calls == [2030, 2031]
    assert len(repository.cache) == 2
    assert [bracket.order for bracket in first] == [1, 2]


def test_cache_entries_expire_after_ttl() -> None:
    clock = FakeClock()
    source = RecordingSource()
    repository = BracketRepository(source, cache=BracketCache(ttl_seconds=3600, clock=clock))

    repository.get_brackets(2030)
    clock.advance(3599)
    repository.get_brackets(2030)
    assert source.calls == [2030]

    clock.advance(1)
    repository.get_brackets(2030)
    assert source.calls == [2030, 2030]


def test_clear_cache_forces_a_refetch() -> None:
    source = RecordingSource()
    repository = BracketRepository(source)

    repository.get_brackets(2030)
    repository.clear_cache()
    repository.get_brackets(2030)

    assert source.calls == [2030, 2030]
    assert len(repository.cache) == 1


def test_inactive_rows_are_dropped_and_order_is_restored() -> None:
    def shuffled_rows(tax_year: int):
        rows = list(reversed(bracket_rows(tax_year)))
        rows.append({**bracket_rows(tax_year)[1], "tax_rate": 0.5, "is_active": False})
        return rows

    repository = BracketRepository(RecordingSource(shuffled_rows))

    brackets = repository.get_brackets(2030)

    assert [bracket.order for bracket in brackets] == [1, 2]
    assert brackets[-1].rate == pytest.approx(0.10)


def test_failed_fetch_falls_back_to_builtin_table(caplog: pytest.LogCaptureFixture) -> None:
    source = FailingSource()
    repository = BracketRepository(source)

    with caplog.at_level(logging.WARNING):
        brackets = repository.get_brackets(2030)

    assert brackets == tuple(default_bracket_table().brackets)
    assert brackets[0].tax_year == DEFAULT_BRACKET_YEAR
    assert any("Failed to fetch 2030" in record.getMessage() for record in caplog.records)


def test_fallback_tables_are_not_cached() -> None:
    source = FailingSource()
    repository = BracketRepository(source)

    repository.get_brackets(2030)
    repository.get_brackets(2030)

    assert source.calls == 2
    assert len(repository.cache) == 0


def test_empty_source_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    repository = BracketRepository(RecordingSource(lambda tax_year: []))

    with caplog.at_level(logging.WARNING):
        table = repository.get_table(2030)

    assert table.tax_year == DEFAULT_BRACKET_YEAR
    assert caplog.records


def test_invalid_table_falls_back() -> None:
    def gapped_rows(tax_year: int):
        rows = bracket_rows(tax_year)
        rows[1] = {**rows[1], "min_income": 150_000}
        return rows

    repository = BracketRepository(RecordingSource(gapped_rows))

    assert repository.get_table(2030).tax_year == DEFAULT_BRACKET_YEAR


def test_slow_source_times_out_and_falls_back(caplog: pytest.LogCaptureFixture) -> None:
    release = threading.Event()

    def blocking_rows(tax_year: int):
        release.wait(timeout=5)
        return bracket_rows(tax_year)

    repository = BracketRepository(RecordingSource(blocking_rows), fetch_timeout=0.05)

    try:
        with caplog.at_level(logging.WARNING):
            table = repository.get_table(2030)
    finally:
        release.set()
        repository.close()

    assert table.tax_year == DEFAULT_BRACKET_YEAR
    assert any("Timed out" in record.getMessage() for record in caplog.records)
    assert len(repository.cache) == 0


def test_hung_source_is_not_refetched_until_it_recovers(
    caplog: pytest.LogCaptureFixture,
) -> None:
    release = threading.Event()

    def recovering_rows(tax_year: int):
        release.wait(timeout=5)
        return bracket_rows(tax_year)

    source = RecordingSource(recovering_rows)
    repository = BracketRepository(source, fetch_timeout=0.1)

    try:
        with caplog.at_level(logging.WARNING):
            for _ in range(5):
                assert repository.get_table(2030).tax_year == DEFAULT_BRACKET_YEAR

        assert source.calls == [2030]

        release.set()
        table = repository.get_table(2030)
    finally:
        release.set()
        repository.close()

    assert table.tax_year == 2030
    assert len(source.calls) <= 2
    assert len(repository.cache) == 1
    timeouts = [record for record in caplog.records if "Timed out" in record.getMessage()]
    assert len(timeouts) == 5


def test_year_configuration_source_serves_configured_years(repository) -> None:
    brackets = repository.get_brackets(2024)

    assert len(brackets) == 6
    assert brackets[0].tax_year == 2024
    assert [bracket.rate for bracket in brackets] == pytest.approx(
        [0.0, 0.20, 0.25, 0.30, 0.32, 0.35]
    )


def test_unconfigured_year_falls_back(repository) -> None:
    table = repository.get_table(2031)

    assert table.tax_year == DEFAULT_BRACKET_YEAR
    assert len(repository.cache) == 0


def test_from_env_reads_cache_and_timeout_settings(monkeypatch) -> None:
    monkeypatch.setenv("PESOTAX_BRACKET_CACHE_TTL", "120")
    monkeypatch.setenv("PESOTAX_BRACKET_FETCH_TIMEOUT", "2.5")
    clock = FakeClock()
    source = RecordingSource()

    repository = BracketRepository.from_env(source, clock=clock)
    try:
        repository.get_brackets(2030)
        clock.advance(121)
        repository.get_brackets(2030)
    finally:
        repository.close()

    assert source.calls == [2030, 2030]


@pytest.mark.parametrize("value", ["soon", "0", "-5"])
def test_from_env_rejects_invalid_settings(monkeypatch, value: str) -> None:
    monkeypatch.setenv("PESOTAX_BRACKET_CACHE_TTL", value)

    with pytest.raises(ConfigurationError):
        BracketRepository.from_env()


def test_constructor_rejects_non_positive_values() -> None:
    with pytest.raises(ValueError):
        BracketCache(ttl_seconds=0)
    with pytest.raises(ValueError):
        BracketRepository(fetch_timeout=0)
