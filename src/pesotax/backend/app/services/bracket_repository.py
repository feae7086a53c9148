"""Tax bracket retrieval with a per-year TTL cache and a built-in fallback table.

Brackets come from a :class:`BracketSource` (the YAML year configuration by
default, or any store that returns bracket rows for a year). Successful
fetches are cached per tax year for an hour. When a fetch fails, times out or
returns an unusable table, the repository logs a warning and serves the
built-in 2024 schedule instead of raising; fallback tables are never cached so
the next call tries the source again.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FetchTimeoutError
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from threading import Lock
from typing import Any, Callable, Protocol

from pesotax.backend.config.schema import BracketTable, ConfigurationError, TaxBracket
from pesotax.backend.config.year_config import load_year_configuration

_LOGGER = logging.getLogger(__name__)

DEFAULT_CACHE_TTL_SECONDS = 60 * 60
DEFAULT_BRACKET_YEAR = 2024

CACHE_TTL_ENV = "PESOTAX_BRACKET_CACHE_TTL"
FETCH_TIMEOUT_ENV = "PESOTAX_BRACKET_FETCH_TIMEOUT"

# (order, min_income, max_income, base_tax, rate)
_DEFAULT_BRACKET_ROWS: tuple[tuple[int, float, float | None, float, float], ...] = (
    (1, 0, 250_000, 0, 0.0),
    (2, 250_000, 400_000, 0, 0.20),
    (3, 400_000, 800_000, 30_000, 0.25),
    (4, 800_000, 2_000_000, 130_000, 0.30),
    (5, 2_000_000, 8_000_000, 490_000, 0.32),
    (6, 8_000_000, None, 2_410_000, 0.35),
)

BracketRow = Mapping[str, Any] | TaxBracket


class BracketSource(Protocol):
    """Read-only store of bracket rows keyed by tax year."""

    def fetch(self, tax_year: int) -> Iterable[BracketRow]:
        ...


class YearConfigBracketSource:
    """Serve brackets from the YAML year configuration files."""

    def fetch(self, tax_year: int) -> Iterable[BracketRow]:
        return load_year_configuration(tax_year).brackets.brackets


@lru_cache(maxsize=1)
def default_bracket_table() -> BracketTable:
    """Return the built-in schedule for the most recent known tax year."""

    rows = [
        {
            "tax_year": DEFAULT_BRACKET_YEAR,
            "bracket_order": order,
            "min_income": min_income,
            "max_income": max_income,
            "base_tax": base_tax,
            "tax_rate": rate,
        }
        for order, min_income, max_income, base_tax, rate in _DEFAULT_BRACKET_ROWS
    ]
    return BracketTable.from_rows(DEFAULT_BRACKET_YEAR, rows)


@dataclass(frozen=True)
class CachedBrackets:
    """Bracket table together with its cache expiry timestamp."""

    table: BracketTable
    fetched_at: datetime
    expires_at: datetime

    def is_expired(self, *, now: datetime) -> bool:
        return now >= self.expires_at


class BracketCache:
    """Thread-safe per-year bracket cache with a fixed time-to-live."""

    def __init__(
        self,
        *,
        ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")

        self._ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._entries: dict[int, CachedBrackets] = {}
        self._lock = Lock()

    def get(self, tax_year: int) -> BracketTable | None:
        now = self._clock()
        with self._lock:
            entry = self._entries.get(tax_year)
            if entry is None:
                return None
            if entry.is_expired(now=now):
                self._entries.pop(tax_year, None)
                return None
            return entry.table

    def put(self, table: BracketTable) -> None:
        now = self._clock()
        entry = CachedBrackets(table=table, fetched_at=now, expires_at=now + self._ttl)
        with self._lock:
            self._entries[table.tax_year] = entry

    def invalidate(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class BracketRepository:
    """Resolve the ordered active brackets for a tax year."""

    def __init__(
        self,
        source: BracketSource | None = None,
        *,
        cache: BracketCache | None = None,
        fetch_timeout: float | None = None,
    ) -> None:
        if fetch_timeout is not None and fetch_timeout <= 0:
            raise ValueError("fetch_timeout must be positive when provided")

        self._source = source if source is not None else YearConfigBracketSource()
        self._cache = cache if cache is not None else BracketCache()
        self._fetch_timeout = fetch_timeout
        self._executor: ThreadPoolExecutor | None = None
        self._in_flight: dict[int, Future[list[BracketRow]]] = {}
        self._executor_lock = Lock()

    @classmethod
    def from_env(
        cls,
        source: BracketSource | None = None,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> BracketRepository:
        """Build a repository using the cache and timeout environment settings."""

        ttl = _env_seconds(CACHE_TTL_ENV)
        timeout = _env_seconds(FETCH_TIMEOUT_ENV)
        cache = BracketCache(
            ttl_seconds=ttl if ttl is not None else DEFAULT_CACHE_TTL_SECONDS,
            clock=clock,
        )
        return cls(source, cache=cache, fetch_timeout=timeout)

    @property
    def cache(self) -> BracketCache:
        return self._cache

    def get_table(self, tax_year: int) -> BracketTable:
        """Return the bracket table for ``tax_year``, falling back when unavailable."""

        cached = self._cache.get(tax_year)
        if cached is not None:
            _LOGGER.debug("Serving %s tax brackets from cache", tax_year)
            return cached

        try:
            table = BracketTable.from_rows(tax_year, list(self._fetch_rows(tax_year)))
        except FetchTimeoutError:
            _LOGGER.warning(
                "Timed out fetching %s tax brackets; using the built-in %s table",
                tax_year,
                DEFAULT_BRACKET_YEAR,
            )
            return default_bracket_table()
        except Exception:
            _LOGGER.warning(
                "Failed to fetch %s tax brackets; using the built-in %s table",
                tax_year,
                DEFAULT_BRACKET_YEAR,
                exc_info=True,
            )
            return default_bracket_table()

        self._cache.put(table)
        _LOGGER.debug("Cached %d tax brackets for %s", len(table.brackets), tax_year)
        return table

    def get_brackets(self, tax_year: int) -> tuple[TaxBracket, ...]:
        """Return the ordered active brackets for ``tax_year``."""

        return tuple(self.get_table(tax_year).brackets)

    def clear_cache(self) -> None:
        """Drop every cached table so the next lookup refetches."""

        self._cache.invalidate()

    invalidate = clear_cache

    def close(self) -> None:
        """Release the fetch worker thread, if one was started."""

        with self._executor_lock:
            executor, self._executor = self._executor, None
            pending, self._in_flight = list(self._in_flight.values()), {}
        for future in pending:
            future.cancel()
        if executor is not None:
            executor.shutdown(wait=False, cancel_futures=True)

    def _fetch_rows(self, tax_year: int) -> Iterable[BracketRow]:
        if self._fetch_timeout is None:
            return self._source.fetch(tax_year)

        return self._submit_fetch(tax_year).result(timeout=self._fetch_timeout)

    def _submit_fetch(self, tax_year: int) -> Future[list[BracketRow]]:
        # A hung fetch keeps its slot; later misses for the year wait on it.
        with self._executor_lock:
            future = self._in_flight.get(tax_year)
            if future is not None and not future.done():
                return future

            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=2, thread_name_prefix="pesotax-brackets"
                )
            future = self._executor.submit(lambda: list(self._source.fetch(tax_year)))
            self._in_flight[tax_year] = future

        future.add_done_callback(lambda done: self._forget_fetch(tax_year, done))
        return future

    def _forget_fetch(self, tax_year: int, future: Future[list[BracketRow]]) -> None:
        with self._executor_lock:
            if self._in_flight.get(tax_year) is future:
                del self._in_flight[tax_year]


def _env_seconds(name: str) -> float | None:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number of seconds") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive")
    return value


__all__ = [
    "BracketCache",
    "BracketRepository",
    "BracketSource",
    "CachedBrackets",
    "DEFAULT_BRACKET_YEAR",
    "DEFAULT_CACHE_TTL_SECONDS",
    "YearConfigBracketSource",
    "default_bracket_table",
]
