from datetime import datetime, timezone
from typing import List, Optional

import pytest

from fxwidget.core.config import Settings
from fxwidget.db.kv_store import InMemoryKeyValueStore
from fxwidget.services.conversion_engine import ConversionEngine
from fxwidget.services.persistent_cache import PersistentCache
from fxwidget.services.rates.base import ConversionQuote, RateProvider

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


class FakeProvider(RateProvider):
    """Provider double that records calls and replays canned answers."""

    name = "fake"

    def __init__(
        self,
        symbols: Optional[List[str]] = None,
        rate: float = 5.0,
        symbols_error: Optional[Exception] = None,
        conversion_error: Optional[Exception] = None,
        converted: Optional[float] = None,
    ):
        self.symbols = symbols if symbols is not None else ["USD", "EUR", "BRL"]
        self.rate = rate
        self.symbols_error = symbols_error
        self.conversion_error = conversion_error
        # fixed converted value instead of amount * rate
        self.converted = converted
        self.symbol_calls = 0
        self.conversion_calls: List[tuple] = []

    def fetch_symbols(self) -> List[str]:
        self.symbol_calls += 1
        if self.symbols_error is not None:
            raise self.symbols_error
        return list(self.symbols)

    def fetch_conversion(self, from_currency, to_currency, amount) -> ConversionQuote:
        self.conversion_calls.append((from_currency, to_currency, amount))
        if self.conversion_error is not None:
            raise self.conversion_error
        converted = self.converted if self.converted is not None else amount * self.rate
        return ConversionQuote(converted=converted, rate=self.rate)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def cache(store):
    return PersistentCache(store)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def engine(provider, cache):
    return ConversionEngine(provider, cache, clock=lambda: FIXED_NOW)


@pytest.fixture
def memory_settings():
    return Settings(store_backend="memory", exchange_rate_provider="static", debug=False)
