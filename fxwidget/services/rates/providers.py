from __future__ import annotations

"""Concrete rate providers and factory.

- ExchangeRateHostProvider: `/symbols` + `/convert` endpoints (exchangerate.host).
- LatestRatesProvider: rates-only `/latest/<base>` endpoint with a fixed symbol list.
- StaticRateProvider: fixed USD-based table, no network; handy offline and in demos.
"""
import math
import logging
from typing import Any, Dict, List, Optional, TYPE_CHECKING
from urllib.parse import quote, urlencode

from .base import ConversionQuote, RateProvider, normalize_symbols
from fxwidget.core.errors import InvalidResponseError, ParseError
from fxwidget.models.constants import FALLBACK_SYMBOLS
from fxwidget.services.http_client import get_json

if TYPE_CHECKING:  # pragma: no cover
    from fxwidget.core.config import Settings

logger = logging.getLogger("fxwidget.rates")

# Units of each currency per 1 USD (approximate, for offline use only)
_STATIC_USD_RATES: Dict[str, float] = {
    "USD": 1.0,
    "EUR": 0.92,
    "BRL": 5.0,
    "GBP": 0.79,
    "JPY": 150.0,
    "CAD": 1.36,
    "AUD": 1.52,
}


def _is_number(value: Any) -> bool:
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        return False
    # json.loads accepts NaN and Infinity literals; neither is a usable figure
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


def _amount_param(amount: float) -> str:
    # 100.0 -> "100", 12.5 -> "12.5"
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


class ExchangeRateHostProvider(RateProvider):
    name = "exchangerate-host"

    def __init__(self, base_url: str, *, timeout: float = 10.0, retries: int = 0):
        self._base_url = str(base_url).rstrip("/")
        self._timeout = timeout
        self._retries = retries

    def _get(self, url: str) -> Any:
        return get_json(url, timeout=self._timeout, retries=self._retries)

    def fetch_symbols(self) -> List[str]:
        # NetworkError / ParseError from the client propagate as-is
        data = self._get(f"{self._base_url}/symbols")
        symbols = data.get("symbols") if isinstance(data, dict) else None
        if not isinstance(symbols, dict):
            raise ParseError("symbols response has no 'symbols' object")
        codes = normalize_symbols(symbols.keys())
        if not codes:
            raise ParseError("symbols response listed no currencies")
        return codes

    def fetch_conversion(
        self, from_currency: str, to_currency: str, amount: float
    ) -> ConversionQuote:
        query = urlencode(
            {"from": from_currency, "to": to_currency, "amount": _amount_param(amount)}
        )
        try:
            data = self._get(f"{self._base_url}/convert?{query}")
        except ParseError as e:
            raise InvalidResponseError(str(e)) from e
        if not isinstance(data, dict) or data.get("success") is False:
            raise InvalidResponseError("convert response reported failure")
        result = data.get("result")
        if not _is_number(result):
            raise InvalidResponseError("convert response has no numeric 'result'")
        converted = float(result)

        info = data.get("info")
        rate: Optional[float] = None
        if isinstance(info, dict) and _is_number(info.get("rate")) and info["rate"]:
            rate = float(info["rate"])
        if rate is None:
            # Derive from the result; undefined for a zero amount
            rate = converted / amount if amount else math.nan
        return ConversionQuote(converted=converted, rate=rate)


class LatestRatesProvider(RateProvider):
    """Rates-only API: one GET per base currency returns every quote rate."""

    name = "latest-rates"

    def __init__(self, base_url: str, *, timeout: float = 10.0, retries: int = 0):
        self._base_url = str(base_url).rstrip("/")
        self._timeout = timeout
        self._retries = retries

    def fetch_symbols(self) -> List[str]:
        return normalize_symbols(FALLBACK_SYMBOLS)

    def fetch_conversion(
        self, from_currency: str, to_currency: str, amount: float
    ) -> ConversionQuote:
        url = f"{self._base_url}/{quote(from_currency, safe='')}"
        try:
            data = get_json(url, timeout=self._timeout, retries=self._retries)
        except ParseError as e:
            raise InvalidResponseError(str(e)) from e
        rates = data.get("rates") if isinstance(data, dict) else None
        if not isinstance(rates, dict):
            raise InvalidResponseError("latest response has no 'rates' object")
        rate = rates.get(to_currency)
        if not _is_number(rate):
            raise InvalidResponseError(f"latest response has no rate for {to_currency}")
        rate = float(rate)
        return ConversionQuote(converted=amount * rate, rate=rate)


class StaticRateProvider(RateProvider):
    name = "static"

    def __init__(self, usd_rates: Optional[Dict[str, float]] = None):
        self._usd_rates = dict(usd_rates or _STATIC_USD_RATES)

    def fetch_symbols(self) -> List[str]:
        return normalize_symbols(self._usd_rates)

    def fetch_conversion(
        self, from_currency: str, to_currency: str, amount: float
    ) -> ConversionQuote:
        try:
            rate = self._usd_rates[to_currency] / self._usd_rates[from_currency]
        except KeyError as e:
            raise InvalidResponseError(f"no static rate for {e.args[0]}") from e
        return ConversionQuote(converted=amount * rate, rate=rate)


_PROVIDER_REGISTRY = {
    "exchangerate-host": ExchangeRateHostProvider,
    "latest-rates": LatestRatesProvider,
    "static": StaticRateProvider,
}


def make_rate_provider(kind: str, settings: Optional["Settings"] = None) -> RateProvider:
    cls = _PROVIDER_REGISTRY.get(kind)
    if not cls:
        raise ValueError(f"Unknown rate provider kind '{kind}'")
    if cls is StaticRateProvider:
        return cls()
    if settings is None:
        from fxwidget.core.config import get_settings

        settings = get_settings()
    base_url = (
        settings.exchange_api_base_url
        if cls is ExchangeRateHostProvider
        else settings.latest_rates_base_url
    )
    logger.debug("rate provider selected", extra={"provider": kind})
    return cls(
        str(base_url),
        timeout=settings.http_timeout_seconds,
        retries=settings.http_retries,
    )
