import math
from urllib.parse import parse_qs, urlsplit

import pytest

from fxwidget.core.config import Settings
from fxwidget.core.errors import InvalidResponseError, NetworkError, ParseError
from fxwidget.models.constants import FALLBACK_SYMBOLS
from fxwidget.services.rates import providers
from fxwidget.services.rates.providers import (
    ExchangeRateHostProvider,
    LatestRatesProvider,
    StaticRateProvider,
    make_rate_provider,
)


def fake_get_json(monkeypatch, payload=None, error=None):
    urls = []

    def _get_json(url, **kwargs):
        urls.append(url)
        if error is not None:
            raise error
        return payload

    monkeypatch.setattr(providers, "get_json", _get_json)
    return urls


@pytest.fixture
def host():
    return ExchangeRateHostProvider("https://api.example.test/")


def test_symbols_uses_key_set_sorted(monkeypatch, host):
    urls = fake_get_json(
        monkeypatch, {"symbols": {"USD": {"code": "USD"}, "BRL": {}, "EUR": {}}}
    )
    assert host.fetch_symbols() == ["BRL", "EUR", "USD"]
    assert urls == ["https://api.example.test/symbols"]


@pytest.mark.parametrize("payload", [{}, {"symbols": []}, {"symbols": {}}, ["USD"]])
def test_symbols_malformed_body_is_parse_error(monkeypatch, host, payload):
    fake_get_json(monkeypatch, payload)
    with pytest.raises(ParseError):
        host.fetch_symbols()


def test_symbols_network_error_propagates(monkeypatch, host):
    fake_get_json(monkeypatch, error=NetworkError("HTTP 500"))
    with pytest.raises(NetworkError):
        host.fetch_symbols()


def test_convert_builds_escaped_query(monkeypatch, host):
    urls = fake_get_json(monkeypatch, {"result": 500, "info": {"rate": 5}})
    quote = host.fetch_conversion("USD", "BRL", 100.0)
    assert quote.converted == 500.0
    assert quote.rate == 5.0
    parts = urlsplit(urls[0])
    assert parts.path == "/convert"
    assert parse_qs(parts.query) == {"from": ["USD"], "to": ["BRL"], "amount": ["100"]}


def test_convert_escapes_odd_codes(monkeypatch, host):
    urls = fake_get_json(monkeypatch, {"result": 1.0})
    host.fetch_conversion("A&B", "C D", 2.5)
    assert "from=A%26B" in urls[0]
    assert "to=C+D" in urls[0]
    assert "amount=2.5" in urls[0]


def test_convert_derives_rate_when_missing(monkeypatch, host):
    fake_get_json(monkeypatch, {"success": True, "result": 50})
    quote = host.fetch_conversion("USD", "BRL", 10.0)
    assert quote.rate == pytest.approx(5.0)


def test_convert_rate_undefined_for_zero_amount(monkeypatch, host):
    fake_get_json(monkeypatch, {"result": 0})
    quote = host.fetch_conversion("USD", "BRL", 0.0)
    assert quote.converted == 0.0
    assert math.isnan(quote.rate)


@pytest.mark.parametrize(
    "payload",
    [
        {"success": False, "result": 10},
        {"success": True},
        {"result": None},
        {"result": "10"},
        {"result": True},
        [],
        None,
    ],
)
def test_convert_invalid_payload(monkeypatch, host, payload):
    fake_get_json(monkeypatch, payload)
    with pytest.raises(InvalidResponseError):
        host.fetch_conversion("USD", "BRL", 1.0)


def test_convert_non_json_body_is_invalid_response(monkeypatch, host):
    fake_get_json(monkeypatch, error=ParseError("bad json"))
    with pytest.raises(InvalidResponseError):
        host.fetch_conversion("USD", "BRL", 1.0)


def test_convert_network_failure(monkeypatch, host):
    fake_get_json(monkeypatch, error=NetworkError("down"))
    with pytest.raises(NetworkError):
        host.fetch_conversion("USD", "BRL", 1.0)


def test_latest_rates_symbols_need_no_network(monkeypatch):
    urls = fake_get_json(monkeypatch, error=AssertionError("no network expected"))
    provider = LatestRatesProvider("https://rates.example.test/v4/latest")
    assert provider.fetch_symbols() == sorted(FALLBACK_SYMBOLS)
    assert urls == []


def test_latest_rates_conversion(monkeypatch):
    urls = fake_get_json(monkeypatch, {"base": "USD", "rates": {"BRL": 5.0, "EUR": 0.9}})
    provider = LatestRatesProvider("https://rates.example.test/v4/latest/")
    quote = provider.fetch_conversion("USD", "BRL", 100.0)
    assert urls == ["https://rates.example.test/v4/latest/USD"]
    assert quote.converted == pytest.approx(500.0)
    assert quote.rate == 5.0


@pytest.mark.parametrize("payload", [{}, {"rates": {}}, {"rates": {"BRL": "x"}}])
def test_latest_rates_missing_target(monkeypatch, payload):
    fake_get_json(monkeypatch, payload)
    provider = LatestRatesProvider("https://rates.example.test/v4/latest")
    with pytest.raises(InvalidResponseError):
        provider.fetch_conversion("USD", "BRL", 1.0)


def test_static_provider_cross_rate():
    provider = StaticRateProvider({"USD": 1.0, "BRL": 5.0, "EUR": 0.5})
    quote = provider.fetch_conversion("EUR", "BRL", 2.0)
    assert quote.rate == pytest.approx(10.0)
    assert quote.converted == pytest.approx(20.0)
    assert provider.fetch_symbols() == ["BRL", "EUR", "USD"]


def test_static_provider_unknown_code():
    with pytest.raises(InvalidResponseError):
        StaticRateProvider().fetch_conversion("USD", "XXX", 1.0)


def test_factory_uses_settings():
    settings = Settings(
        store_backend="memory",
        exchange_api_base_url="https://host.example.test",
        http_timeout_seconds=2.5,
    )
    provider = make_rate_provider("exchangerate-host", settings)
    assert isinstance(provider, ExchangeRateHostProvider)
    assert provider._base_url == "https://host.example.test"
    assert provider._timeout == 2.5
    assert isinstance(make_rate_provider("latest-rates", settings), LatestRatesProvider)
    assert isinstance(make_rate_provider("static"), StaticRateProvider)


def test_factory_rejects_unknown_kind():
    with pytest.raises(ValueError):
        make_rate_provider("nope")


@pytest.mark.parametrize("result", [math.inf, -math.inf, math.nan, 10**400])
def test_convert_non_finite_result_is_invalid(monkeypatch, host, result):
    fake_get_json(monkeypatch, {"result": result, "info": {"rate": 5}})
    with pytest.raises(InvalidResponseError):
        host.fetch_conversion("USD", "BRL", 1.0)


def test_convert_non_finite_info_rate_is_derived(monkeypatch, host):
    fake_get_json(monkeypatch, {"result": 50, "info": {"rate": math.inf}})
    assert host.fetch_conversion("USD", "BRL", 10.0).rate == pytest.approx(5.0)


@pytest.mark.parametrize("rate", [math.inf, math.nan])
def test_latest_rates_non_finite_rate_is_invalid(monkeypatch, rate):
    fake_get_json(monkeypatch, {"rates": {"BRL": rate}})
    provider = LatestRatesProvider("https://rates.example.test/v4/latest")
    with pytest.raises(InvalidResponseError):
        provider.fetch_conversion("USD", "BRL", 1.0)
