import json
import math
from datetime import timedelta

from fxwidget.models.constants import HISTORY_KEY, HISTORY_LIMIT, SYMBOLS_CACHE_KEY
from fxwidget.models.conversion import ConversionRecord

from conftest import FIXED_NOW


def make_record(i: int = 0, **overrides) -> ConversionRecord:
    data = {
        "timestamp": FIXED_NOW + timedelta(minutes=i),
        "from": "USD",
        "to": "BRL",
        "amount": float(i),
        "converted": float(i) * 5,
        "rate": 5.0,
    }
    data.update(overrides)
    return ConversionRecord.model_validate(data)


def test_symbols_round_trip_is_sorted_and_unique(cache, store):
    saved = cache.save_symbols(["usd", "EUR", "BRL", "EUR"])
    assert saved == ["BRL", "EUR", "USD"]
    assert json.loads(store.get(SYMBOLS_CACHE_KEY)) == ["BRL", "EUR", "USD"]
    assert cache.load_symbols() == ["BRL", "EUR", "USD"]


def test_missing_symbols_are_absent(cache):
    assert cache.load_symbols() is None


def test_malformed_symbols_are_treated_as_absent(cache, store):
    for raw in ("{not json", '{"USD": 1}', "[]", "[1, 2]", '["USD", ""]'):
        store.set(SYMBOLS_CACHE_KEY, raw)
        assert cache.load_symbols() is None, raw


def test_history_is_most_recent_first(cache):
    cache.append_history(make_record(1))
    cache.append_history(make_record(2))
    history = cache.load_history()
    assert [r.amount for r in history] == [2.0, 1.0]


def test_history_is_bounded_and_evicts_oldest(cache):
    for i in range(25):
        log = cache.append_history(make_record(i))
        assert len(log) <= HISTORY_LIMIT
    history = cache.load_history()
    assert len(history) == HISTORY_LIMIT
    assert [r.amount for r in history] == [float(i) for i in range(24, 14, -1)]


def test_clear_history_then_load_is_empty(cache, store):
    cache.append_history(make_record(1))
    cache.clear_history()
    assert HISTORY_KEY not in store
    assert cache.load_history() == []


def test_clear_history_without_history_is_harmless(cache):
    cache.clear_history()
    assert cache.load_history() == []


def test_corrupt_history_loads_empty(cache, store):
    for raw in ("nope", '{"a": 1}', '[{"from": "USD"}]', '["x"]'):
        store.set(HISTORY_KEY, raw)
        assert cache.load_history() == [], raw


def test_append_after_corruption_starts_fresh(cache, store):
    store.set(HISTORY_KEY, "garbage")
    log = cache.append_history(make_record(3))
    assert len(log) == 1
    assert cache.load_history()[0].amount == 3.0


def test_history_persists_storage_keys(cache, store):
    cache.append_history(make_record(4))
    stored = json.loads(store.get(HISTORY_KEY))
    assert stored[0]["from"] == "USD"
    assert stored[0]["to"] == "BRL"
    assert stored[0]["converted"] == 20.0
    assert stored[0]["timestamp"].startswith("2024-05-01T12:04:00")


def test_undefined_rate_survives_storage(cache):
    cache.append_history(make_record(0, rate=math.nan))
    (record,) = cache.load_history()
    assert not record.has_rate
    assert record.to_public()["rate"] is None


def test_public_view_maps_every_non_finite_figure_to_none():
    rec = make_record(2, converted=math.inf, rate=math.inf)
    public = rec.to_public()
    assert public["converted"] is None
    assert public["rate"] is None
    assert public["amount"] == 2.0
    json.dumps(public, allow_nan=False)


def test_history_with_infinite_values_reloads(cache):
    cache.append_history(make_record(1, converted=math.inf, rate=math.inf))
    (record,) = cache.load_history()
    assert math.isinf(record.converted)
