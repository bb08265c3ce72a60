"""Smoke script for symbol loading with cache and fallback.

Demonstrates:
 1. First load asks the configured provider (or falls back when offline).
 2. Second load is served from the key-value store without touching the network.
 3. A corrupted cache entry is treated as a miss.

NOTE: This is a lightweight diagnostic and not a formal test.
"""

import os
import sys
import tempfile
from pathlib import Path
from pprint import pprint

from fxwidget.core.config import Settings
from fxwidget.db.kv_store import SQLiteKeyValueStore
from fxwidget.db.migrate import apply_migrations
from fxwidget.models.constants import SYMBOLS_CACHE_KEY
from fxwidget.services.conversion_engine import ConversionEngine
from fxwidget.services.persistent_cache import PersistentCache
from fxwidget.services.rates.providers import make_rate_provider


def run(provider_kind: str = "exchangerate-host"):
    with tempfile.TemporaryDirectory() as d:
        db_path = Path(d) / "smoke.db"
        apply_migrations(db_path)
        store = SQLiteKeyValueStore(db_path)
        settings = Settings(db_path=db_path, exchange_rate_provider=provider_kind)
        engine = ConversionEngine(
            make_rate_provider(provider_kind, settings), PersistentCache(store)
        )

        out = {}
        out["first"] = engine.load_symbols()
        out["cached_raw"] = store.get(SYMBOLS_CACHE_KEY)
        out["second"] = engine.load_symbols()

        store.set(SYMBOLS_CACHE_KEY, "{not json")
        out["after_corruption"] = engine.load_symbols()[:10]
        pprint(out)


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run(*sys.argv[1:2])
