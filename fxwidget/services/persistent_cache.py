"""Persistent cache for the symbol list and the conversion history.

Everything lives in an injected KeyValueStore as JSON text. Reads fail soft:
unparseable or wrongly shaped data is logged as cache corruption and treated
exactly like a missing key, so callers never see an exception from here.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, Iterable, List, Optional

from pydantic import ValidationError as PydanticValidationError

from fxwidget.core.errors import CacheCorruption
from fxwidget.db.kv_store import KeyValueStore
from fxwidget.models.constants import HISTORY_KEY, HISTORY_LIMIT, SYMBOLS_CACHE_KEY
from fxwidget.models.conversion import ConversionRecord
from fxwidget.services.rates.base import normalize_symbols

logger = logging.getLogger("fxwidget.cache")


class PersistentCache:
    def __init__(self, store: KeyValueStore, history_limit: int = HISTORY_LIMIT):
        self._store = store
        self._history_limit = history_limit
        # Sync endpoints run in a thread pool; keep read-modify-write atomic.
        self._history_lock = threading.Lock()

    # Internal --------------------------------------------------
    def _read_json(self, key: str) -> Any:
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise CacheCorruption(f"{key}: {e}") from e

    def _corrupt(self, key: str, exc: Exception) -> None:
        logger.warning("cache corruption, treating as miss", extra={"key": key, "error": str(exc)})

    # Symbols ---------------------------------------------------
    def save_symbols(self, symbols: Iterable[str]) -> List[str]:
        codes = normalize_symbols(symbols)
        self._store.set(SYMBOLS_CACHE_KEY, json.dumps(codes))
        return codes

    def load_symbols(self) -> Optional[List[str]]:
        try:
            data = self._read_json(SYMBOLS_CACHE_KEY)
            if data is None:
                return None
            if not isinstance(data, list) or not data:
                raise CacheCorruption("symbols cache is not a non-empty list")
            if not all(isinstance(c, str) and c.strip() for c in data):
                raise CacheCorruption("symbols cache holds non-string entries")
        except CacheCorruption as e:
            self._corrupt(SYMBOLS_CACHE_KEY, e)
            return None
        return normalize_symbols(data)

    # History ---------------------------------------------------
    def load_history(self) -> List[ConversionRecord]:
        try:
            data = self._read_json(HISTORY_KEY)
            if data is None:
                return []
            if not isinstance(data, list):
                raise CacheCorruption("history is not a list")
            try:
                return [ConversionRecord.model_validate(item) for item in data]
            except PydanticValidationError as e:
                raise CacheCorruption(f"history entry invalid: {e}") from e
        except CacheCorruption as e:
            self._corrupt(HISTORY_KEY, e)
            return []

    def _save_history(self, records: List[ConversionRecord]) -> None:
        payload = [r.to_storage() for r in records]
        self._store.set(HISTORY_KEY, json.dumps(payload))

    def append_history(self, record: ConversionRecord) -> List[ConversionRecord]:
        """Prepend `record` and keep only the newest entries."""
        with self._history_lock:
            records = [record, *self.load_history()][: self._history_limit]
            self._save_history(records)
        return records

    def clear_history(self) -> None:
        with self._history_lock:
            self._store.remove(HISTORY_KEY)
