from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, List, Optional, Tuple

from fxwidget.core.errors import (
    InvalidResponseError,
    RateProviderError,
    ValidationError,
)
from fxwidget.models.constants import (
    FALLBACK_SYMBOLS,
    MSG_CONVERSION_FAILED,
    MSG_INVALID_AMOUNT,
    MSG_INVALID_CURRENCIES,
)
from fxwidget.models.conversion import ConversionRecord
from fxwidget.services.persistent_cache import PersistentCache
from fxwidget.services.rates.base import RateProvider, normalize_symbols

"""Conversion engine.

Per request the engine walks idle -> validating -> loading -> success|failed
and always ends back in idle. Validation failures never reach the network;
provider failures are logged by kind and collapse into one generic message.

Each request gets a token from a monotonically increasing counter. The engine
itself does not cancel or de-duplicate anything: a slow response still lands
in history. Display code compares tokens to avoid showing stale results.
"""

logger = logging.getLogger("fxwidget.engine")


class ConversionState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    LOADING = "loading"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ConversionOutcome:
    state: ConversionState
    token: int
    record: Optional[ConversionRecord] = None
    error: Optional[str] = None
    # "validation" or "provider" when failed
    error_kind: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state is ConversionState.SUCCESS


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(raw: object) -> float:
    if isinstance(raw, bool) or raw is None:
        raise ValidationError(MSG_INVALID_AMOUNT)
    if isinstance(raw, (int, float)):
        value = float(raw)
    elif isinstance(raw, str):
        try:
            value = float(raw.strip())
        except ValueError:
            raise ValidationError(MSG_INVALID_AMOUNT) from None
    else:
        raise ValidationError(MSG_INVALID_AMOUNT)
    if not math.isfinite(value) or value < 0:
        raise ValidationError(MSG_INVALID_AMOUNT)
    return value


def validate_request(
    amount: object, from_currency: Optional[str], to_currency: Optional[str]
) -> Tuple[float, str, str]:
    value = parse_amount(amount)
    src = (from_currency or "").strip().upper()
    dst = (to_currency or "").strip().upper()
    if not src or not dst:
        raise ValidationError(MSG_INVALID_CURRENCIES)
    return value, src, dst


class ConversionEngine:
    def __init__(
        self,
        provider: RateProvider,
        cache: PersistentCache,
        clock: Callable[[], datetime] = _utcnow,
        on_state_change: Optional[Callable[[ConversionState], None]] = None,
    ):
        self.provider = provider
        self.cache = cache
        self._clock = clock
        self._on_state_change = on_state_change
        self._tokens = itertools.count(1)
        self.state = ConversionState.IDLE

    def _set_state(self, state: ConversionState) -> None:
        self.state = state
        if self._on_state_change is not None:
            self._on_state_change(state)

    def _failed(self, token: int, message: str, kind: str) -> ConversionOutcome:
        self._set_state(ConversionState.FAILED)
        return ConversionOutcome(
            ConversionState.FAILED, token, error=message, error_kind=kind
        )

    # Public API -----------------------------------------------
    def convert(
        self,
        amount: object,
        from_currency: Optional[str],
        to_currency: Optional[str],
    ) -> ConversionOutcome:
        token = next(self._tokens)
        try:
            self._set_state(ConversionState.VALIDATING)
            try:
                value, src, dst = validate_request(amount, from_currency, to_currency)
            except ValidationError as e:
                logger.info("conversion rejected", extra={"token": token, "reason": str(e)})
                return self._failed(token, str(e), "validation")

            self._set_state(ConversionState.LOADING)
            try:
                quote = self.provider.fetch_conversion(src, dst, value)
                # e.g. a huge amount times the rate overflows to inf
                if not math.isfinite(quote.converted):
                    raise InvalidResponseError("converted amount is not finite")
            except RateProviderError as e:
                logger.warning(
                    "conversion failed",
                    extra={
                        "token": token,
                        "error_kind": type(e).__name__,
                        "error": str(e),
                        "provider": self.provider.name,
                    },
                )
                return self._failed(token, MSG_CONVERSION_FAILED, "provider")

            record = ConversionRecord(
                timestamp=self._clock(),
                from_currency=src,
                to_currency=dst,
                amount=value,
                converted=quote.converted,
                rate=quote.rate,
            )
            self.cache.append_history(record)
            self._set_state(ConversionState.SUCCESS)
            return ConversionOutcome(ConversionState.SUCCESS, token, record=record)
        finally:
            self._set_state(ConversionState.IDLE)

    def load_symbols(self) -> List[str]:
        """Cached list, else the provider's list (then cached), else the fallback."""
        cached = self.cache.load_symbols()
        if cached:
            return cached
        try:
            symbols = self.provider.fetch_symbols()
        except RateProviderError as e:
            logger.warning(
                "symbol loading failed, using fallback list",
                extra={"error_kind": type(e).__name__, "error": str(e)},
            )
            return normalize_symbols(FALLBACK_SYMBOLS)
        return self.cache.save_symbols(symbols)

    def history(self) -> List[ConversionRecord]:
        return self.cache.load_history()

    def clear_history(self) -> None:
        self.cache.clear_history()
