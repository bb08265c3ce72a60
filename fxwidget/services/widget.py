"""Widget state and rendering helpers for the converter page.

`WidgetState` is built once at startup and handed to the UI handlers; it
replaces the module-level element references a browser script would keep.
The helpers here are pure apart from mutating the state they receive.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence

from fxwidget.models.constants import DEFAULT_FROM, DEFAULT_TO
from fxwidget.models.conversion import ConversionRecord
from fxwidget.services.conversion_engine import ConversionOutcome
from fxwidget.services.money import format_amount, format_rate


@dataclass
class WidgetState:
    symbols: List[str] = field(default_factory=list)
    from_currency: str = ""
    to_currency: str = ""
    amount: str = ""
    result: Optional[str] = None
    error: Optional[str] = None
    # Token of the outcome currently on screen; older outcomes are not shown
    displayed_token: int = 0
    # False while `symbols` is the built-in fallback rather than a cached list
    symbols_cached: bool = False
    # UI handlers run in the thread pool; guards the token check-and-set
    lock: threading.Lock = field(
        default_factory=threading.Lock, repr=False, compare=False
    )


@dataclass(frozen=True)
class HistoryLine:
    summary: str
    rate: str


def populate_symbols(state: WidgetState, symbols: Sequence[str]) -> None:
    state.symbols = list(symbols)
    if not state.symbols:
        state.from_currency = state.to_currency = ""
        return
    state.from_currency = (
        DEFAULT_FROM if DEFAULT_FROM in state.symbols else state.symbols[0]
    )
    if DEFAULT_TO in state.symbols:
        state.to_currency = DEFAULT_TO
    else:
        state.to_currency = state.symbols[1] if len(state.symbols) > 1 else state.symbols[0]


def refresh_symbols(state: WidgetState, symbols: Sequence[str], cached: bool) -> None:
    """Replace the list, keeping the current pair when both codes survive."""
    previous = (state.from_currency, state.to_currency)
    populate_symbols(state, symbols)
    if previous[0] in state.symbols and previous[1] in state.symbols:
        state.from_currency, state.to_currency = previous
    state.symbols_cached = cached


def swap(state: WidgetState) -> None:
    state.from_currency, state.to_currency = state.to_currency, state.from_currency


def apply_outcome(state: WidgetState, outcome: ConversionOutcome) -> bool:
    """Render `outcome` unless a newer one is already displayed.

    Returns True when the state changed.
    """
    with state.lock:
        if outcome.token < state.displayed_token:
            return False
        state.displayed_token = outcome.token
        if outcome.ok and outcome.record is not None:
            state.result = format_result_line(outcome.record)
            state.error = None
        else:
            state.result = None
            state.error = outcome.error
        return True


def _rate_text(record: ConversionRecord) -> str:
    return f"1 {record.from_currency} = {format_rate(record.rate)} {record.to_currency}"


def format_result_line(record: ConversionRecord) -> str:
    # e.g. "100 USD → 500 BRL (1 USD = 5.000000 BRL)"
    return (
        f"{format_amount(record.amount)} {record.from_currency} → "
        f"{format_amount(record.converted)} {record.to_currency} ({_rate_text(record)})"
    )


def _format_timestamp(ts: datetime) -> str:
    return ts.astimezone().strftime("%d/%m/%Y %H:%M:%S")


def format_history_line(record: ConversionRecord) -> HistoryLine:
    summary = (
        f"{_format_timestamp(record.timestamp)} - "
        f"{format_amount(record.amount)} {record.from_currency} → "
        f"{format_amount(record.converted)} {record.to_currency}"
    )
    return HistoryLine(summary=summary, rate=_rate_text(record))


def render_history(records: Sequence[ConversionRecord]) -> List[HistoryLine]:
    return [format_history_line(r) for r in records]
