"""Pydantic domain models for the currency converter widget."""

from .constants import (
    FALLBACK_SYMBOLS,
    DEFAULT_FROM,
    DEFAULT_TO,
    HISTORY_LIMIT,
)  # re-export
from .conversion import ConversionRecord

__all__ = [
    "FALLBACK_SYMBOLS",
    "DEFAULT_FROM",
    "DEFAULT_TO",
    "HISTORY_LIMIT",
    "ConversionRecord",
]
