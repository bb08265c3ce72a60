from __future__ import annotations

"""Rate provider abstraction.

Every provider answers the same two questions (which currencies exist, and
what a given amount converts to) so the conversion engine never needs to
know which API is configured.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List


@dataclass(frozen=True)
class ConversionQuote:
    converted: float
    rate: float


class RateProvider(ABC):
    name: str = "abstract"

    @abstractmethod
    def fetch_symbols(self) -> List[str]:
        """Return the supported currency codes, unique and sorted."""
        raise NotImplementedError

    @abstractmethod
    def fetch_conversion(
        self, from_currency: str, to_currency: str, amount: float
    ) -> ConversionQuote:
        """Convert `amount` of from_currency into to_currency."""
        raise NotImplementedError


def normalize_symbols(codes: Iterable[object]) -> List[str]:
    """Uppercase, de-duplicate and sort; blanks and non-strings are dropped."""
    return sorted(
        {c.strip().upper() for c in codes if isinstance(c, str) and c.strip()}
    )
