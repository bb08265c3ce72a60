from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ConversionRecord(BaseModel):
    """One successful conversion as kept in the history log."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime
    from_currency: str = Field(..., alias="from", min_length=1)
    to_currency: str = Field(..., alias="to", min_length=1)
    amount: float = Field(..., ge=0)
    converted: float
    # NaN when the API gave no rate and amount was 0
    rate: float

    @field_validator("from_currency", "to_currency")
    def normalize_code(cls, v: str) -> str:
        return v.strip().upper()

    @property
    def has_rate(self) -> bool:
        return not math.isnan(self.rate)

    def to_storage(self) -> Dict[str, Any]:
        """Plain dict using the persisted key names (`from`, `to`)."""
        data = self.model_dump(by_alias=True)
        data["timestamp"] = self.timestamp.isoformat()
        return data

    def to_public(self) -> Dict[str, Any]:
        """Like to_storage but JSON-safe: non-finite figures become None."""
        data = self.to_storage()
        for key in ("amount", "converted", "rate"):
            if not math.isfinite(data[key]):
                data[key] = None
        return data
