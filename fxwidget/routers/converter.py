from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from fxwidget.routers.deps import get_engine
from fxwidget.services.conversion_engine import ConversionEngine
from fxwidget.services.widget import format_result_line

"""JSON API over the conversion engine.

Endpoints:
    - GET /api/symbols        -> selectable currency codes (never fails; falls back)
    - GET /api/convert        -> convert ?from=&to=&amount=
    - GET /api/history        -> last conversions, most recent first
    - DELETE /api/history     -> clear history

Network-bound handlers are plain `def` so they run in the thread pool
instead of blocking the event loop.
"""

router = APIRouter(prefix="/api", tags=["converter"])


class SymbolsOut(BaseModel):
    symbols: List[str]


class ConversionOut(BaseModel):
    token: int
    display: str
    record: Dict[str, Any]


@router.get("/symbols", response_model=SymbolsOut, summary="List currency codes")
def list_symbols(engine: ConversionEngine = Depends(get_engine)):
    return SymbolsOut(symbols=engine.load_symbols())


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
def convert(
    from_currency: Optional[str] = Query(None, alias="from"),
    to_currency: Optional[str] = Query(None, alias="to"),
    amount: Optional[str] = Query(None, description="Non-negative number"),
    engine: ConversionEngine = Depends(get_engine),
):
    outcome = engine.convert(amount, from_currency, to_currency)
    if not outcome.ok or outcome.record is None:
        status_code = 422 if outcome.error_kind == "validation" else 502
        raise HTTPException(status_code=status_code, detail=outcome.error)
    return ConversionOut(
        token=outcome.token,
        display=format_result_line(outcome.record),
        record=outcome.record.to_public(),
    )


@router.get("/history", summary="Conversion history, most recent first")
async def history(engine: ConversionEngine = Depends(get_engine)):
    return {"history": [r.to_public() for r in engine.history()]}


@router.delete("/history", summary="Clear conversion history")
async def clear_history(engine: ConversionEngine = Depends(get_engine)):
    engine.clear_history()
    return {"status": "cleared"}
