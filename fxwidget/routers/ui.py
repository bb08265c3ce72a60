from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from fxwidget.models.constants import MSG_EMPTY_HISTORY
from fxwidget.routers.deps import get_engine, get_widget_state
from fxwidget.services.conversion_engine import ConversionEngine
from fxwidget.services.widget import (
    WidgetState,
    apply_outcome,
    refresh_symbols,
    render_history,
    swap,
)

router = APIRouter(tags=["ui"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def ensure_symbols(state: WidgetState, engine: ConversionEngine) -> None:
    """Populate the selects; retried on each page load while on the fallback list."""
    if state.symbols and state.symbols_cached:
        return
    symbols = engine.load_symbols()
    refresh_symbols(state, symbols, cached=engine.cache.load_symbols() is not None)


def _back_to_widget() -> RedirectResponse:
    return RedirectResponse(url="/ui", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/ui", response_class=HTMLResponse)
def ui_home(
    request: Request,
    engine: ConversionEngine = Depends(get_engine),
    state: WidgetState = Depends(get_widget_state),
):
    ensure_symbols(state, engine)
    context = {
        "version": request.app.state.settings.version,
        "state": state,
        "history": render_history(engine.history()),
        "empty_history_message": MSG_EMPTY_HISTORY,
    }
    return templates.TemplateResponse(request, "converter.html", context)


@router.post("/ui/convert", response_class=RedirectResponse)
def ui_convert(
    amount: str = Form(""),
    from_currency: Optional[str] = Form(None),
    to_currency: Optional[str] = Form(None),
    engine: ConversionEngine = Depends(get_engine),
    state: WidgetState = Depends(get_widget_state),
):
    state.amount = amount
    if from_currency:
        state.from_currency = from_currency
    if to_currency:
        state.to_currency = to_currency
    outcome = engine.convert(amount, from_currency, to_currency)
    apply_outcome(state, outcome)
    return _back_to_widget()


@router.post("/ui/swap", response_class=RedirectResponse)
async def ui_swap(state: WidgetState = Depends(get_widget_state)):
    swap(state)
    return _back_to_widget()


@router.post("/ui/history/clear", response_class=RedirectResponse)
async def ui_clear_history(engine: ConversionEngine = Depends(get_engine)):
    engine.clear_history()
    return _back_to_widget()
