"""FastAPI dependencies resolving the objects built by `create_app`."""

from fastapi import Request

from fxwidget.services.conversion_engine import ConversionEngine
from fxwidget.services.widget import WidgetState


def get_engine(request: Request) -> ConversionEngine:
    return request.app.state.engine


def get_widget_state(request: Request) -> WidgetState:
    return request.app.state.widget
