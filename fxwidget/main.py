import logging

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from .core.config import get_settings, Settings
from .core.logging import init_logging, request_context_middleware
from .db.kv_store import InMemoryKeyValueStore, KeyValueStore, SQLiteKeyValueStore
from .db.migrate import apply_migrations
from .core import errors
from .routers import converter, health, ui
from .services.conversion_engine import ConversionEngine
from .services.persistent_cache import PersistentCache
from .services.rates.base import RateProvider
from .services.rates.providers import make_rate_provider
from .services.widget import WidgetState

logger = logging.getLogger("fxwidget")


def build_store(settings: Settings) -> KeyValueStore:
    if settings.store_backend == "memory":
        return InMemoryKeyValueStore()
    # Ensure schema (idempotent) so fresh database files have tables
    try:
        apply_migrations(settings.db_path)  # type: ignore[arg-type]
    except Exception:
        # Failing to init DB is fatal; re-raise after logging
        logger.exception("failed to apply migrations on startup")
        raise
    return SQLiteKeyValueStore(settings.db_path)  # type: ignore[arg-type]


def create_app(
    settings_override: Settings | None = None,
    *,
    provider: RateProvider | None = None,
    store: KeyValueStore | None = None,
) -> FastAPI:
    """Application factory.

    settings_override: pass an already constructed Settings instance for tests
    to isolate environment (e.g., temp DB). Falls back to cached get_settings().
    provider / store: inject a rate provider or key-value store directly,
    bypassing the ones the settings would select.
    """
    settings = settings_override or get_settings()
    init_logging(debug=settings.debug)

    store = store if store is not None else build_store(settings)
    provider = provider or make_rate_provider(settings.exchange_rate_provider, settings)

    app = FastAPI(
        title=settings.app_name, debug=settings.debug, version=settings.version
    )
    app.state.settings = settings
    app.state.engine = ConversionEngine(provider, PersistentCache(store))
    app.state.widget = WidgetState()

    # Middleware (request id / structured logging)
    app.middleware("http")(request_context_middleware)

    # Error handlers
    app.add_exception_handler(StarletteHTTPException, errors.not_found_handler)
    app.add_exception_handler(RequestValidationError, errors.validation_error_handler)
    app.add_exception_handler(Exception, errors.server_error_handler)

    # Routers
    app.include_router(health.router)
    app.include_router(converter.router)
    app.include_router(ui.router)

    @app.get("/")
    async def root():
        return {"message": "Currency converter widget", "version": settings.version, "ui": "/ui"}

    logger.info("app created", extra={"provider": provider.name, "store": settings.store_backend})
    return app
