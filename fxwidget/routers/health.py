from fastapi import APIRouter, Depends

from fxwidget.routers.deps import get_engine
from fxwidget.services.conversion_engine import ConversionEngine

router = APIRouter(tags=["health"])


@router.get("/health", summary="Liveness probe")
async def health(engine: ConversionEngine = Depends(get_engine)):
    return {"status": "ok", "provider": engine.provider.name}
