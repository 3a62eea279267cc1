from fastapi import APIRouter

from media_gateway.api.endpoints import health, proxy, upload

api_router = APIRouter(prefix="/api")
api_router.include_router(upload.router)
api_router.include_router(proxy.router)

health_router = APIRouter()
health_router.include_router(health.router)

__all__ = ["api_router", "health_router"]
