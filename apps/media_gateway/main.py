"""Media Gateway Application Entry Point.

인증된 클라이언트의 미디어 업로드를 검증/재키잉하여 R2 에 저장하고,
원격 미디어를 고정 캐시 정책으로 중계하는 프록시를 제공합니다.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from media_gateway.api.errors import register_exception_handlers
from media_gateway.api.routers import api_router, health_router
from media_gateway.core import Settings, get_settings
from media_gateway.core.constants import SERVICE_VERSION
from media_gateway.core.logging import configure_logging
from media_gateway.metrics import register_metrics
from media_gateway.security import FirebaseTokenVerifier, TokenVerifier
from media_gateway.services.storage import ObjectStore, build_object_store

logger = logging.getLogger(__name__)

# 구조화된 로깅 설정 (ECS JSON 포맷)
configure_logging()


def _log_startup_config(settings: Settings) -> None:
    """시크릿 값은 출력하지 않고 설정 여부만 기록."""
    logger.info(
        "Media Gateway startup config",
        extra={
            "environment": settings.environment,
            "port": settings.port,
            "firebase_project_id_set": bool(settings.firebase_project_id),
            "firebase_client_email_set": bool(settings.firebase_client_email),
            "firebase_private_key_set": bool(settings.firebase_private_key),
            "storage_backend": settings.storage_backend,
            "r2_account_id_set": bool(settings.r2_account_id),
            "r2_access_key_id_set": bool(settings.r2_access_key_id),
            "r2_secret_access_key_set": bool(settings.r2_secret_access_key),
            "r2_bucket_name": settings.r2_bucket_name,
            "r2_public_base_url": settings.r2_public_base_url or "(not set)",
            "cors_origins": settings.cors_origin_list,
        },
    )
    if not settings.r2_public_base_url:
        logger.warning("R2_PUBLIC_BASE_URL not set; returned URLs use the direct bucket endpoint")


def create_app(
    settings: Optional[Settings] = None,
    *,
    token_verifier: Optional[TokenVerifier] = None,
    object_store: Optional[ObjectStore] = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        _log_startup_config(settings)
        if not settings.firebase_project_id and token_verifier is None:
            raise RuntimeError("FIREBASE_PROJECT_ID is required to verify identity tokens")

        async with httpx.AsyncClient(follow_redirects=True) as http_client:
            app.state.http_client = http_client
            app.state.token_verifier = token_verifier or FirebaseTokenVerifier(
                settings, http_client
            )
            app.state.object_store = object_store or build_object_store(settings)
            logger.info("Media Gateway started", extra={"version": SERVICE_VERSION})
            yield
        logger.info("Media Gateway stopped")

    app = FastAPI(
        title="Media Gateway",
        description="Authenticated media upload gateway and media proxy",
        version=SERVICE_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        level = logging.WARNING if response.status_code >= 400 else logging.INFO
        logger.log(
            level,
            "%s %s %d",
            request.method,
            request.url.path,
            response.status_code,
            extra={"duration_ms": round(elapsed_ms, 1)},
        )
        return response

    # 예외 핸들러 등록
    register_exception_handlers(app, settings)

    app.include_router(health_router)
    app.include_router(api_router)
    register_metrics(app)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(app, host=_settings.host, port=_settings.port)
