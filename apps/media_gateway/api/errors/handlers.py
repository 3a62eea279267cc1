"""Exception Handlers.

도메인/서비스 예외를 공통 envelope {error, code?, message?, requestId?} 로 변환합니다.
production 에서는 내부 메시지를 숨기고 requestId 만 반환합니다.
"""

import logging
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from media_gateway.core import Settings
from media_gateway.core.exceptions import GatewayError, ProxyTransportError, StorageUploadError
from media_gateway.schemas.media import ErrorResponse

logger = logging.getLogger(__name__)


def _envelope(status_code: int, body: ErrorResponse, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.to_content(), headers=headers)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """예외 핸들러 등록."""

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        return _envelope(exc.status_code, ErrorResponse(error=exc.message, code=exc.code))

    @app.exception_handler(StorageUploadError)
    async def storage_error_handler(request: Request, exc: StorageUploadError):
        request_id = str(uuid4())
        logger.error(
            "Storage upload failed",
            extra={"request_id": request_id, "path": request.url.path, "error": exc.detail},
        )
        return _envelope(
            exc.status_code,
            ErrorResponse(
                error="Upload failed",
                code=exc.code,
                message=exc.message if settings.is_development else None,
                request_id=request_id,
            ),
        )

    @app.exception_handler(ProxyTransportError)
    async def proxy_transport_handler(request: Request, exc: ProxyTransportError):
        return Response(status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return _envelope(404, ErrorResponse(error="Route not found"))
        return _envelope(
            exc.status_code,
            ErrorResponse(error=str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = errors[0].get("msg") if errors else None
        return _envelope(
            400,
            ErrorResponse(error="Invalid request", code="VALIDATION_ERROR", message=message),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        request_id = str(uuid4())
        logger.exception(
            "Unhandled error",
            extra={"request_id": request_id, "method": request.method, "path": request.url.path},
        )
        return _envelope(
            500,
            ErrorResponse(
                error="Internal server error",
                message=str(exc) if settings.is_development else None,
                request_id=request_id,
            ),
        )
