"""Health probe endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter

from media_gateway.schemas.media import HealthResponse

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health():
    timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return HealthResponse(status="ok", timestamp=timestamp.replace("+00:00", "Z"))
