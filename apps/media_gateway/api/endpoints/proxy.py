from typing import Optional

from fastapi import APIRouter, Depends, Query

from media_gateway.api.dependencies import get_proxy_relay
from media_gateway.services.proxy import ProxyRelay

router = APIRouter(tags=["proxy"])


@router.get("/proxy", summary="Relay remote media with a long-lived cache policy")
async def proxy_media(
    url: Optional[str] = Query(default=None, description="Absolute http(s) URL to fetch"),
    relay: ProxyRelay = Depends(get_proxy_relay),
):
    return await relay.relay(url)
