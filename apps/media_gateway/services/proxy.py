"""Proxy Relay.

임의의 upstream 미디어를 스트리밍으로 중계합니다 (클라이언트 SSL/CORS 문제 해결용).
- 인증 없음, 스토리지 미사용
- 성공 시 content-type 그대로 전달 + 1년 public 캐시
- upstream 비정상 상태는 그대로 전달, 전송 실패는 본문 없는 500
- 리다이렉트도 hop 마다 scheme/host 검증 (허용되지 않으면 400)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, AsyncIterator, Optional

import httpx
from starlette.background import BackgroundTask
from starlette.responses import PlainTextResponse, Response, StreamingResponse

from media_gateway.core.constants import (
    PROXY_ALLOWED_SCHEMES,
    PROXY_CACHE_CONTROL,
    PROXY_MAX_REDIRECTS,
)
from media_gateway.core.exceptions import (
    MissingProxyUrlError,
    ProxyTargetNotAllowedError,
    ProxyTransportError,
)
from media_gateway.metrics import PROXY_REQUESTS_TOTAL

if TYPE_CHECKING:
    from media_gateway.core import Settings

logger = logging.getLogger(__name__)


class ProxyRelay:
    def __init__(self, client: httpx.AsyncClient, settings: "Settings") -> None:
        self._client = client
        self._timeout = settings.proxy_timeout_seconds
        self._allowed_hosts = settings.proxy_allowed_host_list

    def resolve_target(self, target_url: Optional[str]) -> httpx.URL:
        if not target_url:
            raise MissingProxyUrlError()
        try:
            url = httpx.URL(target_url)
        except httpx.InvalidURL as exc:
            raise ProxyTargetNotAllowedError("invalid URL") from exc
        if url.scheme not in PROXY_ALLOWED_SCHEMES or not url.host:
            raise ProxyTargetNotAllowedError("only absolute http(s) URLs are supported")
        if self._allowed_hosts and url.host.lower() not in self._allowed_hosts:
            raise ProxyTargetNotAllowedError(f"host {url.host} is not allowed")
        return url

    async def relay(self, target_url: Optional[str]) -> Response:
        url = self.resolve_target(target_url)
        logger.info("Proxying media", extra={"target_host": url.host, "target_path": url.path})

        upstream = await self._open_upstream(url)

        if not upstream.is_success:
            await upstream.aclose()
            PROXY_REQUESTS_TOTAL.labels(outcome="upstream_error").inc()
            logger.info(
                "Proxy upstream returned error",
                extra={"target_host": url.host, "status_code": upstream.status_code},
            )
            return PlainTextResponse(
                f"Failed to fetch media: {upstream.reason_phrase}",
                status_code=upstream.status_code,
            )

        headers = {"Cache-Control": PROXY_CACHE_CONTROL}
        content_type = upstream.headers.get("content-type")
        if content_type:
            headers["Content-Type"] = content_type

        PROXY_REQUESTS_TOTAL.labels(outcome="relayed").inc()
        return StreamingResponse(
            self._iter_body(upstream),
            headers=headers,
            background=BackgroundTask(upstream.aclose),
        )

    async def _open_upstream(self, url: httpx.URL) -> httpx.Response:
        """GET 을 보내고 리다이렉트는 Location 마다 resolve_target 을 거쳐 따라갑니다."""
        for _ in range(PROXY_MAX_REDIRECTS + 1):
            request = self._client.build_request("GET", url, timeout=self._timeout)
            try:
                upstream = await self._client.send(request, stream=True, follow_redirects=False)
            except httpx.HTTPError as exc:
                PROXY_REQUESTS_TOTAL.labels(outcome="transport_error").inc()
                logger.warning(
                    "Proxy upstream unreachable",
                    extra={"target_host": url.host, "error": str(exc)},
                )
                raise ProxyTransportError(str(exc)) from exc

            if not upstream.has_redirect_location:
                return upstream

            location = upstream.headers["location"]
            await upstream.aclose()
            try:
                next_url = url.join(location)
            except httpx.InvalidURL as exc:
                raise ProxyTargetNotAllowedError("invalid redirect location") from exc
            try:
                url = self.resolve_target(str(next_url))
            except ProxyTargetNotAllowedError:
                PROXY_REQUESTS_TOTAL.labels(outcome="redirect_blocked").inc()
                logger.warning(
                    "Proxy redirect target rejected",
                    extra={"target_host": url.host, "location": location},
                )
                raise

        PROXY_REQUESTS_TOTAL.labels(outcome="transport_error").inc()
        raise ProxyTransportError(f"more than {PROXY_MAX_REDIRECTS} redirects")

    async def _iter_body(self, upstream: httpx.Response) -> AsyncIterator[bytes]:
        try:
            async for chunk in upstream.aiter_bytes():
                yield chunk
        except httpx.HTTPError as exc:
            # 헤더는 이미 전송됨 - 연결만 끊김
            logger.warning(
                "Proxy stream interrupted",
                extra={"target_host": upstream.request.url.host, "error": str(exc)},
            )
            raise
