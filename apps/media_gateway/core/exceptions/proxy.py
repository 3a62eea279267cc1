"""프록시 관련 예외."""

from media_gateway.core.exceptions.base import GatewayError


class MissingProxyUrlError(GatewayError):
    code = "MISSING_URL"

    def __init__(self) -> None:
        super().__init__("URL parameter missing")


class ProxyTargetNotAllowedError(GatewayError):
    code = "PROXY_TARGET_NOT_ALLOWED"

    def __init__(self, reason: str) -> None:
        super().__init__(f"Proxy target not allowed: {reason}")


class ProxyTransportError(GatewayError):
    """DNS 실패, 연결 리셋, 타임아웃. 본문 없는 500 으로 응답."""

    status_code = 500
    code = "PROXY_TRANSPORT_ERROR"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)
