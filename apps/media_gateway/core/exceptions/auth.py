"""인증 관련 예외."""

from media_gateway.core.exceptions.base import GatewayError


class AuthError(GatewayError):
    status_code = 401
    code = "UNAUTHORIZED"


class MissingCredentialsError(AuthError):
    """Authorization 헤더가 없거나 Bearer 형식이 아님."""

    code = "MISSING_CREDENTIALS"

    def __init__(self) -> None:
        super().__init__("Missing or invalid Authorization header")


class InvalidTokenError(AuthError):
    """토큰 검증 실패 (만료, 위조, 폐기, 네트워크 오류 포함)."""

    code = "INVALID_TOKEN"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid or expired token: {detail}")
