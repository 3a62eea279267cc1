"""오브젝트 스토리지 관련 예외."""

from media_gateway.core.exceptions.base import GatewayError


class StorageUploadError(GatewayError):
    """백엔드 쓰기 실패 (네트워크, 인증, 용량). 재시도하지 않음."""

    status_code = 500
    code = "UPLOAD_FAILED"

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Failed to upload to storage: {detail}")
