"""업로드 검증 관련 예외."""

from media_gateway.core.exceptions.base import GatewayError


class UploadValidationError(GatewayError):
    status_code = 400
    code = "VALIDATION_ERROR"


class MissingFileError(UploadValidationError):
    code = "MISSING_FILE"

    def __init__(self) -> None:
        super().__init__("No file provided")


class FileTooLargeError(UploadValidationError):
    code = "FILE_TOO_LARGE"

    def __init__(self, max_bytes: int) -> None:
        self.max_bytes = max_bytes
        super().__init__(f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB.")


class UnsupportedMediaTypeError(UploadValidationError):
    code = "UNSUPPORTED_TYPE"

    def __init__(self, mime_type: str) -> None:
        self.mime_type = mime_type
        super().__init__(f"Unsupported file type: {mime_type}")


class MediaCategoryMismatchError(UploadValidationError):
    code = "CATEGORY_MISMATCH"

    def __init__(self, expected: str, actual: str) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Invalid file type. Expected {expected}, got {actual}")


class InvalidMediaTypeFieldError(UploadValidationError):
    code = "INVALID_MEDIA_TYPE_FIELD"

    def __init__(self) -> None:
        super().__init__('Media type must be "image" or "video"')


class InvalidPostIdError(UploadValidationError):
    code = "INVALID_POST_ID"

    def __init__(self) -> None:
        super().__init__(
            "postId must be a single path segment of letters, digits, '.', '_' or '-'"
        )
