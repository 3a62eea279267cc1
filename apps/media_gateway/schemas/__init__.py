from media_gateway.schemas.media import (
    ErrorResponse,
    HealthResponse,
    IncomingFile,
    MediaCategory,
    MediaIntent,
    PostIntent,
    ProfileIntent,
    UploadResponse,
    VerifiedIdentity,
)

__all__ = [
    "ErrorResponse",
    "HealthResponse",
    "IncomingFile",
    "MediaCategory",
    "MediaIntent",
    "PostIntent",
    "ProfileIntent",
    "UploadResponse",
    "VerifiedIdentity",
]
