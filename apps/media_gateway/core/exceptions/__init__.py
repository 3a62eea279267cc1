"""Core Exceptions."""

from media_gateway.core.exceptions.auth import (
    AuthError,
    InvalidTokenError,
    MissingCredentialsError,
)
from media_gateway.core.exceptions.base import GatewayError
from media_gateway.core.exceptions.proxy import (
    MissingProxyUrlError,
    ProxyTargetNotAllowedError,
    ProxyTransportError,
)
from media_gateway.core.exceptions.storage import StorageUploadError
from media_gateway.core.exceptions.upload import (
    FileTooLargeError,
    InvalidMediaTypeFieldError,
    InvalidPostIdError,
    MediaCategoryMismatchError,
    MissingFileError,
    UnsupportedMediaTypeError,
    UploadValidationError,
)

__all__ = [
    "AuthError",
    "FileTooLargeError",
    "GatewayError",
    "InvalidMediaTypeFieldError",
    "InvalidPostIdError",
    "InvalidTokenError",
    "MediaCategoryMismatchError",
    "MissingCredentialsError",
    "MissingFileError",
    "MissingProxyUrlError",
    "ProxyTargetNotAllowedError",
    "ProxyTransportError",
    "StorageUploadError",
    "UnsupportedMediaTypeError",
    "UploadValidationError",
]
