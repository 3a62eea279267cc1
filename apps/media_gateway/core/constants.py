"""
Service Constants (Single Source of Truth)

정적 상수 정의 - 빌드 타임에 결정되며 환경변수로 변경되지 않음
"""

from __future__ import annotations

# ─────────────────────────────────────────────────────────────────────────────
# Service Identity
# ─────────────────────────────────────────────────────────────────────────────
SERVICE_NAME = "media-gateway"
SERVICE_VERSION = "1.0.0"

# ─────────────────────────────────────────────────────────────────────────────
# Logging Constants (12-Factor App Compliance)
# ─────────────────────────────────────────────────────────────────────────────
ENV_KEY_ENVIRONMENT = "ENVIRONMENT"
ENV_KEY_LOG_LEVEL = "LOG_LEVEL"
ENV_KEY_LOG_FORMAT = "LOG_FORMAT"

DEFAULT_ENVIRONMENT = "production"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FORMAT = "json"

ECS_VERSION = "8.11.0"

EXCLUDED_LOG_RECORD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
        "asctime",
    }
)

NOISY_LOGGERS = (
    "uvicorn.access",
    "httpx",
    "httpcore",
    "botocore",
    "boto3",
    "urllib3",
    "asyncio",
)

# ─────────────────────────────────────────────────────────────────────────────
# PII Masking Configuration
# ─────────────────────────────────────────────────────────────────────────────
SENSITIVE_FIELD_PATTERNS = frozenset(
    {"password", "secret", "token", "api_key", "authorization", "private_key"}
)
MASK_PLACEHOLDER = "***REDACTED***"
MASK_PRESERVE_PREFIX = 4
MASK_PRESERVE_SUFFIX = 4
MASK_MIN_LENGTH = 10

# ─────────────────────────────────────────────────────────────────────────────
# Upload Constants
# ─────────────────────────────────────────────────────────────────────────────
# 최대 업로드 크기 (10MB)
MAX_UPLOAD_BYTES = 10 * 1024 * 1024

PROFILE_PREFIX = "profiles"
POST_PREFIX = "posts"
UNCATEGORIZED_POST = "uncategorized"

# ─────────────────────────────────────────────────────────────────────────────
# Proxy Constants
# ─────────────────────────────────────────────────────────────────────────────
# 1년 (31536000초)
PROXY_CACHE_CONTROL = "public, max-age=31536000"
PROXY_ALLOWED_SCHEMES = frozenset({"http", "https"})
# 리다이렉트는 hop 마다 대상 검증 후 직접 따라감
PROXY_MAX_REDIRECTS = 5

# ─────────────────────────────────────────────────────────────────────────────
# Identity Provider
# ─────────────────────────────────────────────────────────────────────────────
FIREBASE_CERT_URL = (
    "https://www.googleapis.com/robot/v1/metadata/x509/securetoken@system.gserviceaccount.com"
)
FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"
FIREBASE_TOKEN_ALGORITHM = "RS256"
