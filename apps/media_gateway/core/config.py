"""
Runtime Settings (FastAPI Official Pattern)

환경변수 기반 동적 설정 - 배포 환경별로 변경됨
GATEWAY_ 접두어 변수와 기존 (접두어 없는) 변수 이름을 모두 허용합니다.
Reference: https://fastapi.tiangolo.com/advanced/settings/
"""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from media_gateway.core.constants import (
    DEFAULT_ENVIRONMENT,
    FIREBASE_CERT_URL,
    FIREBASE_ISSUER_PREFIX,
    MAX_UPLOAD_BYTES,
)

_DEVELOPMENT_ENVIRONMENTS = frozenset({"development", "dev", "local"})


class Settings(BaseSettings):
    """Runtime configuration for the Media Gateway."""

    app_name: str = "Media Gateway"

    environment: str = Field(
        DEFAULT_ENVIRONMENT,
        validation_alias=AliasChoices("GATEWAY_ENVIRONMENT", "ENVIRONMENT", "NODE_ENV"),
    )
    host: str = Field("0.0.0.0", validation_alias=AliasChoices("GATEWAY_HOST", "HOST"))
    port: int = Field(4000, ge=1, le=65535, validation_alias=AliasChoices("GATEWAY_PORT", "PORT"))

    # Identity provider (Firebase)
    firebase_project_id: str = Field(
        "",
        validation_alias=AliasChoices("GATEWAY_FIREBASE_PROJECT_ID", "FIREBASE_PROJECT_ID"),
    )
    firebase_client_email: str = Field(
        "",
        validation_alias=AliasChoices("GATEWAY_FIREBASE_CLIENT_EMAIL", "FIREBASE_CLIENT_EMAIL"),
    )
    firebase_private_key: str = Field(
        "",
        validation_alias=AliasChoices("GATEWAY_FIREBASE_PRIVATE_KEY", "FIREBASE_PRIVATE_KEY"),
    )
    firebase_cert_url: str = Field(
        FIREBASE_CERT_URL,
        validation_alias=AliasChoices("GATEWAY_FIREBASE_CERT_URL", "FIREBASE_CERT_URL"),
    )
    token_verify_timeout_seconds: float = Field(
        10.0,
        gt=0,
        le=120,
        validation_alias=AliasChoices("GATEWAY_TOKEN_VERIFY_TIMEOUT", "TOKEN_VERIFY_TIMEOUT"),
    )

    # Object store (Cloudflare R2, S3 호환)
    storage_backend: Literal["r2", "memory"] = Field(
        "r2",
        validation_alias=AliasChoices("GATEWAY_STORAGE_BACKEND", "STORAGE_BACKEND"),
    )
    r2_account_id: str = Field(
        "",
        validation_alias=AliasChoices("GATEWAY_R2_ACCOUNT_ID", "R2_ACCOUNT_ID"),
    )
    r2_access_key_id: str = Field(
        "",
        validation_alias=AliasChoices("GATEWAY_R2_ACCESS_KEY_ID", "R2_ACCESS_KEY_ID"),
    )
    r2_secret_access_key: str = Field(
        "",
        validation_alias=AliasChoices("GATEWAY_R2_SECRET_ACCESS_KEY", "R2_SECRET_ACCESS_KEY"),
    )
    r2_bucket_name: str = Field(
        "localme",
        min_length=1,
        validation_alias=AliasChoices("GATEWAY_R2_BUCKET_NAME", "R2_BUCKET_NAME"),
    )
    r2_public_base_url: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("GATEWAY_R2_PUBLIC_BASE_URL", "R2_PUBLIC_BASE_URL"),
    )
    storage_timeout_seconds: float = Field(
        30.0,
        gt=0,
        le=600,
        validation_alias=AliasChoices("GATEWAY_STORAGE_TIMEOUT", "STORAGE_TIMEOUT"),
    )

    # Upload
    max_upload_bytes: int = Field(
        MAX_UPLOAD_BYTES,
        ge=1,
        validation_alias=AliasChoices("GATEWAY_MAX_UPLOAD_BYTES", "MAX_UPLOAD_BYTES"),
    )

    # HTTP
    cors_origins: str = Field(
        "*",
        validation_alias=AliasChoices("GATEWAY_CORS_ORIGIN", "CORS_ORIGIN"),
    )

    # Proxy
    proxy_timeout_seconds: float = Field(
        30.0,
        gt=0,
        le=600,
        validation_alias=AliasChoices("GATEWAY_PROXY_TIMEOUT", "PROXY_TIMEOUT"),
    )
    proxy_allowed_hosts: str = Field(
        "",
        description="Comma-separated host allow-list (empty = any host)",
        validation_alias=AliasChoices("GATEWAY_PROXY_ALLOWED_HOSTS", "PROXY_ALLOWED_HOSTS"),
    )

    model_config = SettingsConfigDict(
        env_prefix="GATEWAY_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        validate_default=True,
    )

    @field_validator("firebase_private_key")
    @classmethod
    def _unescape_private_key(cls, value: str) -> str:
        # 환경변수에는 개행이 "\n" 리터럴로 들어옴
        return value.replace("\\n", "\n")

    @field_validator("r2_public_base_url")
    @classmethod
    def _normalize_public_base_url(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        trimmed = value.strip().rstrip("/")
        return trimmed or None

    @property
    def is_development(self) -> bool:
        return self.environment.strip().lower() in _DEVELOPMENT_ENVIRONMENTS

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def proxy_allowed_host_list(self) -> frozenset[str]:
        return frozenset(
            host.strip().lower() for host in self.proxy_allowed_hosts.split(",") if host.strip()
        )

    @property
    def r2_endpoint_url(self) -> str:
        return f"https://{self.r2_account_id}.r2.cloudflarestorage.com"

    @property
    def firebase_issuer(self) -> str:
        return f"{FIREBASE_ISSUER_PREFIX}{self.firebase_project_id}"


@lru_cache
def get_settings() -> Settings:
    """Return cached Settings instance (FastAPI pattern)."""
    return Settings()
