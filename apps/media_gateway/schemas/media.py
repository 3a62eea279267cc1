from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class MediaCategory(str, Enum):
    image = "image"
    video = "video"

    @property
    def folder(self) -> str:
        return f"{self.value}s"


class VerifiedIdentity(BaseModel):
    """토큰 검증 결과. 요청 범위에서만 사용되며 저장하지 않음."""

    subject_id: str = Field(..., min_length=1, max_length=128)
    email: Optional[str] = None

    model_config = ConfigDict(frozen=True)


class IncomingFile(BaseModel):
    data: bytes
    declared_mime_type: str
    original_name: str = ""
    size_bytes: int = Field(..., ge=0)

    model_config = ConfigDict(frozen=True)


@dataclass(frozen=True)
class ProfileIntent:
    """프로필 이미지 업로드 (image 전용)."""

    category: MediaCategory = MediaCategory.image


@dataclass(frozen=True)
class PostIntent:
    category: MediaCategory
    post_id: Optional[str] = None


MediaIntent = Union[ProfileIntent, PostIntent]


class UploadResponse(BaseModel):
    url: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str


class ErrorResponse(BaseModel):
    """모든 4xx/5xx 응답의 공통 envelope."""

    error: str
    code: Optional[str] = None
    message: Optional[str] = None
    request_id: Optional[str] = Field(default=None, serialization_alias="requestId")

    def to_content(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)
