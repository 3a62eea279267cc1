"""Upload Orchestrator.

요청 단위 파이프라인 (인증은 dependency 에서 선행):
  파일 존재 → 크기 → (post: mediaType 필드) → 분류 → 키 생성 → 저장 → {url}
어느 단계에서든 실패하면 즉시 중단하며, 저장 이전 단계 실패 시 쓰기는 발생하지 않습니다.
"""

from __future__ import annotations

import logging
from typing import Optional

from media_gateway.core.exceptions import (
    FileTooLargeError,
    GatewayError,
    InvalidMediaTypeFieldError,
    MissingFileError,
    StorageUploadError,
)
from media_gateway.metrics import UPLOAD_BYTES_TOTAL, UPLOADS_TOTAL
from media_gateway.schemas.media import (
    IncomingFile,
    MediaCategory,
    MediaIntent,
    PostIntent,
    ProfileIntent,
    UploadResponse,
    VerifiedIdentity,
)
from media_gateway.services.classifier import classify
from media_gateway.services.keys import IdFactory, derive_key, new_object_id
from media_gateway.services.storage import ObjectStore

logger = logging.getLogger(__name__)

_METADATA_MAX_LENGTH = 255


def _ascii_metadata(value: str) -> str:
    # S3 사용자 메타데이터는 ASCII 만 허용
    return "".join(ch for ch in value if 32 <= ord(ch) < 127)[:_METADATA_MAX_LENGTH]


def _record_failure(intent: str, exc: GatewayError) -> None:
    result = "failed" if isinstance(exc, StorageUploadError) else "rejected"
    UPLOADS_TOTAL.labels(intent=intent, result=result).inc()


def parse_media_type_field(value: Optional[str]) -> MediaCategory:
    if value not in (MediaCategory.image.value, MediaCategory.video.value):
        raise InvalidMediaTypeFieldError()
    return MediaCategory(value)


class UploadService:
    def __init__(
        self,
        store: ObjectStore,
        *,
        max_upload_bytes: int,
        id_factory: IdFactory = new_object_id,
    ) -> None:
        self._store = store
        self._max_upload_bytes = max_upload_bytes
        self._id_factory = id_factory

    async def upload_profile(
        self,
        identity: VerifiedIdentity,
        file: Optional[IncomingFile],
    ) -> UploadResponse:
        try:
            incoming = self._require_file(file)
            intent = ProfileIntent()
            return await self._store_media(identity, incoming, intent, intent_name="profile")
        except GatewayError as exc:
            _record_failure("profile", exc)
            raise

    async def upload_post(
        self,
        identity: VerifiedIdentity,
        file: Optional[IncomingFile],
        *,
        media_type: Optional[str],
        post_id: Optional[str] = None,
    ) -> UploadResponse:
        logger.info(
            "Post upload requested",
            extra={
                "uid": identity.subject_id,
                "file_name": file.original_name if file else None,
                "size_bytes": file.size_bytes if file else None,
            },
        )
        try:
            incoming = self._require_file(file)
            category = parse_media_type_field(media_type)
            intent = PostIntent(category=category, post_id=post_id)
            return await self._store_media(identity, incoming, intent, intent_name="post")
        except GatewayError as exc:
            _record_failure("post", exc)
            raise

    def _require_file(self, file: Optional[IncomingFile]) -> IncomingFile:
        if file is None:
            raise MissingFileError()
        if file.size_bytes > self._max_upload_bytes:
            raise FileTooLargeError(self._max_upload_bytes)
        return file

    async def _store_media(
        self,
        identity: VerifiedIdentity,
        file: IncomingFile,
        intent: MediaIntent,
        *,
        intent_name: str,
    ) -> UploadResponse:
        # 확장자는 MIME 타입에서만 파생 (파일명 무시)
        ext = classify(
            file.declared_mime_type,
            intent.category,
            category_first=isinstance(intent, PostIntent),
        )
        key = derive_key(identity, intent, ext, id_factory=self._id_factory)

        url = await self._store.put(
            key,
            file.data,
            file.declared_mime_type,
            metadata={
                "uploader-id": identity.subject_id,
                "original-name": _ascii_metadata(file.original_name),
            },
        )

        UPLOADS_TOTAL.labels(intent=intent_name, result="stored").inc()
        UPLOAD_BYTES_TOTAL.labels(intent=intent_name).inc(file.size_bytes)
        logger.info(
            "Media uploaded",
            extra={
                "uid": identity.subject_id,
                "intent": intent_name,
                "key": key,
                "content_type": file.declared_mime_type,
                "size_bytes": file.size_bytes,
            },
        )
        return UploadResponse(url=url)
