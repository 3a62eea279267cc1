"""Upload endpoints.

인증(get_current_identity)이 먼저 실행된 뒤에 multipart 본문을 파싱하도록
File/Form 파라미터 대신 request.form() 을 직접 사용합니다.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import FormData
from starlette.datastructures import UploadFile as StarletteUploadFile

from media_gateway.api.dependencies import get_app_settings, get_upload_service
from media_gateway.core import Settings
from media_gateway.core.exceptions import FileTooLargeError
from media_gateway.schemas.media import IncomingFile, UploadResponse, VerifiedIdentity
from media_gateway.security import get_current_identity
from media_gateway.services.upload import UploadService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])

# multipart 경계/필드 여유분
_MULTIPART_OVERHEAD_BYTES = 1024 * 1024
_IGNORED_OWNER_FIELDS = ("userId", "uid", "ownerId")


def _reject_oversized_body(request: Request, max_bytes: int) -> None:
    content_length = request.headers.get("content-length")
    if content_length and content_length.isdigit():
        if int(content_length) > max_bytes + _MULTIPART_OVERHEAD_BYTES:
            raise FileTooLargeError(max_bytes)


async def read_incoming_file(form: FormData, max_bytes: int) -> Optional[IncomingFile]:
    upload = form.get("file")
    if not isinstance(upload, StarletteUploadFile):
        return None
    # 한도 + 1 바이트까지만 읽어서 초과 여부 판단
    data = await upload.read(max_bytes + 1)
    size = max(len(data), upload.size or 0)
    return IncomingFile(
        data=data,
        declared_mime_type=upload.content_type or "",
        original_name=upload.filename or "",
        size_bytes=size,
    )


def _text_field(form: FormData, name: str) -> Optional[str]:
    value = form.get(name)
    return value if isinstance(value, str) else None


def _log_ignored_owner_fields(form: FormData, identity: VerifiedIdentity) -> None:
    for field in _IGNORED_OWNER_FIELDS:
        supplied = _text_field(form, field)
        if supplied and supplied != identity.subject_id:
            logger.warning(
                "Ignoring client-supplied owner field",
                extra={"field": field, "uid": identity.subject_id},
            )


@router.post("/profile", response_model=UploadResponse, summary="Upload a profile image")
async def upload_profile(
    request: Request,
    identity: VerifiedIdentity = Depends(get_current_identity),
    service: UploadService = Depends(get_upload_service),
    settings: Settings = Depends(get_app_settings),
):
    _reject_oversized_body(request, settings.max_upload_bytes)
    async with request.form() as form:
        _log_ignored_owner_fields(form, identity)
        incoming = await read_incoming_file(form, settings.max_upload_bytes)
        return await service.upload_profile(identity, incoming)


@router.post("/post", response_model=UploadResponse, summary="Upload post media (image or video)")
async def upload_post(
    request: Request,
    identity: VerifiedIdentity = Depends(get_current_identity),
    service: UploadService = Depends(get_upload_service),
    settings: Settings = Depends(get_app_settings),
):
    _reject_oversized_body(request, settings.max_upload_bytes)
    async with request.form() as form:
        _log_ignored_owner_fields(form, identity)
        incoming = await read_incoming_file(form, settings.max_upload_bytes)
        return await service.upload_post(
            identity,
            incoming,
            media_type=_text_field(form, "mediaType"),
            post_id=_text_field(form, "postId"),
        )
