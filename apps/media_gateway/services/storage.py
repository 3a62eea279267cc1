"""Storage Upload Adapter.

ObjectStore 포트와 두 구현체:
- R2ObjectStore: boto3 S3 클라이언트 (Cloudflare R2 엔드포인트)
- InMemoryObjectStore: 로컬 개발/테스트용
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, Mapping, Optional, Protocol

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from media_gateway.core.exceptions import StorageUploadError

if TYPE_CHECKING:
    from botocore.client import BaseClient

    from media_gateway.core import Settings

logger = logging.getLogger(__name__)


class ObjectStore(Protocol):
    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        *,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> str:
        """Write the blob under ``key`` and return its public URL."""
        ...


def compose_public_url(settings: "Settings", key: str) -> str:
    """공개 URL 구성.

    R2_PUBLIC_BASE_URL 이 없으면 버킷 직접 URL 로 대체합니다
    (버킷이 public 이 아니면 접근 불가할 수 있음).
    """
    if settings.r2_public_base_url:
        return f"{settings.r2_public_base_url}/{key}"
    return (
        f"https://{settings.r2_bucket_name}.{settings.r2_account_id}"
        f".r2.cloudflarestorage.com/{key}"
    )


def create_r2_client(settings: "Settings") -> "BaseClient":
    return boto3.client(
        "s3",
        region_name="auto",
        endpoint_url=settings.r2_endpoint_url,
        aws_access_key_id=settings.r2_access_key_id or None,
        aws_secret_access_key=settings.r2_secret_access_key or None,
        config=Config(
            connect_timeout=settings.storage_timeout_seconds,
            read_timeout=settings.storage_timeout_seconds,
            retries={"total_max_attempts": 1, "mode": "standard"},
        ),
    )


class R2ObjectStore:
    def __init__(self, settings: "Settings", s3_client: "BaseClient | None" = None) -> None:
        self._settings = settings
        self._s3 = s3_client or create_r2_client(settings)

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        *,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> str:
        params = {
            "Bucket": self._settings.r2_bucket_name,
            "Key": key,
            "Body": data,
            "ContentType": content_type,
        }
        if metadata:
            params["Metadata"] = dict(metadata)

        # boto3 는 동기 클라이언트 - 이벤트 루프 블로킹 방지
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, partial(self._s3.put_object, **params))
        except (BotoCoreError, ClientError) as exc:
            logger.error(
                "R2 upload failed",
                extra={"key": key, "bucket": self._settings.r2_bucket_name, "error": str(exc)},
            )
            raise StorageUploadError(str(exc)) from exc

        return compose_public_url(self._settings, key)


@dataclass(frozen=True)
class StoredObject:
    data: bytes
    content_type: str
    metadata: Mapping[str, str]


class InMemoryObjectStore:
    """프로세스 메모리에 blob 을 보관하는 ObjectStore.

    로컬 개발/테스트 전용. 삭제나 크기 제한이 없어 objects 는 프로세스가
    살아있는 동안 계속 커지므로 운영 환경에서는 r2 backend 를 사용해야 합니다.
    """

    def __init__(self, settings: "Settings") -> None:
        self._settings = settings
        self.objects: dict[str, StoredObject] = {}

    async def put(
        self,
        key: str,
        data: bytes,
        content_type: str,
        *,
        metadata: Optional[Mapping[str, str]] = None,
    ) -> str:
        self.objects[key] = StoredObject(
            data=data,
            content_type=content_type,
            metadata=dict(metadata or {}),
        )
        return compose_public_url(self._settings, key)


def build_object_store(settings: "Settings") -> ObjectStore:
    if settings.storage_backend == "memory":
        logger.warning("Using in-memory object store; uploads are not persisted")
        return InMemoryObjectStore(settings)
    return R2ObjectStore(settings)
