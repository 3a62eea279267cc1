"""Storage key derivation.

profiles/{uid}/{uuid}.{ext}
posts/{uid}/{postId|uncategorized}/{images|videos}/{uuid}.{ext}

uid 는 항상 검증된 토큰의 subject 입니다. 요청 본문의 사용자 ID 는 사용하지 않습니다.
"""

from __future__ import annotations

import re
import uuid
from typing import Callable, Optional

from media_gateway.core.constants import POST_PREFIX, PROFILE_PREFIX, UNCATEGORIZED_POST
from media_gateway.core.exceptions import InvalidPostIdError
from media_gateway.schemas.media import MediaIntent, PostIntent, ProfileIntent, VerifiedIdentity

IdFactory = Callable[[], str]

_POST_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9._-]{0,127}$")


def new_object_id() -> str:
    """128-bit 랜덤 UUID (os.urandom 기반)."""
    return str(uuid.uuid4())


def normalize_post_id(post_id: Optional[str]) -> str:
    if post_id is None:
        return UNCATEGORIZED_POST
    trimmed = post_id.strip()
    if not trimmed:
        return UNCATEGORIZED_POST
    if not _POST_ID_PATTERN.fullmatch(trimmed):
        raise InvalidPostIdError()
    return trimmed


def derive_key(
    identity: VerifiedIdentity,
    intent: MediaIntent,
    ext: str,
    *,
    id_factory: IdFactory = new_object_id,
) -> str:
    filename = f"{id_factory()}.{ext}"
    if isinstance(intent, ProfileIntent):
        return f"{PROFILE_PREFIX}/{identity.subject_id}/{filename}"
    if isinstance(intent, PostIntent):
        post_folder = normalize_post_id(intent.post_id)
        return (
            f"{POST_PREFIX}/{identity.subject_id}/{post_folder}/"
            f"{intent.category.folder}/{filename}"
        )
    raise TypeError(f"Unknown media intent: {intent!r}")
