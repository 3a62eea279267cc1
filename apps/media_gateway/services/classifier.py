"""Media Classifier.

선언된 MIME 타입으로부터 저장 확장자를 결정합니다.
확장자는 항상 허용 목록의 MIME 타입에서만 파생되며, 클라이언트 파일명은 사용하지 않습니다.
"""

from __future__ import annotations

from media_gateway.core.exceptions import MediaCategoryMismatchError, UnsupportedMediaTypeError
from media_gateway.schemas.media import MediaCategory

# Content-Type → 확장자 매핑 (exact match)
MIME_EXTENSIONS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "video/mp4": "mp4",
    "video/webm": "webm",
    "video/quicktime": "mov",
}


def matches_category(mime_type: str, category: MediaCategory) -> bool:
    return mime_type.startswith(f"{category.value}/")


def classify(
    declared_mime_type: str,
    expected: MediaCategory,
    *,
    category_first: bool = False,
) -> str:
    """허용된 MIME 타입이면 확장자를 반환.

    category_first 이면 카테고리 검사를 허용 목록 검사보다 먼저 수행합니다
    (post 업로드: mediaType 과 다른 계열의 타입은 허용 여부와 무관하게 mismatch).

    Raises:
        UnsupportedMediaTypeError: 허용 목록에 없는 타입
        MediaCategoryMismatchError: 기대한 카테고리(image/video)와 다른 타입
    """
    if category_first and not matches_category(declared_mime_type, expected):
        raise MediaCategoryMismatchError(expected.value, declared_mime_type)
    ext = MIME_EXTENSIONS.get(declared_mime_type)
    if ext is None:
        raise UnsupportedMediaTypeError(declared_mime_type)
    if not matches_category(declared_mime_type, expected):
        raise MediaCategoryMismatchError(expected.value, declared_mime_type)
    return ext
