"""Identity Verifier.

Authorization: Bearer <Firebase ID token> 를 검증하여 VerifiedIdentity 로 변환합니다.
토큰/신원은 캐싱하지 않으며 요청마다 검증합니다 (공개 인증서만 max-age 동안 캐싱).
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol

import httpx
from fastapi import Depends, Header, Request
from jose import JWTError, jwt

from media_gateway.core.constants import FIREBASE_TOKEN_ALGORITHM
from media_gateway.core.exceptions import InvalidTokenError, MissingCredentialsError
from media_gateway.schemas.media import VerifiedIdentity

if TYPE_CHECKING:
    from media_gateway.core import Settings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "
_MAX_AGE_PATTERN = re.compile(r"max-age=(\d+)")
_MAX_SUBJECT_LENGTH = 128


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> VerifiedIdentity:
        """Return the verified identity or raise InvalidTokenError."""
        ...


def extract_bearer_token(authorization: Optional[str]) -> str:
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        raise MissingCredentialsError()
    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        raise MissingCredentialsError()
    return token


class FirebaseTokenVerifier:
    """Firebase ID 토큰 검증기.

    Google 이 공개하는 securetoken x509 인증서로 RS256 서명을 검증하고
    aud/iss/exp/sub/auth_time 클레임을 확인합니다.
    """

    def __init__(
        self,
        settings: "Settings",
        http_client: httpx.AsyncClient,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._project_id = settings.firebase_project_id
        self._issuer = settings.firebase_issuer
        self._cert_url = settings.firebase_cert_url
        self._timeout = settings.token_verify_timeout_seconds
        self._http = http_client
        self._clock = clock
        self._certificates: dict[str, str] = {}
        self._certificates_expire_at = 0.0
        self._lock = asyncio.Lock()

    async def verify(self, token: str) -> VerifiedIdentity:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as exc:
            raise InvalidTokenError(f"malformed token ({exc})") from exc

        if header.get("alg") != FIREBASE_TOKEN_ALGORITHM:
            raise InvalidTokenError(f"unexpected algorithm {header.get('alg')!r}")
        kid = header.get("kid")
        if not kid:
            raise InvalidTokenError("token has no key id")

        certificates = await self._get_certificates()
        certificate = certificates.get(kid)
        if certificate is None:
            raise InvalidTokenError("token signed with an unknown key")

        try:
            claims = jwt.decode(
                token,
                certificate,
                algorithms=[FIREBASE_TOKEN_ALGORITHM],
                audience=self._project_id,
                issuer=self._issuer,
            )
        except JWTError as exc:
            raise InvalidTokenError(str(exc)) from exc

        return self._to_identity(claims)

    def _to_identity(self, claims: dict[str, Any]) -> VerifiedIdentity:
        subject = claims.get("sub")
        if not isinstance(subject, str) or not subject:
            raise InvalidTokenError("token has no subject")
        if len(subject) > _MAX_SUBJECT_LENGTH:
            raise InvalidTokenError("token subject is too long")

        now = self._clock()
        issued_at = claims.get("iat")
        if issued_at is None or float(issued_at) > now:
            raise InvalidTokenError("token iat is missing or in the future")
        auth_time = claims.get("auth_time")
        if auth_time is not None and float(auth_time) > now:
            raise InvalidTokenError("token auth_time is in the future")

        email = claims.get("email")
        return VerifiedIdentity(subject_id=subject, email=email if isinstance(email, str) else None)

    async def _get_certificates(self) -> dict[str, str]:
        if self._certificates and self._clock() < self._certificates_expire_at:
            return self._certificates

        async with self._lock:
            if self._certificates and self._clock() < self._certificates_expire_at:
                return self._certificates
            try:
                response = await self._http.get(self._cert_url, timeout=self._timeout)
                response.raise_for_status()
                certificates = response.json()
            except (httpx.HTTPError, ValueError) as exc:
                logger.error("Failed to fetch token certificates", extra={"error": str(exc)})
                raise InvalidTokenError(f"unable to fetch signing keys ({exc})") from exc

            if not isinstance(certificates, dict):
                raise InvalidTokenError("unexpected signing key payload")

            max_age = _parse_max_age(response.headers.get("cache-control"))
            self._certificates = certificates
            self._certificates_expire_at = self._clock() + max_age
            logger.info(
                "Token certificates refreshed",
                extra={"key_count": len(certificates), "max_age": max_age},
            )
            return self._certificates


def _parse_max_age(cache_control: Optional[str]) -> int:
    if not cache_control:
        return 0
    match = _MAX_AGE_PATTERN.search(cache_control)
    return int(match.group(1)) if match else 0


def get_token_verifier(request: Request) -> TokenVerifier:
    return request.app.state.token_verifier


async def get_current_identity(
    authorization: Optional[str] = Header(default=None),
    verifier: TokenVerifier = Depends(get_token_verifier),
) -> VerifiedIdentity:
    """Bearer 토큰을 검증하여 요청 주체를 반환합니다."""
    token = extract_bearer_token(authorization)
    try:
        identity = await verifier.verify(token)
    except InvalidTokenError as exc:
        logger.info("Token verification failed", extra={"reason": exc.detail})
        raise
    except Exception as exc:
        # 오라클의 모든 실패는 401 로 통일
        logger.warning("Token verifier raised unexpectedly", exc_info=True)
        raise InvalidTokenError(str(exc)) from exc
    logger.debug("Token verified", extra={"uid": identity.subject_id})
    return identity


__all__ = [
    "FirebaseTokenVerifier",
    "TokenVerifier",
    "extract_bearer_token",
    "get_current_identity",
    "get_token_verifier",
]
