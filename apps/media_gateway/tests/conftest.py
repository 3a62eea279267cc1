"""Pytest fixtures for Media Gateway tests."""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

# apps/ 디렉토리를 PYTHONPATH에 추가 (from media_gateway.* 가능하게)
APPS_DIR = Path(__file__).resolve().parents[2]
if str(APPS_DIR) not in sys.path:
    sys.path.insert(0, str(APPS_DIR))

# 테스트 환경 설정
os.environ.setdefault("LOG_FORMAT", "text")
os.environ.setdefault("ENVIRONMENT", "test")

from media_gateway.core.exceptions import InvalidTokenError  # noqa: E402
from media_gateway.schemas.media import VerifiedIdentity  # noqa: E402

if TYPE_CHECKING:
    from media_gateway.core import Settings
    from media_gateway.services.storage import InMemoryObjectStore


TEST_UID = "u123"
TEST_TOKEN = "token-u123"
OTHER_UID = "u999"
OTHER_TOKEN = "token-u999"


class StaticTokenVerifier:
    """토큰 → 신원 고정 매핑 (외부 오라클 대체)."""

    def __init__(self, identities: dict[str, VerifiedIdentity]) -> None:
        self._identities = identities
        self.calls: list[str] = []

    async def verify(self, token: str) -> VerifiedIdentity:
        self.calls.append(token)
        identity = self._identities.get(token)
        if identity is None:
            raise InvalidTokenError("Firebase ID token has expired")
        return identity


def make_settings(**overrides) -> "Settings":
    from media_gateway.core import Settings

    values = dict(
        environment="production",
        firebase_project_id="test-project",
        storage_backend="memory",
        r2_account_id="test-account",
        r2_bucket_name="test-bucket",
        r2_public_base_url="https://cdn.test.com",
        cors_origins="*",
    )
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def test_settings() -> "Settings":
    return make_settings()


@pytest.fixture
def token_verifier() -> StaticTokenVerifier:
    return StaticTokenVerifier(
        {
            TEST_TOKEN: VerifiedIdentity(subject_id=TEST_UID, email="u123@test.com"),
            OTHER_TOKEN: VerifiedIdentity(subject_id=OTHER_UID),
        }
    )


@pytest.fixture
def memory_store(test_settings) -> "InMemoryObjectStore":
    from media_gateway.services.storage import InMemoryObjectStore

    return InMemoryObjectStore(test_settings)


@pytest.fixture
def identity() -> VerifiedIdentity:
    return VerifiedIdentity(subject_id=TEST_UID, email="u123@test.com")


@pytest.fixture
def auth_headers() -> dict[str, str]:
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture
def app(test_settings, token_verifier, memory_store):
    from media_gateway.main import create_app

    return create_app(test_settings, token_verifier=token_verifier, object_store=memory_store)


@pytest.fixture
def client(app):
    from fastapi.testclient import TestClient

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client
