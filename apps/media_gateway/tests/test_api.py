"""HTTP tests for health, upload endpoints and the error envelope."""

import re

import pytest
from fastapi.testclient import TestClient

from media_gateway.core.constants import MAX_UPLOAD_BYTES
from media_gateway.core.exceptions import StorageUploadError
from media_gateway.main import create_app
from media_gateway.tests.conftest import OTHER_TOKEN, OTHER_UID, make_settings

UUID_PATTERN = r"[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}"


def _png(data: bytes = b"\x89PNG fake", name: str = "avatar.png", mime: str = "image/png"):
    return {"file": (name, data, mime)}


class FailingStore:
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    async def put(self, key, data, content_type, *, metadata=None):
        raise self.exc


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["timestamp"].endswith("Z")

    def test_unknown_route(self, client):
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"error": "Route not found"}

    def test_metrics_endpoint(self, client):
        response = client.get("/metrics/status")

        assert response.status_code == 200


class TestAuthentication:
    def test_missing_header_rejected_before_body(self, client, memory_store, token_verifier):
        """Authorization 헤더가 없으면 본문 파싱/검증 호출 없이 401 입니다."""
        response = client.post("/api/upload/profile", files=_png())

        assert response.status_code == 401
        assert response.json()["error"] == "Missing or invalid Authorization header"
        assert token_verifier.calls == []
        assert memory_store.objects == {}

    def test_non_bearer_header(self, client, token_verifier):
        response = client.post(
            "/api/upload/post",
            headers={"Authorization": "Basic dXNlcjpwYXNz"},
            files=_png(),
            data={"mediaType": "image"},
        )

        assert response.status_code == 401
        assert token_verifier.calls == []

    def test_missing_file_still_needs_auth(self, client):
        response = client.post("/api/upload/profile")

        assert response.status_code == 401

    def test_invalid_token(self, client, memory_store):
        response = client.post(
            "/api/upload/profile",
            headers={"Authorization": "Bearer expired"},
            files=_png(),
        )

        assert response.status_code == 401
        body = response.json()
        assert body["error"] == "Invalid or expired token: Firebase ID token has expired"
        assert body["code"] == "INVALID_TOKEN"
        assert memory_store.objects == {}

    def test_unexpected_verifier_failure_is_401(self, test_settings, memory_store):
        class BrokenVerifier:
            async def verify(self, token):
                raise ConnectionError("oracle unreachable")

        app = create_app(test_settings, token_verifier=BrokenVerifier(), object_store=memory_store)
        with TestClient(app, raise_server_exceptions=False) as client:
            response = client.post(
                "/api/upload/profile",
                headers={"Authorization": "Bearer anything"},
                files=_png(),
            )

        assert response.status_code == 401
        assert "oracle unreachable" in response.json()["error"]


class TestProfileUpload:
    def test_upload_profile(self, client, auth_headers, memory_store):
        response = client.post("/api/upload/profile", headers=auth_headers, files=_png())

        assert response.status_code == 200
        url = response.json()["url"]
        assert re.fullmatch(rf"https://cdn\.test\.com/profiles/u123/{UUID_PATTERN}\.png", url)

        key = url.removeprefix("https://cdn.test.com/")
        stored = memory_store.objects[key]
        assert stored.data == b"\x89PNG fake"
        assert stored.content_type == "image/png"

    def test_client_user_id_is_ignored(self, client, auth_headers, memory_store):
        """본문의 userId 는 무시하고 검증된 uid 로 저장합니다."""
        response = client.post(
            "/api/upload/profile",
            headers=auth_headers,
            files=_png(),
            data={"userId": OTHER_UID},
        )

        assert response.status_code == 200
        (key,) = memory_store.objects
        assert key.startswith("profiles/u123/")
        assert OTHER_UID not in key

    def test_no_file(self, client, auth_headers):
        response = client.post(
            "/api/upload/profile", headers=auth_headers, data={"caption": "hi"}
        )

        assert response.status_code == 400
        assert response.json() == {"error": "No file provided", "code": "MISSING_FILE"}

    def test_unsupported_type(self, client, auth_headers, memory_store):
        response = client.post(
            "/api/upload/profile",
            headers=auth_headers,
            files=_png(name="doc.png", mime="application/pdf"),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Unsupported file type: application/pdf"
        assert memory_store.objects == {}

    def test_video_rejected_for_profile(self, client, auth_headers, memory_store):
        response = client.post(
            "/api/upload/profile",
            headers=auth_headers,
            files=_png(name="clip.mp4", mime="video/mp4"),
        )

        assert response.status_code == 400
        assert response.json()["code"] == "CATEGORY_MISMATCH"
        assert memory_store.objects == {}

    def test_file_at_limit(self, client, auth_headers):
        data = b"x" * MAX_UPLOAD_BYTES

        response = client.post(
            "/api/upload/profile", headers=auth_headers, files=_png(data=data)
        )

        assert response.status_code == 200

    def test_file_over_limit(self, client, auth_headers, memory_store):
        data = b"x" * (MAX_UPLOAD_BYTES + 1)

        response = client.post(
            "/api/upload/profile", headers=auth_headers, files=_png(data=data)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "File too large. Maximum size is 10MB."
        assert memory_store.objects == {}

    def test_two_uploads_never_overwrite(self, client, auth_headers, memory_store):
        first = client.post("/api/upload/profile", headers=auth_headers, files=_png())
        second = client.post("/api/upload/profile", headers=auth_headers, files=_png())

        assert first.json()["url"] != second.json()["url"]
        assert len(memory_store.objects) == 2


class TestPostUpload:
    def test_upload_video_post(self, client, auth_headers, memory_store):
        response = client.post(
            "/api/upload/post",
            headers=auth_headers,
            files=_png(name="clip.mov", mime="video/quicktime"),
            data={"mediaType": "video", "postId": "post-1"},
        )

        assert response.status_code == 200
        assert re.fullmatch(
            rf"https://cdn\.test\.com/posts/u123/post-1/videos/{UUID_PATTERN}\.mov",
            response.json()["url"],
        )

    def test_subject_namespace_wins_over_post_id(self, client, memory_store):
        response = client.post(
            "/api/upload/post",
            headers={"Authorization": f"Bearer {OTHER_TOKEN}"},
            files=_png(),
            data={"mediaType": "image", "postId": "u123", "userId": "u123"},
        )

        assert response.status_code == 200
        (key,) = memory_store.objects
        assert key.split("/")[:2] == ["posts", OTHER_UID]

    def test_uncategorized_without_post_id(self, client, auth_headers, memory_store):
        response = client.post(
            "/api/upload/post",
            headers=auth_headers,
            files=_png(),
            data={"mediaType": "image"},
        )

        assert response.status_code == 200
        assert "/posts/u123/uncategorized/images/" in response.json()["url"]

    @pytest.mark.parametrize("form", [{}, {"mediaType": "audio"}])
    def test_invalid_media_type_field(self, client, auth_headers, memory_store, form):
        response = client.post(
            "/api/upload/post", headers=auth_headers, files=_png(), data=form
        )

        assert response.status_code == 400
        assert response.json()["error"] == 'Media type must be "image" or "video"'
        assert memory_store.objects == {}

    def test_mismatch_rejected_without_write(self, client, auth_headers, memory_store):
        response = client.post(
            "/api/upload/post",
            headers=auth_headers,
            files=_png(name="clip.mp4", mime="video/mp4"),
            data={"mediaType": "image"},
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Invalid file type. Expected image, got video/mp4"
        assert memory_store.objects == {}

    def test_path_traversal_post_id(self, client, auth_headers, memory_store):
        response = client.post(
            "/api/upload/post",
            headers=auth_headers,
            files=_png(),
            data={"mediaType": "image", "postId": "../../profiles/u999"},
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_POST_ID"
        assert memory_store.objects == {}


class TestServerErrors:
    def _client(self, token_verifier, store, **settings_overrides) -> TestClient:
        app = create_app(
            make_settings(**settings_overrides),
            token_verifier=token_verifier,
            object_store=store,
        )
        return TestClient(app, raise_server_exceptions=False)

    def test_storage_failure_hides_detail_in_production(self, token_verifier, auth_headers):
        store = FailingStore(StorageUploadError("AccessDenied"))

        with self._client(token_verifier, store) as client:
            response = client.post("/api/upload/profile", headers=auth_headers, files=_png())

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Upload failed"
        assert "message" not in body
        assert re.fullmatch(UUID_PATTERN, body["requestId"])

    def test_storage_failure_detail_in_development(self, token_verifier, auth_headers):
        store = FailingStore(StorageUploadError("AccessDenied"))

        with self._client(token_verifier, store, environment="development") as client:
            response = client.post("/api/upload/profile", headers=auth_headers, files=_png())

        assert response.status_code == 500
        assert response.json()["message"] == "Failed to upload to storage: AccessDenied"

    def test_unhandled_error_envelope(self, token_verifier, auth_headers):
        store = FailingStore(RuntimeError("boom"))

        with self._client(token_verifier, store) as client:
            response = client.post("/api/upload/profile", headers=auth_headers, files=_png())

        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "Internal server error"
        assert "message" not in body
        assert body["requestId"]

    def test_unhandled_error_message_in_development(self, token_verifier, auth_headers):
        store = FailingStore(RuntimeError("boom"))

        with self._client(token_verifier, store, environment="development") as client:
            response = client.post("/api/upload/profile", headers=auth_headers, files=_png())

        assert response.status_code == 500
        assert response.json()["message"] == "boom"


class TestStartup:
    def test_requires_firebase_project(self, memory_store):
        app = create_app(make_settings(firebase_project_id=""), object_store=memory_store)

        with pytest.raises(RuntimeError, match="FIREBASE_PROJECT_ID"):
            with TestClient(app):
                pass
