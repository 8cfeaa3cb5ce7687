"""
Unit tests for ImageApiRepository.
Uses httpx.MockTransport in place of the remote image service.
"""
import asyncio
import httpx
import pytest
from src.repositories.image_api_repository import ImageApiRepository
from src.core.exceptions import UploadFailedException


class TestImageApiRepository:
    """Test suite for ImageApiRepository."""

    @pytest.fixture
    def requests(self):
        return []

    def _repository(self, requests, status_code=200, json=None, content=None, token=None):
        def handler(request):
            requests.append(request)
            if content is not None:
                return httpx.Response(status_code, content=content)
            return httpx.Response(status_code, json=json)

        return ImageApiRepository(
            base_url="http://images.test/api/",
            token=token,
            timeout=5,
            transport=httpx.MockTransport(handler)
        )

    def test_upload_success(self, requests, make_file_ref):
        body = {"data": {"image": {"_id": "abc123", "cloudinaryUrl": "https://cdn/abc123.jpg"}}}
        repo = self._repository(requests, json=body)

        result = asyncio.run(repo.upload(make_file_ref("photo1.jpg")))

        assert result.remote_id == "abc123"
        assert result.metadata["cloudinaryUrl"] == "https://cdn/abc123.jpg"
        assert str(requests[0].url) == "http://images.test/api/images/upload"
        assert requests[0].method == "POST"

    def test_upload_sends_multipart_image_field(self, requests, make_file_ref):
        repo = self._repository(requests, json={"data": {"image": {"_id": 1}}})

        asyncio.run(repo.upload(make_file_ref("photo1.jpg")))

        request = requests[0]
        assert request.headers["content-type"].startswith("multipart/form-data")
        assert b'name="image"' in request.content
        assert b'filename="photo1.jpg"' in request.content

    def test_upload_sends_bearer_token(self, requests, make_file_ref):
        repo = self._repository(requests, json={"data": {"image": {"_id": 1}}}, token="secret")

        result = asyncio.run(repo.upload(make_file_ref()))

        assert requests[0].headers["authorization"] == "Bearer secret"
        assert result.remote_id == "1"

    def test_upload_without_token_sends_no_authorization(self, requests, make_file_ref):
        repo = self._repository(requests, json={"data": {"image": {"_id": 1}}})

        asyncio.run(repo.upload(make_file_ref()))

        assert "authorization" not in requests[0].headers

    def test_server_message_becomes_reason(self, requests, make_file_ref):
        repo = self._repository(requests, status_code=413, json={"message": "File too large"})

        with pytest.raises(UploadFailedException) as exc_info:
            asyncio.run(repo.upload(make_file_ref()))

        assert exc_info.value.reason == "File too large"
        assert "413" in exc_info.value.message

    def test_error_without_message_has_no_reason(self, requests, make_file_ref):
        repo = self._repository(requests, status_code=500, content=b"<html>oops</html>")

        with pytest.raises(UploadFailedException) as exc_info:
            asyncio.run(repo.upload(make_file_ref()))

        assert exc_info.value.reason is None

    def test_unauthorized_clears_token(self, requests, make_file_ref):
        repo = self._repository(requests, status_code=401, json={"message": "Token expired"}, token="stale")

        with pytest.raises(UploadFailedException) as exc_info:
            asyncio.run(repo.upload(make_file_ref()))

        assert exc_info.value.reason == "Token expired"
        assert "Authorization" not in repo.headers

    def test_transport_error(self, make_file_ref):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        repo = ImageApiRepository(base_url="http://images.test/api", transport=httpx.MockTransport(handler))

        with pytest.raises(UploadFailedException) as exc_info:
            asyncio.run(repo.upload(make_file_ref()))

        assert exc_info.value.reason is None
        assert "connection refused" in exc_info.value.message

    @pytest.mark.parametrize("body", [
        {"data": {}},
        {"data": {"image": {"cloudinaryUrl": "x"}}},
        ["unexpected"],
    ])
    def test_malformed_success_body(self, requests, make_file_ref, body):
        repo = self._repository(requests, json=body)

        with pytest.raises(UploadFailedException) as exc_info:
            asyncio.run(repo.upload(make_file_ref()))

        assert exc_info.value.reason is None

    def test_invalid_json_body(self, requests, make_file_ref):
        repo = self._repository(requests, content=b"not json")

        with pytest.raises(UploadFailedException) as exc_info:
            asyncio.run(repo.upload(make_file_ref()))

        assert "invalid JSON" in exc_info.value.message

    def test_defaults_from_settings(self, monkeypatch):
        from src.core import config
        monkeypatch.setattr(config.settings, "image_api_url", "http://configured/api/")
        monkeypatch.setattr(config.settings, "image_api_timeout_seconds", 12.0)

        repo = ImageApiRepository()

        assert repo.base_url == "http://configured/api"
        assert repo.timeout == 12.0
