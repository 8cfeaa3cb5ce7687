"""
Image API Repository for the remote image processing service.
Posts picked images to the service's upload endpoint over HTTP.
"""
from typing import Optional
import httpx
import structlog
from src.core import config
from src.core.exceptions import UploadFailedException
from src.models.file_entry import FileRef, UploadResult
from src.repositories.upload_client import UploadClient

logger = structlog.get_logger(__name__)


class ImageApiRepository(UploadClient):
    """Upload client for the remote image API (POST /images/upload)."""

    UPLOAD_PATH = "/images/upload"

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.base_url = (base_url or config.settings.image_api_url).rstrip("/")
        self.timeout = timeout or config.settings.image_api_timeout_seconds
        self.transport = transport
        self.headers = {}
        if token:
            self.set_auth_token(token)

    def set_auth_token(self, token: str) -> None:
        self.headers['Authorization'] = f"Bearer {token}"

    def clear_auth_token(self) -> None:
        self.headers.pop('Authorization', None)

    async def upload(self, file_ref: FileRef) -> UploadResult:
        """
        Upload one image as multipart form data.

        Args:
            file_ref: Picked image

        Returns:
            UploadResult with the remote image id and the echoed image record

        Raises:
            UploadFailedException: On HTTP errors, transport errors or malformed responses
        """
        url = f"{self.base_url}{self.UPLOAD_PATH}"
        files = {'image': (file_ref.name, file_ref.content, file_ref.content_type)}

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, files=files, headers=self.headers)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                logger.warning("image_api_unauthorized", filename=file_ref.name)
                self.clear_auth_token()
            reason = self._error_reason(e.response)
            raise UploadFailedException(
                f"Image API returned {e.response.status_code} for {file_ref.name}", reason=reason
            ) from e
        except httpx.HTTPError as e:
            raise UploadFailedException(f"Image API request failed: {str(e)}") from e
        except ValueError as e:
            raise UploadFailedException(f"Image API returned invalid JSON: {str(e)}") from e

        return self._to_upload_result(body)

    def _to_upload_result(self, body) -> UploadResult:
        """Map {"data": {"image": {"_id": ...}}} to an UploadResult."""
        try:
            image = body['data']['image']
            remote_id = image['_id']
        except (KeyError, TypeError) as e:
            raise UploadFailedException(f"Image API response is missing the image id: {str(e)}") from e

        return UploadResult(remote_id=str(remote_id), metadata=dict(image))

    @staticmethod
    def _error_reason(response: httpx.Response) -> Optional[str]:
        """Extract the server supplied failure message, if any."""
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and isinstance(body.get('message'), str) and body['message']:
            return body['message']
        return None
