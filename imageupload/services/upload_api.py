import logging
from typing import Optional

import requests
from pydantic import ValidationError

from ..core.config import settings
from ..core.errors import GrantRequestFailed, TransferFailed
from ..schemas.common import DEFAULT_CONTENT_TYPE
from ..schemas.uploads import UploadUrlRequest, UploadUrlResponse
from ..utils.files import SelectedFile

logger = logging.getLogger(__name__)


def _status_text(res: requests.Response) -> str:
    return res.reason or str(res.status_code)


class UploadApiClient:
    """
    Two-step presigned upload:
      1) POST {fileName, fileType} to the grant endpoint -> {upload_url, s3_key}
      2) PUT the raw bytes to upload_url
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        upload_url_path: Optional[str] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.upload_url_path = upload_url_path or settings.UPLOAD_URL_PATH
        self.session = session or requests.Session()
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT

    def get_upload_url(self, file_name: str, file_type: str) -> UploadUrlResponse:
        body = UploadUrlRequest(fileName=file_name, fileType=file_type)
        url = f"{self.base_url}{self.upload_url_path}"
        logger.debug("Getting upload URL for %s (%s)", file_name, file_type)

        try:
            res = self.session.post(
                url,
                json=body.model_dump(),
                headers={"Accept": "application/json"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Grant request for %s failed: %s", file_name, e)
            raise GrantRequestFailed(file_name, f"Failed to get upload URL: {e}")

        if not res.ok:
            logger.error("Grant endpoint error %s: %s", res.status_code, res.text)
            raise GrantRequestFailed(
                file_name,
                f"Failed to get upload URL: {_status_text(res)}",
                status_code=res.status_code,
            )

        try:
            grant = UploadUrlResponse.model_validate(res.json())
        except (ValueError, ValidationError) as e:
            raise GrantRequestFailed(file_name, f"Failed to get upload URL: invalid response ({e})")

        logger.debug("Upload URL received for %s -> %s", file_name, grant.s3_key)
        return grant

    def upload_file_to_s3(self, upload_url: str, file: SelectedFile) -> None:
        logger.debug("Uploading %s (%s, %d bytes)", file.name, file.type, file.size)
        try:
            data = file.read_bytes()
        except OSError as e:
            raise TransferFailed(file.name, f"Failed to read file: {e}")

        # the presigned URL carries its own auth, only Content-Type is needed
        try:
            res = self.session.put(
                upload_url,
                data=data,
                headers={"Content-Type": file.type or DEFAULT_CONTENT_TYPE},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.error("Storage upload for %s failed: %s", file.name, e)
            raise TransferFailed(file.name, f"Failed to upload file: network error ({e})")

        if not res.ok:
            logger.error("Storage upload error %s: %s", res.status_code, res.text)
            raise TransferFailed(
                file.name,
                f"Failed to upload file: {_status_text(res)}",
                status_code=res.status_code,
            )


class PresignedUploader:
    """Grant then transfer; returns the storage key the grant authorized."""

    def __init__(self, client: Optional[UploadApiClient] = None):
        self.client = client or UploadApiClient()

    def upload(self, file: SelectedFile) -> str:
        grant = self.client.get_upload_url(file.name, file.type)
        self.client.upload_file_to_s3(grant.upload_url, file)
        logger.info("Uploaded %s -> %s", file.name, grant.s3_key)
        return grant.s3_key
