import logging
import time
import uuid
from datetime import datetime, timezone
from functools import lru_cache

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..core.config import settings
from ..core.errors import TransferFailed
from ..schemas.common import DEFAULT_CONTENT_TYPE
from ..utils.filenames import sanitize_file_name
from ..utils.files import SelectedFile

logger = logging.getLogger(__name__)


def now_utc(): return datetime.now(timezone.utc)


def gen_key(file_name: str, prefix: str | None = None) -> str:
    """
    images/<unix ms>-<uuid4>-<sanitized name>

    The timestamp keeps keys ordered by upload time, the UUID makes them
    unique, and sanitizing keeps traversal or reserved characters out.
    """
    ts = int(time.time() * 1000)
    return f"{prefix or settings.KEY_PREFIX}/{ts}-{uuid.uuid4()}-{sanitize_file_name(file_name)}"


generate_secure_upload_path = gen_key


@lru_cache(maxsize=1)
def get_s3_client():
    region = settings.AWS_REGION
    return boto3.client(
        "s3",
        region_name=region,
        aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
        aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        endpoint_url=f"https://s3.{region}.amazonaws.com" if region else None,  # force regional endpoint
        config=Config(
            signature_version="s3v4",
            s3={"addressing_style": "virtual"}  # <bucket>.s3.<region>.amazonaws.com
        ),
    )


class S3DirectUploader:
    """
    Writes files straight into the bucket with the SDK instead of going
    through a presigned URL. Keys come from ``gen_key``.
    """

    def __init__(self, bucket: str | None = None, client=None, uploaded_by: str = "anonymous"):
        self.bucket = bucket or settings.AWS_S3_BUCKET
        if not self.bucket:
            raise RuntimeError("AWS_S3_BUCKET is missing from env/config")
        self.client = client or get_s3_client()
        self.uploaded_by = uploaded_by

    def upload(self, file: SelectedFile) -> str:
        key = gen_key(file.name)
        try:
            body = file.read_bytes()
        except OSError as e:
            raise TransferFailed(file.name, f"Failed to read file: {e}")

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=file.type or DEFAULT_CONTENT_TYPE,
                Metadata={
                    "originalName": file.name,
                    "uploadedBy": self.uploaded_by,
                    "uploadedAt": now_utc().isoformat(),
                    "fileSize": str(file.size),
                    "securityValidated": "true",
                },
            )
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            status = e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
            logger.error("S3 put_object failed for %s: %s", key, code)
            raise TransferFailed(file.name, f"Failed to upload file: {code or e}", status_code=status)
        except BotoCoreError as e:
            logger.error("S3 put_object failed for %s: %s", key, e)
            raise TransferFailed(file.name, f"Failed to upload file: {e}")

        logger.info("Uploaded %s to s3://%s/%s", file.name, self.bucket, key)
        return key
