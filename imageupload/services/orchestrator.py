import asyncio
import logging
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from ..core.config import settings
from ..core.errors import (
    AdmissionRejected,
    GrantRequestFailed,
    TransferFailed,
    UploadError,
    ValidationFailed,
)
from ..schemas.common import UploadStatus
from ..schemas.uploads import BatchReport, SecurityConfig, UploadEvent, UploadTask
from ..utils.files import SelectedFile
from .rate_limit import UploadRateLimiter
from .validation import validate_file

logger = logging.getLogger(__name__)

TRANSITIONS: Dict[UploadStatus, set] = {
    "pending": {"uploading"},
    "uploading": {"success", "error"},
    "success": set(),
    "error": set(),
}


class Uploader(Protocol):
    def upload(self, file: SelectedFile) -> str: ...


def default_security_config() -> SecurityConfig:
    return SecurityConfig(
        max_file_size=settings.MAX_FILE_SIZE,
        max_files_per_upload=settings.MAX_FILES_PER_UPLOAD,
    ).with_overrides(allowed_types=settings.ALLOWED_CONTENT_TYPES)


def _log_notice(error: UploadError) -> None:
    logger.warning("%s", error)


class UploadOrchestrator:
    """
    Drives each submitted file through admission, validation, grant and
    transfer, reporting every status change to ``on_status``.

    Rejections before ``uploading`` (rate limit, batch limit, validation) go
    to ``on_notice`` instead and never produce a status event.
    """

    def __init__(
        self,
        uploader: Uploader,
        rate_limiter: Optional[UploadRateLimiter] = None,
        security_config: Optional[SecurityConfig] = None,
        on_status: Optional[Callable[[UploadEvent], None]] = None,
        on_notice: Optional[Callable[[UploadError], None]] = None,
    ):
        self.uploader = uploader
        self.rate_limiter = rate_limiter or UploadRateLimiter(
            settings.RATE_LIMIT_MAX_UPLOADS, settings.RATE_LIMIT_WINDOW_MINUTES
        )
        self.security_config = security_config or default_security_config()
        self.on_status = on_status
        self.on_notice = on_notice or _log_notice

    def _transition(self, task: UploadTask, status: UploadStatus, key: str = "") -> None:
        if status not in TRANSITIONS[task.status]:
            raise RuntimeError(f"illegal transition {task.status} -> {status} for {task.id}")
        task.status = status
        task.key = key
        if self.on_status:
            self.on_status(UploadEvent.from_task(task))

    def _reject(self, report: BatchReport, error: UploadError) -> None:
        report.rejections.append(error)
        self.on_notice(error)

    async def submit(
        self,
        files: Iterable[SelectedFile],
        max_file_size: Optional[int] = None,
        allowed_types: Optional[List[str]] = None,
        allowed_extensions: Optional[List[str]] = None,
    ) -> BatchReport:
        config = self.security_config.with_overrides(
            max_file_size=max_file_size,
            allowed_types=allowed_types,
            allowed_extensions=allowed_extensions,
        )
        report = BatchReport()

        for index, file in enumerate(files):
            if index >= config.max_files_per_upload:
                self._reject(report, AdmissionRejected(
                    file.name,
                    f"Too many files in one upload (max {config.max_files_per_upload}).",
                ))
                continue

            if not self.rate_limiter.can_upload():
                self._reject(report, AdmissionRejected(
                    file.name, "Upload rate limit exceeded. Please try again in a minute."
                ))
                continue

            validation = await validate_file(file, config)
            if not validation.is_valid:
                self._reject(report, ValidationFailed(file.name, validation.error or "invalid file"))
                continue

            task = UploadTask(name=file.name, size=file.size, content_type=file.type)
            report.tasks.append(task)
            await self._upload(task, file)

        return report

    async def _upload(self, task: UploadTask, file: SelectedFile) -> None:
        self._transition(task, "uploading")
        try:
            key = await asyncio.to_thread(self.uploader.upload, file)
        except (GrantRequestFailed, TransferFailed) as e:
            logger.error("Upload failed: %s", e)
            task.error = str(e)
            self._transition(task, "error")
            return
        except Exception as e:
            logger.exception("Unexpected error while uploading %s", file.name)
            task.error = str(TransferFailed(file.name, f"Failed to upload file: {e}"))
            self._transition(task, "error")
            return

        self.rate_limiter.record_upload()
        self._transition(task, "success", key=key)
