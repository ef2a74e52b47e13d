import uuid
from datetime import datetime, timezone
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from .common import IMAGE_CONTENT_TYPES, UploadStatus, extensions_for
from ..core.errors import UploadError


def now_utc(): return datetime.now(timezone.utc)


class SecurityConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_file_size: int = Field(default=10 * 1024 * 1024, gt=0)
    allowed_mime_types: List[str] = Field(default_factory=lambda: list(IMAGE_CONTENT_TYPES))
    allowed_extensions: List[str] = Field(default_factory=lambda: extensions_for(IMAGE_CONTENT_TYPES))
    max_files_per_upload: int = Field(default=5, gt=0)
    # reserved, nothing scans yet
    scan_for_malware: bool = False
    strict_signatures: bool = False

    def with_overrides(
        self,
        max_file_size: Optional[int] = None,
        allowed_types: Optional[List[str]] = None,
        allowed_extensions: Optional[List[str]] = None,
    ) -> "SecurityConfig":
        update = {}
        if max_file_size is not None:
            update["max_file_size"] = max_file_size
        if allowed_types is not None:
            update["allowed_mime_types"] = list(allowed_types)
            if allowed_extensions is None:
                update["allowed_extensions"] = extensions_for(allowed_types)
        if allowed_extensions is not None:
            update["allowed_extensions"] = list(allowed_extensions)
        return self.model_copy(update=update) if update else self


class ValidationResult(BaseModel):
    is_valid: bool
    error: Optional[str] = None

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(is_valid=True)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult":
        return cls(is_valid=False, error=error)


class UploadUrlRequest(BaseModel):
    fileName: str
    fileType: str


class UploadUrlResponse(BaseModel):
    upload_url: str
    s3_key: str
    message: str = ""


class UploadTask(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    name: str
    size: int
    content_type: str = ""
    status: UploadStatus = "pending"
    key: str = ""
    error: Optional[str] = None
    created_at: datetime = Field(default_factory=now_utc)


class UploadEvent(BaseModel):
    id: uuid.UUID
    name: str
    url: str = ""
    size: int
    uploadedAt: datetime
    status: UploadStatus

    @classmethod
    def from_task(cls, task: UploadTask) -> "UploadEvent":
        return cls(
            id=task.id,
            name=task.name,
            url=task.key if task.status == "success" else "",
            size=task.size,
            uploadedAt=now_utc(),
            status=task.status,
        )


class BatchReport(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    tasks: List[UploadTask] = Field(default_factory=list)
    rejections: List[UploadError] = Field(default_factory=list)

    @property
    def succeeded(self) -> List[UploadTask]:
        return [t for t in self.tasks if t.status == "success"]

    @property
    def failed(self) -> List[UploadTask]:
        return [t for t in self.tasks if t.status == "error"]

    @property
    def all_succeeded(self) -> bool:
        return not self.rejections and all(t.status == "success" for t in self.tasks)
