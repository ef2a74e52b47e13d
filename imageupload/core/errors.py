from typing import Optional

CORS_HINT = (
    "The storage request was blocked before it completed. Check the bucket's "
    "CORS configuration and your network connection."
)

_NETWORK_MARKERS = ("cors", "network", "failed to fetch", "connect")


class UploadError(Exception):
    """
    Base class for every per-file failure in the upload pipeline.
    None of these are fatal: the orchestrator reports them and moves on.
    """

    def __init__(self, file_name: str, message: str):
        super().__init__(message)
        self.file_name = file_name
        self.message = message

    def __str__(self) -> str:
        return f"{self.file_name}: {self.message}"


class AdmissionRejected(UploadError):
    """Rate limit or batch limit hit; the file never entered the pipeline."""


class ValidationFailed(UploadError):
    def __init__(self, file_name: str, reason: str):
        super().__init__(file_name, f"File validation failed: {reason}")
        self.reason = reason


class GrantRequestFailed(UploadError):
    def __init__(self, file_name: str, message: str, status_code: Optional[int] = None):
        super().__init__(file_name, message)
        self.status_code = status_code


class TransferFailed(UploadError):
    def __init__(self, file_name: str, message: str, status_code: Optional[int] = None):
        super().__init__(file_name, message)
        self.status_code = status_code
        self.hint = CORS_HINT if looks_like_network_error(message) else None

    def __str__(self) -> str:
        base = super().__str__()
        return f"{base} ({self.hint})" if self.hint else base


def looks_like_network_error(text: str) -> bool:
    lowered = (text or "").lower()
    return any(marker in lowered for marker in _NETWORK_MARKERS)
