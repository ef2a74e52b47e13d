from pydantic_settings import BaseSettings
from typing import List

class Settings(BaseSettings):
    API_BASE_URL: str = "http://localhost:8000"
    UPLOAD_URL_PATH: str = "/upload-url"

    AWS_REGION: str | None = None
    AWS_S3_BUCKET: str | None = None
    AWS_ACCESS_KEY_ID: str | None = None
    AWS_SECRET_ACCESS_KEY: str | None = None

    MAX_FILE_SIZE: int = 10 * 1024 * 1024
    ALLOWED_CONTENT_TYPES: List[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ]
    MAX_FILES_PER_UPLOAD: int = 5

    # 10 uploads per minute
    RATE_LIMIT_MAX_UPLOADS: int = 10
    RATE_LIMIT_WINDOW_MINUTES: float = 1

    REQUEST_TIMEOUT: float = 30
    KEY_PREFIX: str = "images"

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"
        extra = "ignore"

settings = Settings()
