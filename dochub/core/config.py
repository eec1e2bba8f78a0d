import os
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "UPSA DocHub"
    VERSION: str = "1.0.0"
    API_PREFIX: str = "/api"

    # 50 - CRITICAL, 40 - ERROR, 30 - WARNING, 20 - INFO, 10 - DEBUG
    LOG_LEVEL: str = "INFO"

    # Uploads (relative paths resolve against the working directory)
    UPLOAD_DIR: str = "uploads"
    MAX_UPLOAD_SIZE: int = 50 * 1024 * 1024
    ALLOWED_UPLOAD_TYPES: List[str] = [
        "application/pdf",
        "image/jpeg",
        "image/jpg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "text/plain",
    ]

    # Stored file expiry, 0 disables the sweep
    FILE_RETENTION_HOURS: int = 24
    CLEANUP_INTERVAL_MINUTES: int = 30

    # Upper bound on pages rendered by pdf-to-images in one request
    IMAGE_RENDER_MAX_PAGES: int = 200

    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:8000",
    ]

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def upload_path(self) -> str:
        return os.path.abspath(os.path.join(os.getcwd(), self.UPLOAD_DIR))

settings = Settings()
