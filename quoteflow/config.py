from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite+aiosqlite:///./quoteflow.db"

    @field_validator("database_url", mode="before")
    @classmethod
    def convert_database_url(cls, v: str) -> str:
        """Convert plain postgres:// URLs to the asyncpg driver."""
        if v.startswith("postgres://"):
            return v.replace("postgres://", "postgresql+asyncpg://", 1)
        if v.startswith("postgresql://") and "+asyncpg" not in v:
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        return v

    # Uploads
    upload_dir: str = "uploads"
    max_upload_size_bytes: int = 10 * 1024 * 1024  # 10MB

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = ["http://localhost:5173"]

    # Rate limiting
    rate_limit_enabled: bool = False
    rate_limit_storage_uri: str = "memory://"
    rate_limit_upload_per_minute: int = 30
    rate_limit_general_per_minute: int = 300

    # Request size limits
    max_request_size_bytes: int = 1024 * 1024  # 1MB for JSON bodies
    max_upload_request_size_bytes: int = 12 * 1024 * 1024  # upload limit plus multipart overhead

    # Pagination
    default_page_size: int = 10
    max_page_size: int = 200

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
