"""Application configuration management."""
from pathlib import Path
from typing import List, Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
import json


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = Field(..., description="Database connection URL")
    database_pool_size: int = Field(default=20, description="Database connection pool size")
    database_echo: bool = Field(default=False, description="Echo SQL statements")

    # Redis (only needed for the redis cover guard)
    redis_url: Optional[str] = Field(default=None, description="Redis connection URL")

    # Storage paths; sub-directories default to folders under storage_root
    storage_root: Path = Field(..., description="Root storage directory")
    originals_dir: Optional[Path] = Field(default=None, description="Uploaded originals directory")
    thumbnails_dir: Optional[Path] = Field(default=None, description="Thumbnails and covers directory")
    watermarked_dir: Optional[Path] = Field(default=None, description="Watermarked copies directory")

    # Public URL prefixes for stored files
    uploads_url_prefix: str = Field(default="/uploads", description="URL prefix of uploaded originals")

    # API
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8002, description="API port")
    api_version: str = Field(default="v1", description="API version")
    cors_origins: List[str] = Field(
        default=["http://localhost:3000"],
        description="CORS allowed origins"
    )

    # Uploads
    max_upload_bytes: int = Field(default=500 * 1024 * 1024, description="Max upload size in bytes")
    default_photo_price: int = Field(default=1200, description="Default photo price in yen")

    # Derivatives
    thumbnail_size: int = Field(default=400, description="Square thumbnail side in pixels")
    thumbnail_quality: int = Field(default=80, description="Thumbnail JPEG quality (1-100)")
    cover_size: int = Field(default=600, description="Square album cover side in pixels")
    watermark_max_width: int = Field(default=800, description="Max working width of watermarked copies")
    watermark_quality: int = Field(default=85, description="Watermarked copy JPEG quality (1-100)")
    watermark_text: str = Field(default="FIT-CREATE", description="Text tiled over watermarked copies")

    # Cover generation
    cover_guard_backend: str = Field(
        default="memory",
        description="Where the per-album 'cover requested' flag lives (memory, redis)"
    )
    cover_guard_ttl_seconds: int = Field(
        default=7 * 24 * 3600,
        description="Lifetime of the redis 'cover requested' flag"
    )

    # Auth (tokens are issued by the external session service)
    jwt_secret_key: str = Field(..., description="Secret used to verify bearer tokens")
    jwt_algorithm: str = Field(default="HS256", description="JWT signing algorithm")
    access_token_expire_minutes: int = Field(default=60 * 24, description="Token lifetime in minutes")

    # Performance
    max_workers: int = Field(default=4, description="Max image processing worker threads")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[Path] = Field(default=None, description="Log file path")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v

    @field_validator("cover_guard_backend")
    @classmethod
    def validate_cover_guard_backend(cls, v: str) -> str:
        """Only the in-process and redis guards exist."""
        v = v.lower()
        if v not in ("memory", "redis"):
            raise ValueError("cover_guard_backend must be 'memory' or 'redis'")
        return v

    def __init__(self, **kwargs):
        """Initialize settings and resolve all paths."""
        super().__init__(**kwargs)
        # Ensure all paths are absolute and resolved
        self.storage_root = self.storage_root.resolve()
        self.originals_dir = (self.originals_dir or self.storage_root / "uploads").resolve()
        self.thumbnails_dir = (self.thumbnails_dir or self.originals_dir / "thumbnails").resolve()
        self.watermarked_dir = (self.watermarked_dir or self.originals_dir / "watermarked").resolve()

        if self.log_file:
            self.log_file = self.log_file.resolve()

    @property
    def thumbnails_url_prefix(self) -> str:
        return f"{self.uploads_url_prefix}/thumbnails"

    @property
    def watermarked_url_prefix(self) -> str:
        return f"{self.uploads_url_prefix}/watermarked"

    def ensure_directories_exist(self):
        """Create all storage directories if they don't exist."""
        for directory in [
            self.storage_root,
            self.originals_dir,
            self.thumbnails_dir,
            self.watermarked_dir,
        ]:
            directory.mkdir(parents=True, exist_ok=True)

        # Create logs directory if log_file is specified
        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)


# Singleton instance - will be initialized when config is imported
# In production, this reads from .env file
# In tests, the environment is prepared before the first import
try:
    settings = Settings()
except Exception as e:
    # If .env doesn't exist or is incomplete, provide helpful error
    print(f"Error loading configuration: {e}")
    print("Copy .env.example to .env and fill in DATABASE_URL, STORAGE_ROOT and JWT_SECRET_KEY.")
    raise
