"""
SheetBlog Configuration System
==============================

Configuration management with environment variables and Pydantic models.
Environment variables override Field defaults with clear precedence.
"""

from pathlib import Path
from typing import Optional
from enum import Enum

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode
from ..utils.logging import get_logger_for_component
from ..utils.validators import SourceValidator, validate_url

BUNDLED_FALLBACK_CSV = Path(__file__).resolve().parent.parent / "ingestion" / "data" / "fallback_posts.csv"


class LastResortPolicy(str, Enum):
    """What load_blog_posts returns when every source has failed."""
    SAMPLE = "sample"
    EMPTY = "empty"


class CacheBackend(str, Enum):
    """Key-value storage behind the post cache."""
    SQLITE = "sqlite"
    MEMORY = "memory"


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class SourceSettings(BaseModel):
    """Where post CSV comes from."""
    primary_url: Optional[str] = Field(default=None, description="Published spreadsheet CSV export URL")
    fallback_url: str = Field(default=str(BUNDLED_FALLBACK_CSV), description="Secondary CSV source (URL or path)")
    request_timeout_ms: int = Field(default=3000, ge=100, le=60000, description="Per-request timeout in milliseconds")

    @field_validator('primary_url')
    @classmethod
    def blank_primary_is_unset(cls, v):
        """Treat an empty primary URL as not configured."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def request_timeout_seconds(self) -> float:
        return self.request_timeout_ms / 1000


class CacheSettings(BaseModel):
    """Post snapshot cache configuration."""
    enabled: bool = Field(default=True, description="Write fetched posts to the cache")
    backend: CacheBackend = Field(default=CacheBackend.SQLITE, description="Cache storage backend")
    path: str = Field(default="data/sheetblog_cache.db", description="SQLite cache file path")
    key: str = Field(default="templates", min_length=1, description="Cache slot key")
    ttl_seconds: int = Field(default=300, ge=1, le=86400, description="Snapshot lifetime in seconds")


class PipelineSettings(BaseModel):
    """Ingestion pipeline behaviour."""
    last_resort: LastResortPolicy = Field(
        default=LastResortPolicy.SAMPLE,
        description="Result when primary and fallback sources both fail"
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default="logs/sheetblog.log", description="Log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of log backup files")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable console logging")


class SheetBlogSettings(BaseSettings):
    """Main application settings."""

    sources: SourceSettings = Field(default_factory=SourceSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    app_name: str = Field(default="SheetBlog", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "SHEETBLOG_",
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Validate complete configuration."""
        errors = []

        if self.sources.primary_url and not validate_url(self.sources.primary_url):
            errors.append(f"Invalid primary source URL: {self.sources.primary_url}")

        if not validate_url(self.sources.fallback_url):
            errors.append(f"Invalid fallback source URL: {self.sources.fallback_url}")
        elif not SourceValidator.is_remote(self.sources.fallback_url):
            if not SourceValidator.local_path(self.sources.fallback_url).is_file():
                errors.append(f"Fallback CSV not found: {self.sources.fallback_url}")

        if self.cache.enabled and self.cache.backend == CacheBackend.SQLITE:
            try:
                Path(self.cache.path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid cache path: {e}")

        if self.logging.file_path:
            try:
                Path(self.logging.file_path).parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid log file path: {e}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                error_code=ErrorCode.CONFIG_INVALID
            )

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value


def load_settings() -> SheetBlogSettings:
    """Load settings from environment variables and defaults.

    Returns:
        Loaded and validated settings

    Raises:
        ConfigurationError: If configuration is invalid
    """
    load_dotenv()

    try:
        settings = SheetBlogSettings()
        settings.validate_configuration()
        return settings

    except Exception as e:
        if isinstance(e, ConfigurationError):
            raise
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID
        ) from e


def load_runtime_settings() -> SheetBlogSettings:
    """Load settings for the post pipeline without failing.

    Configuration problems are logged rather than raised: a bad source URL
    or missing fallback file is handled by the pipeline's fallback chain.
    Settings that cannot be parsed at all are replaced by the defaults.
    """
    logger = get_logger_for_component("config")
    load_dotenv()

    try:
        settings = SheetBlogSettings()
    except PydanticValidationError as e:
        logger.error(f"Invalid settings, using defaults: {e.error_count()} error(s)\n{e}")
        return SheetBlogSettings.model_construct()

    try:
        settings.validate_configuration()
    except ConfigurationError as e:
        logger.warning(str(e), extra=e.to_dict())

    return settings


# Global settings instance
_settings: Optional[SheetBlogSettings] = None


def get_settings(reload: bool = False) -> SheetBlogSettings:
    """Get global settings instance (singleton pattern).

    Loaded leniently: problems are logged, never raised. Use
    ``load_settings()`` for a strict check.

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_runtime_settings()

    return _settings
