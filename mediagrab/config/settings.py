import json
import logging
import os
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

CONFIG_PATH = os.getenv("CONFIG_PATH", "config.json")


class PartialFailurePolicy(str, Enum):
    """What multi-item paths do when one item cannot be resolved"""
    SKIP = "skip"
    ABORT = "abort"


class YtDlpConfig(BaseModel):
    binary_path: Optional[str] = Field(default=None, description="Path to the yt-dlp executable (PATH lookup when unset)")
    ffmpeg_path: Optional[str] = Field(default=None, description="Path to ffmpeg, passed to yt-dlp as --ffmpeg-location")
    socket_timeout: int = Field(default=10, ge=1, description="Socket timeout for yt-dlp")
    retries: int = Field(default=3, ge=0, description="Number of retries for failed requests")
    info_timeout: float = Field(default=60.0, gt=0, description="Timeout for metadata extraction in seconds")


class DownloadConfig(BaseModel):
    timeout_seconds: int = Field(default=3600, ge=60, description="Download timeout in seconds")
    idle_timeout: float = Field(default=60.0, gt=0, description="Seconds a media stream may stay silent before it counts as stalled")
    chunk_size: int = Field(default=1024 * 1024, ge=1024, description="Read size for media streams")
    temp_dir: Optional[str] = Field(default=None, description="Parent directory for fallback downloads")
    zip_compression_level: int = Field(default=1, ge=0, le=9, description="Deflate level for ZIP bundles")
    partial_failure: PartialFailurePolicy = Field(
        default=PartialFailurePolicy.SKIP,
        description="Per-item failure policy for multi-item deliveries"
    )


class LoggingConfig(BaseModel):
    level: str = Field(default="INFO", description="Log level (DEBUG, INFO, WARNING, ERROR)")
    format: str = Field(default="%(message)s", description="Log format")
    enable_rich: bool = Field(default=True, description="Enable rich console logging")

    @field_validator("level")
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()


class I18nConfig(BaseModel):
    default_locale: str = Field(default="en", description="Default locale")
    supported_locales: list = Field(default=["en", "ja"], description="Supported locales")


class ApiConfig(BaseModel):
    title: str = Field(default="mediagrab API", description="API title")
    description: str = Field(default="Preview and download media from social/video URLs", description="API description")
    version: str = Field(default="1.0.0", description="API version")
    cors_origins: list = Field(default=["*"], description="CORS allowed origins")
    debug: bool = Field(default=False, description="Enable debug mode")


class Config(BaseSettings):
    """Main configuration model"""
    model_config = SettingsConfigDict(env_prefix="MEDIAGRAB_", env_nested_delimiter="__")

    ytdlp: YtDlpConfig = Field(default_factory=YtDlpConfig)
    download: DownloadConfig = Field(default_factory=DownloadConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    i18n: I18nConfig = Field(default_factory=I18nConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @classmethod
    def load_from_file(cls, config_path: str = CONFIG_PATH) -> "Config":
        """Load configuration from JSON file"""
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = json.load(f)
            logger.info(f"Configuration loaded from {config_path}")
            return cls(**config_data)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load config from {config_path}: {str(e)}")
            logger.info("Using default configuration")
            return cls()


def _apply_legacy_env(config: Config) -> Config:
    """Variables documented for the original deployment always win"""
    if os.getenv("YTDLP_BINARY_PATH"):
        config.ytdlp.binary_path = os.getenv("YTDLP_BINARY_PATH")
    if os.getenv("FFMPEG_PATH"):
        config.ytdlp.ffmpeg_path = os.getenv("FFMPEG_PATH")
    if os.getenv("LOG_LEVEL"):
        config.logging.level = LoggingConfig.validate_log_level(os.getenv("LOG_LEVEL"))
    if os.getenv("DEFAULT_LOCALE"):
        config.i18n.default_locale = os.getenv("DEFAULT_LOCALE")
    return config


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration with priority: config.json > env vars > defaults"""
    config_path = config_path or CONFIG_PATH

    if os.path.exists(config_path):
        config = Config.load_from_file(config_path)
    else:
        logger.info(f"Config file not found at {config_path}, checking environment variables")
        config = Config()

    return _apply_legacy_env(config)
