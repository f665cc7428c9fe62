"""
Uploader configuration using Pydantic settings.

Values are read, in increasing order of precedence, from:
- the dotfile at ~/.config/minio-image-uploader.env
- real environment variables (S3_ENDPOINT, S3_ACCESSKEY, ...)
- command-line flags (merged in by the entry point, not here)

Using Pydantic's BaseSettings means a malformed value such as
S3_MOCK_MODE=maybe fails at startup instead of halfway through an upload.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


CONFIG_FILE_NAME = "minio-image-uploader.env"


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid."""
    pass


def default_config_file() -> Path:
    """Location of the per-user dotfile. Resolved lazily so HOME can change."""
    return Path.home() / ".config" / CONFIG_FILE_NAME


class Settings(BaseSettings):
    """
    Object store settings loaded from the environment.

    Field names are pythonic; the environment names are the ones the
    uploader has always used, attached as validation aliases.
    """

    endpoint: str = Field(
        default="",
        validation_alias="S3_ENDPOINT",
        description="Host (and optional port) of the S3-compatible endpoint, e.g. s3.example.org"
    )
    access_key: str = Field(
        default="",
        validation_alias="S3_ACCESSKEY",
        description="Access key ID"
    )
    secret_key: str = Field(
        default="",
        validation_alias="S3_SECRETKEY",
        description="Secret access key"
    )
    bucket_name: str = Field(
        default="",
        validation_alias="S3_BUCKETNAME",
        description="Target bucket"
    )
    use_ssl: bool = Field(
        default=True,
        validation_alias="S3_USESSL",
        description="Set S3_USESSL=false to talk plain HTTP to the endpoint. Any other value keeps TLS on."
    )
    region: str = Field(
        default="us-east-1",
        validation_alias="S3_REGION",
        description="Signing region. MinIO accepts us-east-1 unless configured otherwise."
    )
    mock_mode: bool = Field(
        default=False,
        validation_alias="S3_MOCK_MODE",
        description="Use the in-memory store instead of a real endpoint. Nothing leaves the machine."
    )
    log_level: Optional[str] = Field(
        default=None,
        validation_alias="S3_LOG_LEVEL",
        description="Logging level override (DEBUG, INFO, WARNING, ERROR)"
    )

    model_config = SettingsConfigDict(
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("use_ssl", mode="before")
    @classmethod
    def only_false_disables_ssl(cls, v):
        """TLS stays on for anything but "false", including an empty value."""
        if isinstance(v, str):
            return v.strip().lower() != "false"
        return v


def load_settings(env_file: Optional[Path] = None) -> Settings:
    """
    Build settings from the environment and the given dotfile.

    A missing dotfile is fine; pydantic-settings skips it silently.
    """
    if env_file is None:
        env_file = default_config_file()
    return Settings(_env_file=env_file)


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    One process performs one upload, so settings are loaded once.
    For tests, call get_settings.cache_clear() to reset.
    """
    return load_settings()
