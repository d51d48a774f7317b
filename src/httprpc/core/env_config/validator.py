"""
Pydantic settings for environment configuration.
"""

from typing import Optional, Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class HTTPRPCSettings(BaseSettings):
    """
    Transport and logging settings from the environment.

    Reads from:
    1. Environment variables (HTTPRPC_*)
    2. .env file
    3. Defaults

    Example .env file:
        HTTPRPC_TIMEOUT_CONNECT=5
        HTTPRPC_TIMEOUT_READ=30
        HTTPRPC_POOL_MAX_WORKERS=8
        HTTPRPC_VERIFY_SSL=true
        HTTPRPC_LOG_LEVEL=DEBUG
        HTTPRPC_LOG_FORMAT=json

    Usage:
        >>> settings = HTTPRPCSettings()
        >>> settings.timeout_read
        30.0
    """

    model_config = SettingsConfigDict(
        env_prefix='HTTPRPC_',
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    # Timeouts, 0 = без ограничения
    timeout_connect: float = Field(default=10.0, ge=0)
    timeout_read: float = Field(default=60.0, ge=0)

    # Pools
    pool_connections: int = Field(default=10, ge=1)
    pool_maxsize: int = Field(default=10, ge=1)
    pool_block: bool = Field(default=False)
    pool_max_workers: int = Field(default=16, ge=1, le=1024)

    # Security
    verify_ssl: bool = Field(default=True)
    allow_redirects: bool = Field(default=True)
    max_redirects: int = Field(default=10, ge=0)

    # Proxies
    proxy_http: Optional[str] = None
    proxy_https: Optional[str] = None

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    log_format: Literal["json", "text"] = Field(default="text")
    log_enable_console: bool = Field(default=True)
    log_enable_file: bool = Field(default=False)
    log_file_path: Optional[str] = None
    log_max_bytes: int = Field(default=10 * 1024 * 1024, gt=0)
    log_backup_count: int = Field(default=5, ge=0)
    log_enable_request_id: bool = Field(default=True)

    @field_validator('log_level', mode='before')
    @classmethod
    def normalize_level(cls, v):
        """Accept lower-case level names."""
        return v.upper() if isinstance(v, str) else v

    @field_validator('log_format', mode='before')
    @classmethod
    def normalize_format(cls, v):
        return v.lower() if isinstance(v, str) else v

    @field_validator('log_file_path')
    @classmethod
    def validate_file_path(cls, v: Optional[str], info) -> Optional[str]:
        """file_path is required when log_enable_file=True."""
        if info.data.get('log_enable_file') and not v:
            raise ValueError("log_file_path is required when log_enable_file=True")
        return v
