"""
Configuration loader from environment variables and .env files.
"""

from typing import Any, Optional

from pydantic import ValidationError

from ..config import TransportConfig
from ..exceptions import ConfigurationError
from ..logging.config import LoggingConfig
from .validator import HTTPRPCSettings


def _settings(env_file: Optional[str], overrides: dict) -> HTTPRPCSettings:
    unknown = sorted(set(overrides) - set(HTTPRPCSettings.model_fields))
    if unknown:
        raise ConfigurationError(f"unknown httprpc settings: {', '.join(unknown)}")

    try:
        # init kwargs have the highest priority in pydantic-settings
        if env_file:
            return HTTPRPCSettings(_env_file=env_file, **overrides)
        return HTTPRPCSettings(**overrides)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid httprpc settings: {exc}") from exc


def _timeout(value: float) -> Optional[float]:
    return value if value > 0 else None


def load_from_env(env_file: Optional[str] = None, **overrides: Any) -> TransportConfig:
    """
    Load TransportConfig from environment variables.

    Priority (highest to lowest):
    1. **overrides - explicit parameters (HTTPRPCSettings field names)
    2. Environment variables (HTTPRPC_*)
    3. .env file
    4. Defaults

    Raises:
        ConfigurationError: a value failed validation

    Example:
        >>> transport = RequestsTransport(load_from_env(timeout_read=5))
    """
    settings = _settings(env_file, overrides)

    proxies = {}
    if settings.proxy_http:
        proxies["http"] = settings.proxy_http
    if settings.proxy_https:
        proxies["https"] = settings.proxy_https

    try:
        return TransportConfig.create(
            timeout_connect=_timeout(settings.timeout_connect),
            timeout_read=_timeout(settings.timeout_read),
            pool_connections=settings.pool_connections,
            pool_maxsize=settings.pool_maxsize,
            pool_block=settings.pool_block,
            max_workers=settings.pool_max_workers,
            verify_ssl=settings.verify_ssl,
            allow_redirects=settings.allow_redirects,
            max_redirects=settings.max_redirects,
            proxies=proxies,
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc


def load_logging_from_env(env_file: Optional[str] = None, **overrides: Any) -> Optional[LoggingConfig]:
    """
    Load LoggingConfig from environment variables.

    Returns:
        LoggingConfig, or None when both console and file output are disabled

    Raises:
        ConfigurationError: a value failed validation
    """
    settings = _settings(env_file, overrides)

    if not settings.log_enable_console and not settings.log_enable_file:
        return None

    try:
        return LoggingConfig.create(
            level=settings.log_level,
            format=settings.log_format,
            enable_console=settings.log_enable_console,
            enable_file=settings.log_enable_file,
            file_path=settings.log_file_path,
            max_bytes=settings.log_max_bytes,
            backup_count=settings.log_backup_count,
            enable_request_id=settings.log_enable_request_id,
        )
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
