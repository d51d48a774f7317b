"""
Structured logger for httprpc.

Wraps a stdlib logger, attaches handlers from LoggingConfig and masks
sensitive values in the structured fields.
"""

import logging
import threading
from typing import Any, Dict, Optional

from .config import LoggingConfig, LogLevel
from .formatters import _STANDARD_FIELDS, get_formatter
from .filters import RequestIdFilter, ExtraFieldsFilter
from .handlers import create_console_handler, create_file_handler
from ...utils.sanitizer import mask_sensitive_data

# child of the package logger; the package logger keeps its NullHandler
DEFAULT_LOGGER_NAME = "httprpc.access"


class RPCLogger:
    """
    Logger with structured keyword fields.

    When the config enables neither console nor file output, the logger
    attaches no handlers and propagates to the application's logging setup.
    Otherwise it owns its handlers and does not propagate.

    Example:
        >>> logger = RPCLogger(LoggingConfig.create(level="DEBUG", format="json"))
        >>> logger.info("request succeeded", method="GET", url="https://api.com")
    """

    def __init__(self, config: Optional[LoggingConfig] = None, name: str = DEFAULT_LOGGER_NAME):
        self.config = config or LoggingConfig()
        self.name = name
        self._closed = False

        self._logger = logging.getLogger(name)
        self._logger.setLevel(self._get_level(self.config.level))

        # reinitialising the same name replaces the previous handlers
        for handler in self._logger.handlers[:]:
            self._logger.removeHandler(handler)
            handler.close()
        for old_filter in self._logger.filters[:]:
            if isinstance(old_filter, (RequestIdFilter, ExtraFieldsFilter)):
                self._logger.removeFilter(old_filter)

        filters = []
        if self.config.enable_request_id:
            filters.append(RequestIdFilter())
        if self.config.extra_fields:
            filters.append(ExtraFieldsFilter(self.config.extra_fields))

        formatter = get_formatter(self.config.format.value)
        level = self._get_level(self.config.level)

        if self.config.enable_console:
            self._logger.addHandler(create_console_handler(level, formatter, filters))

        if self.config.enable_file and self.config.file_path:
            self._logger.addHandler(create_file_handler(
                file_path=self.config.file_path,
                level=level,
                formatter=formatter,
                max_bytes=self.config.max_bytes,
                backup_count=self.config.backup_count,
                filters=filters
            ))

        self._logger.propagate = not self._logger.handlers
        if self._logger.propagate:
            for f in filters:
                self._logger.addFilter(f)

    @property
    def logger(self) -> logging.Logger:
        """Underlying stdlib logger."""
        return self._logger

    def _get_level(self, level: LogLevel) -> int:
        return getattr(logging, level.value)

    def _fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        sanitized = mask_sensitive_data(fields)
        return {
            (f"field_{key}" if key in _STANDARD_FIELDS else key): value
            for key, value in sanitized.items()
        }

    # Proxy methods

    def debug(self, message: str, /, **fields: Any) -> None:
        self._logger.debug(message, extra=self._fields(fields))

    def info(self, message: str, /, **fields: Any) -> None:
        """
        Log info message.

        Example:
            >>> logger.info("request succeeded", status_code=200, duration_ms=150)
        """
        self._logger.info(message, extra=self._fields(fields))

    def warning(self, message: str, /, **fields: Any) -> None:
        self._logger.warning(message, extra=self._fields(fields))

    def error(self, message: str, /, **fields: Any) -> None:
        self._logger.error(message, extra=self._fields(fields))

    def exception(self, message: str, /, **fields: Any) -> None:
        """Log error with traceback. Call from an exception handler."""
        self._logger.exception(message, extra=self._fields(fields))

    def close(self) -> None:
        """
        Flush and close owned handlers. Idempotent.

        Records logged afterwards propagate to the application's logging.
        """
        if self._closed:
            return

        for handler in self._logger.handlers[:]:
            handler.flush()
            handler.close()
            self._logger.removeHandler(handler)
        self._logger.propagate = True

        self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


_default_logger: Optional[RPCLogger] = None
_default_logger_lock = threading.Lock()


def get_logger(config: Optional[LoggingConfig] = None) -> RPCLogger:
    """
    Shared logger instance.

    Created on first call; ``config`` is only used then. Writes to the
    ``httprpc.access`` logger, the package logger is left untouched.

    Example:
        >>> logger = get_logger()
        >>> logger.info("hello")
    """
    global _default_logger

    with _default_logger_lock:
        if _default_logger is None:
            _default_logger = RPCLogger(config)
        return _default_logger


def configure_logging(config: LoggingConfig) -> RPCLogger:
    """
    Replace the shared logger with one built from ``config``.

    Example:
        >>> configure_logging(LoggingConfig.create(level="DEBUG", format="json"))
    """
    global _default_logger

    with _default_logger_lock:
        if _default_logger is not None:
            _default_logger.close()
        _default_logger = RPCLogger(config)
        return _default_logger
