"""
Log filters that stamp records with request context.
"""

import logging
import threading
from typing import Any, Dict, Optional


# Thread-local storage for the id of the request being executed
_request_id_storage = threading.local()


def set_request_id(request_id: str) -> None:
    """
    Set request id for current thread.

    Example:
        >>> set_request_id("9f1c...")
        >>> logger.info("calling upstream")  # record gets request_id
    """
    _request_id_storage.value = request_id


def get_request_id() -> Optional[str]:
    """Request id for current thread, or None."""
    return getattr(_request_id_storage, 'value', None)


def clear_request_id() -> None:
    """Clear request id for current thread."""
    if hasattr(_request_id_storage, 'value'):
        delattr(_request_id_storage, 'value')


class RequestIdFilter(logging.Filter):
    """Adds ``request_id`` to records logged while a request is running."""

    def filter(self, record: logging.LogRecord) -> bool:
        request_id = get_request_id()
        if request_id:
            record.request_id = request_id
        return True


class ExtraFieldsFilter(logging.Filter):
    """
    Adds static fields (service name, environment, ...) to every record.

    Fields already present on the record win.
    """

    def __init__(self, extra_fields: Dict[str, Any]):
        super().__init__()
        self.extra_fields = extra_fields

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.extra_fields.items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True
