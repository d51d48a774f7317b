"""Bundled middleware for httprpc."""

from .access_log import AccessLog, access_log
from .auth import api_key_auth, basic_auth, bearer_auth, header_injector
from .status import raise_for_status

__all__ = [
    "AccessLog",
    "access_log",
    "header_injector",
    "bearer_auth",
    "api_key_auth",
    "basic_auth",
    "raise_for_status",
]
