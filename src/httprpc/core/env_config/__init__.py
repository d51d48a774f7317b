"""
Environment configuration for httprpc.

Example:
    >>> from httprpc.core.env_config import load_from_env
    >>>
    >>> config = load_from_env()                   # HTTPRPC_* and .env
    >>> config = load_from_env(timeout_read=5)     # with overrides
"""

from .loader import load_from_env, load_logging_from_env
from .validator import HTTPRPCSettings

__all__ = [
    "load_from_env",
    "load_logging_from_env",
    "HTTPRPCSettings",
]
