"""httprpc - single-use request contexts over requests with middleware and deadlines."""

import logging
from importlib.metadata import version, PackageNotFoundError

from .core.builders import get, post, post_json, post_xml, post_encoded, request, new_request
from .core.cancellation import CancelScope
from .core.context import RequestContext, ResponseInfo
from .core.transport import Transport, RequestsTransport, get_default_transport
from .core.middleware import Handler, Middleware, apply_middleware, chain
from .core.codecs import Codec, JSON, XML, get_codec, register_codec
from .core.config import TimeoutConfig, PoolConfig, SecurityConfig, TransportConfig
from .core.env_config import load_from_env, load_logging_from_env
from .core.logging import LoggingConfig, RPCLogger, get_logger, configure_logging
from .core.exceptions import (
    HTTPRPCError,
    ConstructionError,
    InvalidURLError,
    EncodeError,
    InvalidRequestError,
    TransportError,
    NetworkError,
    ConnectionError,
    DNSError,
    ProxyError,
    SSLError,
    TimeoutError,
    DeadlineExceededError,
    CancelledError,
    ResponseReadError,
    DecodeError,
    HTTPStatusError,
    ClientError,
    ServerError,
    ConfigurationError,
)
from .plugins import (
    AccessLog,
    access_log,
    header_injector,
    bearer_auth,
    api_key_auth,
    basic_auth,
    raise_for_status,
)

# NullHandler, чтобы не было "No handler found"
logging.getLogger('httprpc').addHandler(logging.NullHandler())

try:
    __version__ = version("httprpc")
except PackageNotFoundError:
    # Package is not installed (development mode)
    __version__ = "0.0.0-dev"

__all__ = [
    # Builders
    "get",
    "post",
    "post_json",
    "post_xml",
    "post_encoded",
    "request",
    "new_request",

    # Context
    "RequestContext",
    "ResponseInfo",
    "CancelScope",

    # Transport
    "Transport",
    "RequestsTransport",
    "get_default_transport",

    # Middleware
    "Handler",
    "Middleware",
    "apply_middleware",
    "chain",
    "AccessLog",
    "access_log",
    "header_injector",
    "bearer_auth",
    "api_key_auth",
    "basic_auth",
    "raise_for_status",

    # Codecs
    "Codec",
    "JSON",
    "XML",
    "get_codec",
    "register_codec",

    # Config
    "TimeoutConfig",
    "PoolConfig",
    "SecurityConfig",
    "TransportConfig",
    "load_from_env",
    "load_logging_from_env",

    # Logging
    "LoggingConfig",
    "RPCLogger",
    "get_logger",
    "configure_logging",

    # Exceptions
    "HTTPRPCError",
    "ConstructionError",
    "InvalidURLError",
    "EncodeError",
    "InvalidRequestError",
    "TransportError",
    "NetworkError",
    "ConnectionError",
    "DNSError",
    "ProxyError",
    "SSLError",
    "TimeoutError",
    "DeadlineExceededError",
    "CancelledError",
    "ResponseReadError",
    "DecodeError",
    "HTTPStatusError",
    "ClientError",
    "ServerError",
    "ConfigurationError",
]
