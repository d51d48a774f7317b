"""Core httprpc модули."""

from .cancellation import CancelScope
from .config import TimeoutConfig, PoolConfig, SecurityConfig, TransportConfig
from .exceptions import (
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
    classify_requests_exception,
)
from .once import OnceBarrier, OnceState
from .middleware import Handler, Middleware, apply_middleware, chain
from .codecs import Codec, JSONCodec, XMLCodec, JSON, XML, get_codec, register_codec
from .transport import Transport, RequestsTransport, get_default_transport
from .context import RequestContext, ResponseInfo
from .builders import get, post, post_json, post_xml, post_encoded, request, new_request, validate_url

__all__ = [
    # Cancellation
    "CancelScope",
    # Config
    "TimeoutConfig",
    "PoolConfig",
    "SecurityConfig",
    "TransportConfig",
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
    "classify_requests_exception",
    # Once
    "OnceBarrier",
    "OnceState",
    # Middleware
    "Handler",
    "Middleware",
    "apply_middleware",
    "chain",
    # Codecs
    "Codec",
    "JSONCodec",
    "XMLCodec",
    "JSON",
    "XML",
    "get_codec",
    "register_codec",
    # Transport
    "Transport",
    "RequestsTransport",
    "get_default_transport",
    # Context
    "RequestContext",
    "ResponseInfo",
    # Builders
    "get",
    "post",
    "post_json",
    "post_xml",
    "post_encoded",
    "request",
    "new_request",
    "validate_url",
]
