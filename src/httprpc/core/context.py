"""Single-use request builder and executor."""

import builtins
import threading
import warnings
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Tuple

import requests
from requests.structures import CaseInsensitiveDict

from .cancellation import CancelScope
from .codecs import JSON, XML, Codec
from .exceptions import (
    ConstructionError,
    InvalidRequestError,
    ResponseReadError,
)
from .middleware import Middleware, apply_middleware
from .once import OnceBarrier
from .transport import Transport, get_default_transport


@dataclass(frozen=True)
class ResponseInfo:
    """
    Snapshot of the response.

    Attributes:
        status_code: HTTP status
        reason: Reason phrase
        url: Final URL (after redirects)
        headers: Response headers (case-insensitive)
        body: Body bytes, None until the body has been read
    """
    status_code: int
    reason: str
    url: str
    headers: Mapping[str, str]
    body: Optional[bytes] = None


def _charset(headers: Mapping[str, str]) -> Optional[str]:
    content_type = headers.get("Content-Type", "")
    for param in content_type.split(";")[1:]:
        key, _, value = param.strip().partition("=")
        if key.lower() == "charset" and value:
            return value.strip("'\"")
    return None


class RequestContext:
    """
    One HTTP exchange: a pending request, a middleware chain and the memoized
    outcome.

    The context is built by one of the builders (``get``, ``post``,
    ``post_json``, ``post_xml``, ``request``), configured with ``use()``, and
    executed by ``do()`` or by any body accessor. The network call and the
    body read each happen exactly once, no matter how many threads call in;
    every caller sees the same response or the same exception instance.

    Lifecycle:
        - Unexecuted: request and middleware are mutable
        - Executed: response or error memoized, chain frozen
        - Body read: bytes memoized, response closed

    Example:
        >>> ctx = get(None, "https://api.example.com/users").use(access_log)
        >>> users = ctx.into_json()
        >>> ctx.response.status_code
        200
    """

    def __init__(
        self,
        request: Optional[requests.PreparedRequest] = None,
        scope: Optional[CancelScope] = None,
        transport: Optional[Transport] = None,
        construction_error: Optional[ConstructionError] = None,
    ):
        self._request = request
        self._scope = scope if scope is not None else CancelScope.background()
        self._transport = transport
        self._construction_error = construction_error

        self._middleware: List[Middleware] = []
        self._frozen = False
        self._lock = threading.Lock()

        self._execute_once = OnceBarrier()
        self._read_once = OnceBarrier()
        self._response: Optional[requests.Response] = None
        self._body: Optional[builtins.bytes] = None
        self._discarded = False

    @classmethod
    def failed(cls, error: ConstructionError, scope: Optional[CancelScope] = None) -> "RequestContext":
        """Context that carries a construction error and no request."""
        return cls(scope=scope, construction_error=error)

    # ==================== Accessors ====================

    @property
    def request(self) -> Optional[requests.PreparedRequest]:
        """Pending request. Middleware may mutate it before calling the next handler."""
        return self._request

    @request.setter
    def request(self, value: requests.PreparedRequest) -> None:
        if self._execute_once.done:
            raise InvalidRequestError("request is frozen after execution")
        self._request = value

    @property
    def response(self) -> Optional[requests.Response]:
        """Transport response, None before a successful execution."""
        return self._response

    @property
    def scope(self) -> CancelScope:
        return self._scope

    @property
    def transport(self) -> Optional[Transport]:
        return self._transport

    @property
    def middleware(self) -> Tuple[Middleware, ...]:
        with self._lock:
            return tuple(self._middleware)

    @property
    def construction_error(self) -> Optional[ConstructionError]:
        return self._construction_error

    @property
    def executed(self) -> bool:
        return self._execute_once.done

    @property
    def body_read(self) -> bool:
        return self._read_once.done

    def response_info(self) -> Optional[ResponseInfo]:
        """Snapshot of status, headers and (if already read) body."""
        response = self._response
        if response is None:
            return None
        return ResponseInfo(
            status_code=response.status_code,
            reason=response.reason or "",
            url=response.url or "",
            headers=CaseInsensitiveDict(response.headers),
            body=self._body,
        )

    # ==================== Configuration ====================

    def _mutable(self, what: str) -> bool:
        if self._frozen:
            warnings.warn(
                f"{what} after execution has no effect on the completed call",
                RuntimeWarning,
                stacklevel=3,
            )
            return False
        return True

    def with_transport(self, transport: Transport) -> "RequestContext":
        """Use ``transport`` instead of the default one."""
        with self._lock:
            if self._mutable("with_transport()"):
                self._transport = transport
        return self

    def use(self, *middleware: Middleware) -> "RequestContext":
        """Append middleware to the chain."""
        with self._lock:
            if self._mutable("use()"):
                self._middleware.extend(middleware)
        return self

    def clean_middleware(self) -> "RequestContext":
        """Drop every registered middleware."""
        with self._lock:
            if self._mutable("clean_middleware()"):
                self._middleware = []
        return self

    # ==================== Execution ====================

    def do(self) -> "RequestContext":
        """
        Execute the request through the middleware chain, once.

        Returns:
            self

        Raises:
            ConstructionError: the context could not be built
            InvalidRequestError: there is no request descriptor
            TransportError: the network call failed (memoized)
            Exception: whatever a middleware raised (memoized)
        """
        if self._construction_error is not None:
            raise self._construction_error
        if self._request is None:
            raise InvalidRequestError()

        self._execute_once.run(self._execute)
        return self

    def _execute(self) -> None:
        with self._lock:
            self._frozen = True
            if self._transport is None:
                self._transport = get_default_transport()
            middleware = tuple(self._middleware)

        handler = apply_middleware(self._send, middleware)
        handler(self)

    @staticmethod
    def _send(ctx: "RequestContext") -> None:
        ctx._response = ctx._transport.execute(ctx._request, ctx._scope)

    # ==================== Body ====================

    def _read_body(self) -> builtins.bytes:
        response = self._response
        if response is None:
            raise InvalidRequestError("no response to read: the call was short-circuited")
        reader = getattr(self._transport, "read_body", None)
        try:
            if reader is not None:
                content = reader(response, self._scope)
            else:
                try:
                    content = response.content
                finally:
                    response.close()
        except requests.exceptions.RequestException as exc:
            raise ResponseReadError(f"failed to read response body: {exc}", response.url) from exc
        self._body = content
        return content

    def _discard_body(self) -> None:
        self._discarded = True
        if self._response is not None:
            self._response.close()

    def bytes(self) -> builtins.bytes:
        """
        Response body, read into memory once.

        Triggers ``do()`` if needed and propagates its error without reading.
        """
        self.do()
        body = self._read_once.run(self._read_body)
        if self._discarded:
            raise InvalidRequestError("response body was discarded by close()")
        return body

    def string(self, encoding: Optional[str] = None) -> str:
        """
        Response body as text.

        Args:
            encoding: Explicit encoding, defaults to the Content-Type charset
                or utf-8. Undecodable bytes are replaced.
        """
        data = self.bytes()
        if encoding is None and self._response is not None:
            encoding = _charset(self._response.headers)
        try:
            return data.decode(encoding or "utf-8", errors="replace")
        except LookupError:
            return data.decode("utf-8", errors="replace")

    def into(self, codec: Codec, target: Any = None) -> Any:
        """Decode the body with ``codec``. DecodeError is raised per call."""
        return codec.unmarshal(self.bytes(), target)

    def into_json(self, target: Any = None) -> Any:
        """
        Decode the JSON body.

        Args:
            target: None, dict/list to fill, dataclass or pydantic model
                (class or instance)

        Example:
            >>> result = {}
            >>> post_json(None, url, None).into_json(result)
            >>> result["hello"]
            'world'
        """
        return self.into(JSON, target)

    def into_xml(self, target: Any = None) -> Any:
        """Decode the XML body. Same targets as into_json()."""
        return self.into(XML, target)

    def close(self) -> None:
        """
        Release an unread response.

        After close() an unread body can no longer be obtained: bytes()
        raises InvalidRequestError. A body that was already read stays
        available.
        """
        if not self._execute_once.done or self._execute_once.error is not None:
            return
        if not self._read_once.done:
            self._read_once.run(self._discard_body)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        request = self._request
        target = f"{request.method} {request.url}" if request is not None else "<no request>"
        if self._construction_error is not None:
            state = "failed"
        elif self._execute_once.done:
            state = "executed"
        else:
            state = "pending"
        return f"<RequestContext {target} [{state}]>"
