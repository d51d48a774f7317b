# src/httprpc/core/transport.py
"""
HTTP transport collaborator.

RequestContext only knows the Transport protocol. RequestsTransport is the
default implementation on top of requests; tests and callers inject their own.
"""
import atexit
import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Protocol

import requests
from requests.adapters import HTTPAdapter

from .cancellation import CancelScope
from .config import TransportConfig
from .exceptions import (
    DeadlineExceededError,
    TransportError,
    classify_requests_exception,
)
from .session_manager import ThreadSafeSessionManager

logger = logging.getLogger(__name__)


class Transport(Protocol):
    """
    Issues one network call for a prepared request.

    A transport may also provide ``read_body(response, scope) -> bytes``.
    RequestContext uses it to read the body under the scope; without it the
    body is read directly from ``response.content``.
    """

    def execute(self, request: requests.PreparedRequest, scope: CancelScope) -> requests.Response:
        """
        Send ``request`` and return the response with an unread body.

        Raises:
            TransportError: network failure, deadline exceeded or cancellation
        """
        ...


def _wait(future: Future, scope: CancelScope) -> bool:
    """Block until ``future`` finishes or ``scope`` is done. True if it finished."""
    finished = threading.Event()
    future.add_done_callback(lambda _: finished.set())
    unregister = scope.add_cancel_callback(finished.set)
    try:
        while not future.done() and not scope.done():
            finished.wait(scope.remaining())
    finally:
        unregister()
    return future.done()


def _consume(response: requests.Response) -> bytes:
    try:
        return response.content
    finally:
        response.close()


def _discard_late_response(future: Future) -> None:
    """Close a response that arrived after its caller gave up."""
    if future.cancelled() or future.exception() is not None:
        return
    future.result().close()


class RequestsTransport:
    """
    Transport на основе requests.

    Features:
        - Connection pooling через HTTPAdapter
        - Thread-safe: каждый рабочий поток получает собственную сессию
        - Сетевой вызов выполняется в пуле потоков, вызывающий поток ждет
          не дольше дедлайна CancelScope и просыпается при отмене
        - Таймауты requests обрезаются до оставшегося времени scope

    Example:
        >>> transport = RequestsTransport(TransportConfig.create(timeout_read=5))
        >>> ctx = get(None, "https://api.example.com/users", transport=transport)
        >>> with transport:
        ...     ctx.do()
    """

    def __init__(self, config: Optional[TransportConfig] = None):
        self._config = config or TransportConfig()
        self._sessions = ThreadSafeSessionManager(session_factory=self._create_session)
        self._executor = ThreadPoolExecutor(
            max_workers=self._config.pool.max_workers,
            thread_name_prefix="httprpc-transport",
        )
        self._lock = threading.Lock()
        self._closed = False

    @property
    def config(self) -> TransportConfig:
        return self._config

    @property
    def closed(self) -> bool:
        return self._closed

    def _create_session(self) -> requests.Session:
        """Create configured session."""
        session = requests.Session()

        adapter = HTTPAdapter(
            pool_connections=self._config.pool.pool_connections,
            pool_maxsize=self._config.pool.pool_maxsize,
            pool_block=self._config.pool.pool_block,
            max_retries=0,
        )
        session.mount('http://', adapter)
        session.mount('https://', adapter)
        session.max_redirects = self._config.security.max_redirects

        return session

    # ==================== Выполнение ====================

    def execute(self, request: requests.PreparedRequest, scope: CancelScope) -> requests.Response:
        url = request.url

        scope_error = scope.error()
        if scope_error is not None:
            raise type(scope_error)(url=url)

        with self._lock:
            if self._closed:
                raise TransportError("transport is closed", url)
            outgoing = self._with_default_headers(request)
            timeout = self._config.timeout.clamp(scope.remaining())
            future = self._executor.submit(self._send, outgoing, timeout)

        if not _wait(future, scope):
            future.add_done_callback(_discard_late_response)
            reason = scope.error() or DeadlineExceededError()
            logger.debug("Abandoned in-flight request", extra={"url": url, "reason": str(reason)})
            raise type(reason)(url=url)

        try:
            return future.result()
        except requests.exceptions.RequestException as exc:
            raise classify_requests_exception(exc, url, scope) from exc

    def read_body(self, response: requests.Response, scope: CancelScope) -> bytes:
        """
        Read the whole body of a response returned by execute() and close it.

        The read runs on a worker thread like the send, so a server that
        trickles the body cannot hold the caller past the deadline. An
        abandoned read closes the response itself when it finishes.

        Raises:
            DeadlineExceededError: the deadline passed before the body arrived
            CancelledError: the scope was cancelled
            TransportError: the transport is closed
            requests.RequestException: the read itself failed
        """
        url = response.url

        scope_error = scope.error()
        if scope_error is not None:
            response.close()
            raise type(scope_error)(url=url)

        with self._lock:
            if self._closed:
                response.close()
                raise TransportError("transport is closed", url)
            future = self._executor.submit(_consume, response)

        if not _wait(future, scope):
            reason = scope.error() or DeadlineExceededError()
            logger.debug("Abandoned body read", extra={"url": url, "reason": str(reason)})
            raise type(reason)(url=url)

        return future.result()

    def _with_default_headers(self, request: requests.PreparedRequest) -> requests.PreparedRequest:
        if not self._config.headers:
            return request
        outgoing = request.copy()
        for name, value in self._config.headers.items():
            outgoing.headers.setdefault(name, value)
        return outgoing

    def _send(self, request: requests.PreparedRequest, timeout) -> requests.Response:
        session = self._sessions.get_session()
        settings = session.merge_environment_settings(
            request.url,
            dict(self._config.proxies),
            True,
            self._config.security.verify_ssl,
            None,
        )
        logger.debug("Sending request", extra={"method": request.method, "url": request.url})
        return session.send(
            request,
            timeout=timeout,
            allow_redirects=self._config.security.allow_redirects,
            **settings
        )

    # ==================== Жизненный цикл ====================

    def close(self) -> None:
        """Stop accepting requests and close every session. Idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._executor.shutdown(wait=False)
        self._sessions.close_all()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


_default_transport: Optional[RequestsTransport] = None
_default_transport_lock = threading.Lock()


def get_default_transport() -> RequestsTransport:
    """
    Process-wide transport used when a context has none.

    Built once on first use with the default TransportConfig and closed at
    interpreter exit. There is no setter: pass ``transport=`` to the builders
    or call ``RequestContext.with_transport()`` to use another one.
    """
    global _default_transport

    with _default_transport_lock:
        if _default_transport is None:
            _default_transport = RequestsTransport()
            atexit.register(_default_transport.close)
        return _default_transport
