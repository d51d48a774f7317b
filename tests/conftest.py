"""
Pytest configuration and fixtures for httprpc tests.
"""

import io
import threading
import time

import pytest
import requests
import responses as responses_lib

from src.httprpc.core.config import TransportConfig
from src.httprpc.core.logging.config import LoggingConfig
from src.httprpc.core.logging.logger import RPCLogger
from src.httprpc.core.transport import RequestsTransport


@pytest.fixture
def base_url():
    """Base URL for testing."""
    return "https://api.example.com"


@pytest.fixture
def mock_responses():
    """Mock HTTP responses using responses library."""
    with responses_lib.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def transport():
    """RequestsTransport instance for testing."""
    transport = RequestsTransport(TransportConfig.create(timeout_connect=5, timeout_read=5))
    yield transport
    transport.close()


class FakeTransport:
    """
    Transport that never touches the network.

    Returns a canned requests.Response and counts calls. ``delay`` keeps the
    call in flight long enough for concurrency tests to pile up.
    """

    def __init__(self, status=200, body=b"hello", headers=None, error=None, delay=0.0):
        self.status = status
        self.body = body
        self.headers = headers or {"Content-Type": "text/plain; charset=utf-8"}
        self.error = error
        self.delay = delay
        self.calls = 0
        self.requests = []
        self.responses = []
        self._lock = threading.Lock()

    def execute(self, request, scope):
        with self._lock:
            self.calls += 1
            self.requests.append(request)
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error

        response = ClosingResponse()
        response.status_code = self.status
        response.reason = "OK" if self.status < 400 else "Error"
        response.url = request.url
        response.headers = requests.structures.CaseInsensitiveDict(self.headers)
        response._content = self.body
        response._content_consumed = True
        response.request = request
        with self._lock:
            self.responses.append(response)
        return response


class ClosingResponse(requests.Response):
    """requests.Response that counts close() calls."""

    def __init__(self):
        super().__init__()
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


@pytest.fixture
def fake_transport():
    """Fake transport with a call counter."""
    return FakeTransport()


@pytest.fixture
def make_transport():
    """Factory for FakeTransport with custom status, body, error or delay."""
    return FakeTransport


class TrickleBody(io.RawIOBase):
    """Raw body that yields one byte every ``interval`` seconds."""

    def __init__(self, size=40, interval=0.05):
        self.left = size
        self.interval = interval

    def readable(self):
        return True

    def readinto(self, buffer):
        if self.left == 0:
            return 0
        time.sleep(self.interval)
        buffer[0] = ord("x")
        self.left -= 1
        return 1


@pytest.fixture
def make_trickle_response():
    """
    Factory for a streamed requests.Response whose body arrives slowly.

    Default: 40 bytes at one byte per 50 ms, about 2 s in total.
    """
    def factory(url="https://api.example.com/slow", size=40, interval=0.05):
        response = requests.Response()
        response.status_code = 200
        response.reason = "OK"
        response.url = url
        response.raw = TrickleBody(size, interval)
        return response

    return factory


@pytest.fixture
def quiet_logger():
    """
    RPCLogger without own handlers.

    Records propagate to the root logger, so caplog sees them.
    """
    logger = RPCLogger(LoggingConfig.create(level="DEBUG", enable_console=False), name="httprpc_test")
    yield logger
    logger.close()


@pytest.fixture
def logging_config_with_file(tmp_path):
    """
    LoggingConfig fixture with file logging enabled.

    Uses temporary directory for log files to avoid cleanup issues.
    """
    log_file = tmp_path / "test.log"
    return LoggingConfig.create(
        level="DEBUG",
        enable_console=False,
        enable_file=True,
        file_path=str(log_file)
    )
