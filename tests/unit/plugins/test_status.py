"""
Tests for raise_for_status middleware.
"""

import pytest

from src.httprpc.core.builders import get
from src.httprpc.core.exceptions import ClientError, ServerError
from src.httprpc.plugins.status import raise_for_status

URL = "https://api.example.com/items/1"


class TestRaiseForStatus:
    """Test status classification."""

    def test_success_passes(self, make_transport):
        transport = make_transport(status=200, body=b"ok")
        assert get(None, URL, transport=transport).use(raise_for_status).string() == "ok"

    def test_redirect_status_passes(self, make_transport):
        transport = make_transport(status=304, body=b"")
        ctx = get(None, URL, transport=transport).use(raise_for_status).do()
        assert ctx.response.status_code == 304

    def test_client_error(self, make_transport):
        """Test 4xx raises ClientError, memoized like a transport error."""
        transport = make_transport(status=404, body=b"missing")
        ctx = get(None, URL, transport=transport).use(raise_for_status)

        with pytest.raises(ClientError) as first:
            ctx.do()
        with pytest.raises(ClientError) as second:
            ctx.string()

        assert first.value is second.value
        assert first.value.status_code == 404
        assert first.value.url == URL
        assert transport.calls == 1
        assert transport.responses[0].close_calls == 1

    def test_server_error(self, make_transport):
        transport = make_transport(status=503)
        with pytest.raises(ServerError) as exc_info:
            get(None, URL, transport=transport).use(raise_for_status).do()
        assert exc_info.value.status_code == 503

    def test_short_circuit_is_not_error(self, fake_transport):
        def stop(next_handler):
            def handler(ctx):
                return None
            return handler

        ctx = get(None, URL, transport=fake_transport).use(raise_for_status, stop)
        ctx.do()
        assert fake_transport.calls == 0
