"""
Tests for header and auth middleware.
"""

import base64

from src.httprpc.core.builders import get
from src.httprpc.plugins.auth import api_key_auth, basic_auth, bearer_auth, header_injector

URL = "https://api.example.com/me"


class TestHeaderInjector:
    """Test header_injector middleware."""

    def test_sets_headers(self, fake_transport):
        get(None, URL, transport=fake_transport).use(
            header_injector({"Accept": "application/json", "X-Client": "httprpc"})
        ).do()

        sent = fake_transport.requests[0]
        assert sent.headers["Accept"] == "application/json"
        assert sent.headers["X-Client"] == "httprpc"

    def test_override(self, fake_transport):
        ctx = get(None, URL, headers={"Accept": "text/plain"}, transport=fake_transport)
        ctx.use(header_injector({"Accept": "application/json"})).do()
        assert fake_transport.requests[0].headers["Accept"] == "application/json"

    def test_no_override(self, fake_transport):
        """Test existing headers survive when override=False."""
        ctx = get(None, URL, headers={"Accept": "text/plain"}, transport=fake_transport)
        ctx.use(header_injector({"Accept": "application/json", "X-New": "1"}, override=False)).do()

        sent = fake_transport.requests[0]
        assert sent.headers["Accept"] == "text/plain"
        assert sent.headers["X-New"] == "1"

    def test_source_mapping_copied(self, fake_transport):
        headers = {"X-A": "1"}
        middleware = header_injector(headers)
        headers["X-A"] = "2"

        get(None, URL, transport=fake_transport).use(middleware).do()
        assert fake_transport.requests[0].headers["X-A"] == "1"


class TestAuth:
    """Test auth middleware."""

    def test_bearer(self, fake_transport):
        get(None, URL, transport=fake_transport).use(bearer_auth("t0k3n")).do()
        assert fake_transport.requests[0].headers["Authorization"] == "Bearer t0k3n"

    def test_api_key_default_header(self, fake_transport):
        get(None, URL, transport=fake_transport).use(api_key_auth("k-1")).do()
        assert fake_transport.requests[0].headers["X-API-Key"] == "k-1"

    def test_api_key_custom_header(self, fake_transport):
        get(None, URL, transport=fake_transport).use(api_key_auth("k-1", header="X-Token")).do()
        assert fake_transport.requests[0].headers["X-Token"] == "k-1"

    def test_basic(self, fake_transport):
        get(None, URL, transport=fake_transport).use(basic_auth("alice", "s3cret")).do()

        expected = base64.b64encode(b"alice:s3cret").decode("ascii")
        assert fake_transport.requests[0].headers["Authorization"] == f"Basic {expected}"
