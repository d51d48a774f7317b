"""
Tests for middleware composition helpers.
"""

from src.httprpc.core.middleware import apply_middleware, chain


def recorder(name, log):
    def middleware(next_handler):
        def handler(ctx):
            log.append(f"{name}:in")
            next_handler(ctx)
            log.append(f"{name}:out")
        return handler
    return middleware


class TestApplyMiddleware:
    """Test onion order."""

    def test_empty_chain_returns_handler(self):
        def terminal(ctx):
            pass
        assert apply_middleware(terminal, []) is terminal

    def test_first_is_outermost(self):
        log = []

        def terminal(ctx):
            log.append("send")

        handler = apply_middleware(terminal, [recorder("a", log), recorder("b", log)])
        handler(None)

        assert log == ["a:in", "b:in", "send", "b:out", "a:out"]

    def test_accepts_generator(self):
        log = []
        handler = apply_middleware(lambda ctx: log.append("send"), (recorder(n, log) for n in "xy"))
        handler(None)
        assert log == ["x:in", "y:in", "send", "y:out", "x:out"]


class TestChain:
    """Test chain()."""

    def test_chain_keeps_order(self):
        log = []
        bundled = chain(recorder("a", log), recorder("b", log))

        handler = apply_middleware(lambda ctx: log.append("send"), [bundled, recorder("c", log)])
        handler(None)

        assert log == ["a:in", "b:in", "c:in", "send", "c:out", "b:out", "a:out"]

    def test_chain_empty(self):
        log = []
        handler = chain()(lambda ctx: log.append("send"))
        handler(None)
        assert log == ["send"]
