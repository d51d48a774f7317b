"""
Middleware composition.

A handler takes the RequestContext and raises on failure. A middleware takes
the next handler and returns a handler wrapping it:

    def add_header(next_handler):
        def handler(ctx):
            ctx.request.headers["X-Trace"] = "1"   # inbound
            next_handler(ctx)
            ctx.response.headers["X-Seen"] = "1"   # outbound
        return handler

Middleware at index 0 is the outermost layer.
"""

from typing import TYPE_CHECKING, Callable, Iterable

if TYPE_CHECKING:
    from .context import RequestContext

Handler = Callable[["RequestContext"], None]
Middleware = Callable[[Handler], Handler]


def apply_middleware(handler: Handler, middleware: Iterable[Middleware]) -> Handler:
    """
    Wrap ``handler`` with ``middleware``, first element outermost.

    Args:
        handler: Terminal handler (performs the network call)
        middleware: Middleware in registration order

    Returns:
        Composed handler
    """
    for mw in reversed(tuple(middleware)):
        handler = mw(handler)
    return handler


def chain(*middleware: Middleware) -> Middleware:
    """
    Bundle several middleware into one, keeping their order.

    Example:
        >>> auth_and_log = chain(bearer_auth("token"), access_log)
        >>> get(None, url).use(auth_and_log).do()
    """
    def composed(next_handler: Handler) -> Handler:
        return apply_middleware(next_handler, middleware)
    return composed
