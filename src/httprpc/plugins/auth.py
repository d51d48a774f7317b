# src/httprpc/plugins/auth.py

from typing import Mapping

from requests.auth import HTTPBasicAuth

from ..core.context import RequestContext
from ..core.middleware import Handler, Middleware


def header_injector(headers: Mapping[str, str], override: bool = True) -> Middleware:
    """
    Middleware, выставляющий заголовки запроса перед отправкой.

    Args:
        headers: Заголовки
        override: Перезаписывать уже заданные заголовки

    Example:
        >>> get(None, url).use(header_injector({"Accept": "application/json"})).do()
    """
    fixed = dict(headers)

    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: RequestContext) -> None:
            for name, value in fixed.items():
                if override or name not in ctx.request.headers:
                    ctx.request.headers[name] = value
            next_handler(ctx)
        return handler

    return middleware


def bearer_auth(token: str) -> Middleware:
    """Authorization: Bearer <token>."""
    return header_injector({"Authorization": f"Bearer {token}"})


def api_key_auth(key: str, header: str = "X-API-Key") -> Middleware:
    """API ключ в заголовке (по умолчанию X-API-Key)."""
    return header_injector({header: key})


def basic_auth(username: str, password: str) -> Middleware:
    """Authorization: Basic base64(username:password) через requests.auth.HTTPBasicAuth."""
    auth = HTTPBasicAuth(username, password)

    def middleware(next_handler: Handler) -> Handler:
        def handler(ctx: RequestContext) -> None:
            auth(ctx.request)
            next_handler(ctx)
        return handler

    return middleware
