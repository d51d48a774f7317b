"""
Builders that produce RequestContext instances.

Builders never raise: a bad URL or a payload that cannot be marshaled yields
a context carrying the ConstructionError, and every later operation on it
raises that error without touching the transport.
"""

from typing import Any, Dict, Optional, Union
from urllib.parse import urlsplit

import requests

from .cancellation import CancelScope
from .codecs import JSON, XML, Codec
from .context import RequestContext
from .exceptions import ConstructionError, InvalidURLError
from .transport import Transport

Body = Any


def validate_url(url: str) -> None:
    """
    Проверяет, что URL пригоден для HTTP запроса.

    Raises:
        InvalidURLError: пустой URL, схема не http/https, нет хоста, битый порт
    """
    if not isinstance(url, str) or not url.strip():
        raise InvalidURLError("empty URL", url)

    try:
        parts = urlsplit(url)
        # .port парсит порт лениво
        parts.port
    except ValueError as exc:
        raise InvalidURLError(f"malformed URL: {exc}", url) from exc

    if parts.scheme.lower() not in ("http", "https"):
        raise InvalidURLError(f"unsupported protocol scheme {parts.scheme!r}", url)
    if not parts.hostname:
        raise InvalidURLError("missing host", url)


def _prepare(req: requests.Request) -> requests.PreparedRequest:
    try:
        return req.prepare()
    except (requests.exceptions.InvalidURL,
            requests.exceptions.MissingSchema,
            requests.exceptions.InvalidSchema) as exc:
        raise InvalidURLError(str(exc), req.url) from exc
    except (requests.exceptions.RequestException, TypeError, ValueError) as exc:
        raise ConstructionError(f"cannot build request: {exc}") from exc


def request(
    scope: Optional[CancelScope],
    req: Union[requests.Request, requests.PreparedRequest],
    transport: Optional[Transport] = None,
) -> RequestContext:
    """
    Bind an existing request to ``scope``.

    A ``requests.Request`` is prepared, a ``requests.PreparedRequest`` is
    copied so the context owns it exclusively.

    Args:
        scope: Cancellation scope, None for CancelScope.background()
        req: Request to send
        transport: Transport, None for the default one
    """
    try:
        if isinstance(req, requests.PreparedRequest):
            prepared = req.copy()
        else:
            prepared = _prepare(req)
        validate_url(prepared.url)
    except ConstructionError as exc:
        return RequestContext.failed(exc, scope)

    return RequestContext(request=prepared, scope=scope, transport=transport)


def new_request(
    scope: Optional[CancelScope],
    method: str,
    url: str,
    body: Body = None,
    content_type: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    transport: Optional[Transport] = None,
) -> RequestContext:
    """
    Build a context for an arbitrary method.

    Args:
        scope: Cancellation scope, None for CancelScope.background()
        method: HTTP method
        url: Absolute http(s) URL
        body: bytes, str or file-like object
        content_type: Content-Type header value
        headers: Extra headers
        params: Query parameters appended to the URL
        transport: Transport, None for the default one

    Example:
        >>> ctx = new_request(None, "DELETE", "https://api.example.com/users/1")
        >>> ctx.do().response.status_code
        204
    """
    try:
        validate_url(url)
    except InvalidURLError as exc:
        return RequestContext.failed(exc, scope)

    all_headers = dict(headers or {})
    if content_type:
        all_headers["Content-Type"] = content_type

    return request(
        scope,
        requests.Request(
            method=method.upper(),
            url=url,
            headers=all_headers,
            data=body,
            params=params,
        ),
        transport=transport,
    )


def get(
    scope: Optional[CancelScope],
    url: str,
    headers: Optional[Dict[str, str]] = None,
    params: Optional[Dict[str, Any]] = None,
    transport: Optional[Transport] = None,
) -> RequestContext:
    """
    GET context.

    Example:
        >>> body = get(None, "https://example.com/hello").string()
    """
    return new_request(scope, "GET", url, headers=headers, params=params, transport=transport)


def post(
    scope: Optional[CancelScope],
    url: str,
    content_type: str,
    body: Body,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[Transport] = None,
) -> RequestContext:
    """
    POST context with ``body`` sent as ``content_type``.

    Example:
        >>> post(None, url, "text/plain", b"ping").do()
    """
    return new_request(
        scope, "POST", url,
        body=body,
        content_type=content_type,
        headers=headers,
        transport=transport,
    )


def post_encoded(
    scope: Optional[CancelScope],
    url: str,
    payload: Any,
    codec: Codec,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[Transport] = None,
) -> RequestContext:
    """
    POST context whose body is ``payload`` marshaled by ``codec``.

    A marshal failure is stored as EncodeError on the returned context.
    """
    try:
        body = codec.marshal(payload)
    except ConstructionError as exc:
        return RequestContext.failed(exc, scope)
    return post(scope, url, codec.content_type, body, headers=headers, transport=transport)


def post_json(
    scope: Optional[CancelScope],
    url: str,
    payload: Any,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[Transport] = None,
) -> RequestContext:
    """
    POST context with a JSON body.

    Example:
        >>> result = post_json(None, url, {"name": "alice"}).into_json()
    """
    return post_encoded(scope, url, payload, JSON, headers=headers, transport=transport)


def post_xml(
    scope: Optional[CancelScope],
    url: str,
    payload: Any,
    headers: Optional[Dict[str, str]] = None,
    transport: Optional[Transport] = None,
) -> RequestContext:
    """POST context with an XML body."""
    return post_encoded(scope, url, payload, XML, headers=headers, transport=transport)
