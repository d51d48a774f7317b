"""
Иерархия исключений httprpc.

Классификация:
- ConstructionError - запрос не удалось построить, контекст мертв навсегда
- InvalidRequestError - у контекста нет дескриптора запроса
- TransportError - ошибка сети/транспорта, мемоизируется, не ретраится
- DecodeError - ошибка декодирования тела, не мемоизируется
"""

import builtins
from typing import Optional, TYPE_CHECKING

import requests

if TYPE_CHECKING:
    from .cancellation import CancelScope

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# BASE
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPRPCError(Exception):
    """Базовое исключение httprpc."""

    def __init__(self, message: str, **kwargs):
        self.message = message
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ОШИБКИ ПОСТРОЕНИЯ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ConstructionError(HTTPRPCError):
    """
    Запрос не удалось построить.

    Контекст с такой ошибкой никогда не обращается к транспорту:
    do(), bytes(), string() и into_*() поднимают этот же экземпляр.
    """
    pass

class InvalidURLError(ConstructionError):
    """
    Невалидный URL.

    Args:
        message: Сообщение об ошибке
        url: Исходный URL
    """

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        msg = message
        if url is not None:
            msg += f" (url: {url!r})"
        super().__init__(msg)

class EncodeError(ConstructionError):
    """
    Не удалось сериализовать тело запроса.

    Args:
        message: Сообщение
        format: Формат кодека ('json', 'xml')
    """

    def __init__(self, message: str, format: Optional[str] = None):
        self.format = format
        msg = message
        if format:
            msg = f"{format} encode error: {message}"
        super().__init__(msg)

class InvalidRequestError(HTTPRPCError):
    """Операция над контекстом без дескриптора запроса."""

    def __init__(self, message: str = "nil request"):
        super().__init__(message)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ОШИБКИ ТРАНСПОРТА
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class TransportError(HTTPRPCError):
    """
    Ошибка транспорта.

    Возвращается как есть, мемоизируется контекстом и не ретраится.
    """

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        full_message = f"{message}"
        if url:
            full_message += f" (url: {url})"
        super().__init__(full_message)

class NetworkError(TransportError):
    """Сетевая ошибка."""
    pass

class ConnectionError(NetworkError):
    """
    Ошибка подключения.

    Примеры:
    - Connection refused
    - Connection reset
    - Network unreachable
    """
    pass

class DNSError(ConnectionError):
    """DNS resolution failed."""
    pass

class ProxyError(ConnectionError):
    """Ошибка прокси."""
    pass

class SSLError(ConnectionError):
    """Ошибка TLS рукопожатия или проверки сертификата."""
    pass

class TimeoutError(NetworkError, builtins.TimeoutError):
    """
    Таймаут транспорта (connect или read).

    Args:
        message: Сообщение об ошибке
        url: URL запроса
        timeout_type: Тип таймаута ('connect' или 'read')
    """

    def __init__(self, message: str, url: Optional[str] = None, timeout_type: Optional[str] = None):
        self.timeout_type = timeout_type
        msg = message
        if timeout_type:
            msg += f" ({timeout_type} timeout)"
        super().__init__(msg, url)

class DeadlineExceededError(TransportError, builtins.TimeoutError):
    """Истек дедлайн CancelScope, запрос прерван."""

    def __init__(self, message: str = "context deadline exceeded", url: Optional[str] = None):
        super().__init__(message, url)

class CancelledError(TransportError):
    """CancelScope отменен вызывающей стороной, запрос прерван."""

    def __init__(self, message: str = "context canceled", url: Optional[str] = None):
        super().__init__(message, url)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# ОШИБКИ ТЕЛА ОТВЕТА
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ResponseReadError(HTTPRPCError):
    """Не удалось прочитать тело ответа. Мемоизируется как и ошибка запроса."""

    def __init__(self, message: str, url: Optional[str] = None):
        self.url = url
        msg = message
        if url:
            msg += f" (url: {url})"
        super().__init__(msg)

class DecodeError(HTTPRPCError):
    """
    Не удалось декодировать тело в целевой тип.

    Не мемоизируется: это свойство целевого типа, а не ответа,
    повторная попытка с другим target использует те же байты.
    """

    def __init__(self, message: str, format: Optional[str] = None):
        self.format = format
        msg = message
        if format:
            msg = f"{format} decode error: {message}"
        super().__init__(msg)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# HTTP СТАТУСЫ (только через raise_for_status middleware)
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class HTTPStatusError(HTTPRPCError):
    """
    Ответ с кодом ошибки.

    Args:
        status_code: HTTP статус
        url: URL
        message: Дополнительное сообщение
    """

    def __init__(self, status_code: int, url: str, message: str = ""):
        self.status_code = status_code
        self.url = url

        msg = f"HTTP {status_code} error for {url}"
        if message:
            msg += f": {message}"

        super().__init__(msg)

class ClientError(HTTPStatusError):
    """4xx ответ."""
    pass

class ServerError(HTTPStatusError):
    """5xx ответ."""
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# СПЕЦИАЛЬНЫЕ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

class ConfigurationError(HTTPRPCError):
    """Ошибка конфигурации."""
    pass

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# УТИЛИТЫ
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def classify_requests_exception(
    exc: Exception,
    url: Optional[str],
    scope: Optional["CancelScope"] = None
) -> HTTPRPCError:
    """
    Конвертировать requests.exceptions в наши исключения.

    Если scope уже истек или отменен, любая ошибка транспорта
    считается последствием этого и возвращается ошибка scope.

    Args:
        exc: Исключение из requests
        url: URL запроса
        scope: CancelScope запроса (опционально)

    Returns:
        Наше исключение с правильной классификацией

    Examples:
        >>> exc = requests.exceptions.ConnectTimeout()
        >>> our_exc = classify_requests_exception(exc, "https://example.com")
        >>> assert isinstance(our_exc, TimeoutError)
    """
    if scope is not None:
        scope_error = scope.error()
        if scope_error is not None:
            return type(scope_error)(url=url)

    if isinstance(exc, requests.exceptions.ConnectTimeout):
        return TimeoutError("Request timeout", url, timeout_type="connect")

    elif isinstance(exc, requests.exceptions.Timeout):
        return TimeoutError("Request timeout", url, timeout_type="read")

    elif isinstance(exc, requests.exceptions.ProxyError):
        return ProxyError("Proxy error", url)

    elif isinstance(exc, requests.exceptions.SSLError):
        return SSLError(f"SSL error: {exc}", url)

    elif isinstance(exc, requests.exceptions.ConnectionError):
        text = str(exc)
        # urllib3 не выделяет DNS в отдельный тип
        if "Name or service not known" in text or "getaddrinfo failed" in text \
                or "nodename nor servname" in text or "Failed to resolve" in text:
            return DNSError("DNS resolution failed", url)
        return ConnectionError("Connection error", url)

    elif isinstance(exc, (requests.exceptions.InvalidURL,
                          requests.exceptions.InvalidSchema,
                          requests.exceptions.MissingSchema)):
        return NetworkError(f"Unsupported target: {exc}", url)

    elif isinstance(exc, requests.exceptions.RequestException):
        return NetworkError(f"Request failed: {exc}", url)

    else:
        # Неизвестная ошибка - оборачиваем
        return TransportError(str(exc), url)
