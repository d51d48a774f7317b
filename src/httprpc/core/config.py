"""
Конфигурация транспорта httprpc.

Все конфиги immutable (frozen dataclasses) для потокобезопасности:
транспорт по умолчанию разделяется всеми контекстами процесса.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TIMEOUT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TimeoutConfig:
    """
    Таймауты транспорта.

    Дедлайн CancelScope запроса сильнее: если до него осталось меньше,
    таймаут requests обрезается до оставшегося времени.

    Args:
        connect: Таймаут подключения (сек), None = без ограничения
        read: Таймаут чтения (сек), None = без ограничения

    Examples:
        >>> TimeoutConfig(connect=5, read=30)
        >>> TimeoutConfig(connect=None, read=None)  # как http.DefaultClient
    """
    connect: Optional[float] = 10.0
    read: Optional[float] = 60.0

    def __post_init__(self):
        """Валидация."""
        if self.connect is not None and self.connect <= 0:
            raise ValueError("connect timeout must be positive")
        if self.read is not None and self.read <= 0:
            raise ValueError("read timeout must be positive")

    def clamp(self, remaining: Optional[float]) -> Tuple[Optional[float], Optional[float]]:
        """
        Вернуть (connect, read) для requests, не больше remaining.

        Args:
            remaining: Сколько осталось до дедлайна scope (None = нет дедлайна)
        """
        if remaining is None:
            return (self.connect, self.read)
        # requests не принимает 0
        remaining = max(remaining, 0.001)
        connect = remaining if self.connect is None else min(self.connect, remaining)
        read = remaining if self.read is None else min(self.read, remaining)
        return (connect, read)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# POOL CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class PoolConfig:
    """
    Пулы соединений и рабочих потоков транспорта.

    Args:
        pool_connections: Количество connection pools для кеширования
        pool_maxsize: Максимум соединений в пуле
        pool_block: Блокировать при достижении лимита
        max_workers: Потоки, выполняющие сетевые вызовы

    Examples:
        >>> PoolConfig(pool_maxsize=20, max_workers=20)
    """
    pool_connections: int = 10
    pool_maxsize: int = 10
    pool_block: bool = False
    max_workers: int = 16

    def __post_init__(self):
        """Валидация."""
        if self.pool_connections <= 0:
            raise ValueError("pool_connections must be positive")
        if self.pool_maxsize <= 0:
            raise ValueError("pool_maxsize must be positive")
        if self.max_workers <= 0:
            raise ValueError("max_workers must be positive")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# SECURITY CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class SecurityConfig:
    """
    Конфигурация безопасности.

    Args:
        verify_ssl: Проверять SSL сертификаты
        allow_redirects: Следовать редиректам
        max_redirects: Максимум редиректов

    Examples:
        >>> SecurityConfig(verify_ssl=False)  # Для тестов
    """
    verify_ssl: bool = True
    allow_redirects: bool = True
    max_redirects: int = 10

    def __post_init__(self):
        """Валидация."""
        if self.max_redirects < 0:
            raise ValueError("max_redirects must be non-negative")

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TRANSPORT CONFIG
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

@dataclass(frozen=True)
class TransportConfig:
    """
    Полная конфигурация RequestsTransport.

    Args:
        timeout: Таймауты
        pool: Пулы
        security: Безопасность
        headers: Заголовки по умолчанию (только если запрос их не задал)
        proxies: Прокси {'http': ..., 'https': ...}

    Examples:
        >>> TransportConfig()
        >>> TransportConfig.create(timeout_read=5, verify_ssl=False)
    """
    timeout: TimeoutConfig = field(default_factory=TimeoutConfig)
    pool: PoolConfig = field(default_factory=PoolConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    headers: Mapping[str, str] = field(default_factory=dict)
    proxies: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        # read-only views, dataclass frozen не защищает содержимое dict
        object.__setattr__(self, 'headers', MappingProxyType(dict(self.headers)))
        object.__setattr__(self, 'proxies', MappingProxyType(dict(self.proxies)))

    @classmethod
    def create(
        cls,
        timeout_connect: Optional[float] = 10.0,
        timeout_read: Optional[float] = 60.0,
        pool_connections: int = 10,
        pool_maxsize: int = 10,
        pool_block: bool = False,
        max_workers: int = 16,
        verify_ssl: bool = True,
        allow_redirects: bool = True,
        max_redirects: int = 10,
        headers: Optional[Dict[str, str]] = None,
        proxies: Optional[Dict[str, str]] = None,
    ) -> "TransportConfig":
        """
        Создать конфиг из плоских параметров.

        Examples:
            >>> TransportConfig.create(timeout_connect=3, max_workers=4)
        """
        return cls(
            timeout=TimeoutConfig(connect=timeout_connect, read=timeout_read),
            pool=PoolConfig(
                pool_connections=pool_connections,
                pool_maxsize=pool_maxsize,
                pool_block=pool_block,
                max_workers=max_workers,
            ),
            security=SecurityConfig(
                verify_ssl=verify_ssl,
                allow_redirects=allow_redirects,
                max_redirects=max_redirects,
            ),
            headers=headers or {},
            proxies=proxies or {},
        )

    def to_dict(self) -> Dict[str, Any]:
        """Плоское представление (для логов и диагностики)."""
        return {
            "timeout_connect": self.timeout.connect,
            "timeout_read": self.timeout.read,
            "pool_connections": self.pool.pool_connections,
            "pool_maxsize": self.pool.pool_maxsize,
            "pool_block": self.pool.pool_block,
            "max_workers": self.pool.max_workers,
            "verify_ssl": self.security.verify_ssl,
            "allow_redirects": self.security.allow_redirects,
            "max_redirects": self.security.max_redirects,
            "headers": dict(self.headers),
            "proxies": dict(self.proxies),
        }
