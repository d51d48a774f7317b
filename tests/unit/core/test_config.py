"""Тесты для конфигурации транспорта."""

import pytest

from src.httprpc.core.config import (
    TimeoutConfig,
    PoolConfig,
    SecurityConfig,
    TransportConfig,
)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TimeoutConfig
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def test_timeout_config_defaults():
    """Тест дефолтных значений."""
    config = TimeoutConfig()
    assert config.connect == 10
    assert config.read == 60

def test_timeout_config_unlimited():
    """Тест без ограничений."""
    config = TimeoutConfig(connect=None, read=None)
    assert config.clamp(None) == (None, None)

def test_timeout_config_validation_negative_connect():
    """Тест валидации - отрицательный connect."""
    with pytest.raises(ValueError, match="connect timeout must be positive"):
        TimeoutConfig(connect=-1)

def test_timeout_config_validation_zero_read():
    """Тест валидации - нулевой read."""
    with pytest.raises(ValueError, match="read timeout must be positive"):
        TimeoutConfig(read=0)

def test_timeout_config_immutable():
    """Тест immutability."""
    config = TimeoutConfig()
    with pytest.raises(Exception):  # frozen dataclass
        config.connect = 10

def test_timeout_clamp_no_deadline():
    """Тест clamp без дедлайна."""
    assert TimeoutConfig(connect=3, read=45).clamp(None) == (3, 45)

def test_timeout_clamp_to_remaining():
    """Тест что таймауты обрезаются до дедлайна."""
    assert TimeoutConfig(connect=3, read=45).clamp(2.0) == (2.0, 2.0)
    assert TimeoutConfig(connect=3, read=45).clamp(10.0) == (3, 10.0)
    assert TimeoutConfig(connect=None, read=None).clamp(5.0) == (5.0, 5.0)

def test_timeout_clamp_never_zero():
    """Тест что requests не получает 0."""
    connect, read = TimeoutConfig().clamp(0.0)
    assert connect > 0
    assert read > 0

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# PoolConfig / SecurityConfig
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def test_pool_config_defaults():
    """Тест дефолтных значений."""
    config = PoolConfig()
    assert config.pool_connections == 10
    assert config.pool_maxsize == 10
    assert config.pool_block is False
    assert config.max_workers == 16

@pytest.mark.parametrize("kwargs", [
    {"pool_connections": 0},
    {"pool_maxsize": 0},
    {"max_workers": 0},
])
def test_pool_config_validation(kwargs):
    """Тест валидации пулов."""
    with pytest.raises(ValueError):
        PoolConfig(**kwargs)

def test_security_config_defaults():
    """Тест дефолтных значений."""
    config = SecurityConfig()
    assert config.verify_ssl is True
    assert config.allow_redirects is True
    assert config.max_redirects == 10

def test_security_config_validation():
    """Тест валидации редиректов."""
    with pytest.raises(ValueError, match="max_redirects must be non-negative"):
        SecurityConfig(max_redirects=-1)

# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━
# TransportConfig
# ━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━━

def test_transport_config_defaults():
    """Тест дефолтной конфигурации."""
    config = TransportConfig()
    assert config.timeout == TimeoutConfig()
    assert config.pool == PoolConfig()
    assert config.security == SecurityConfig()
    assert dict(config.headers) == {}
    assert dict(config.proxies) == {}

def test_transport_config_create():
    """Тест create из плоских параметров."""
    config = TransportConfig.create(
        timeout_connect=3,
        timeout_read=20,
        max_workers=4,
        verify_ssl=False,
        headers={"User-Agent": "httprpc-test"},
        proxies={"https": "http://proxy:3128"},
    )
    assert config.timeout.connect == 3
    assert config.timeout.read == 20
    assert config.pool.max_workers == 4
    assert config.security.verify_ssl is False
    assert config.headers["User-Agent"] == "httprpc-test"
    assert config.proxies["https"] == "http://proxy:3128"

def test_transport_config_headers_read_only():
    """Тест что содержимое headers нельзя изменить."""
    source = {"X-A": "1"}
    config = TransportConfig.create(headers=source)

    source["X-B"] = "2"
    assert "X-B" not in config.headers
    with pytest.raises(TypeError):
        config.headers["X-C"] = "3"

def test_transport_config_to_dict():
    """Тест плоского представления."""
    data = TransportConfig.create(timeout_read=5).to_dict()
    assert data["timeout_read"] == 5
    assert data["max_workers"] == 16
    assert data["headers"] == {}
