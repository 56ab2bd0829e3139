# tests/conftest.py
"""
Общие фикстуры и настройки для тестов.
"""

from __future__ import annotations

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

# Переменные окружения до импорта модулей проекта
os.environ.setdefault("REDIS_PASSWORD", "")


TEST_NAMESPACE = "locator_test"


# =============================================================================
# ФИКСТУРЫ ИНФРАСТРУКТУРЫ (МОКИ)
# =============================================================================

@pytest.fixture
def mock_pipeline() -> MagicMock:
    """Мок пайплайна Redis: команды синхронные, execute — асинхронный."""
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[True, 1, 1])
    return pipe


@pytest.fixture
def mock_redis(mock_pipeline: MagicMock) -> MagicMock:
    """Мок RedisClient с настоящим формированием ключей."""
    redis = MagicMock()
    redis.db = 0
    redis.make_key = MagicMock(side_effect=lambda key: f"{TEST_NAMESPACE}:{key}")
    redis.pipeline = MagicMock(return_value=mock_pipeline)
    redis.get = AsyncMock(return_value=None)
    redis.exists = AsyncMock(return_value=False)
    redis.georadius = AsyncMock(return_value=[])
    redis.geomembers = AsyncMock(return_value=[])
    redis.sismember = AsyncMock(return_value=False)
    redis.smembers = AsyncMock(return_value=set())
    redis.health_check = AsyncMock(return_value=True)
    redis.enable_keyspace_notifications = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def mock_store() -> AsyncMock:
    """Мок LocationStore."""
    store = AsyncMock()
    store.read = AsyncMock(return_value=None)
    store.remove = AsyncMock(return_value=None)
    store.is_active = AsyncMock(return_value=False)
    store.indexed_ids = AsyncMock(return_value=set())
    store.live_ids = AsyncMock(return_value=set())
    return store


# =============================================================================
# ФИКСТУРЫ МОДЕЛЕЙ
# =============================================================================

@pytest.fixture
def sample_update_data() -> dict[str, Any]:
    """Пинг водителя в формате клиента."""
    return {
        "driverId": "d1",
        "latitude": 37.77,
        "longitude": -122.41,
        "isActive": True,
    }


@pytest.fixture
def sample_driver_json() -> str:
    """Detail-запись водителя d1."""
    return (
        '{"id": "d1", "isActive": true, "latitude": 37.77, '
        '"longitude": -122.41, "lastPing": "2026-10-18T12:00:00Z"}'
    )
