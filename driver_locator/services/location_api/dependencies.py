# driver_locator/services/location_api/dependencies.py
"""
Зависимости для Location API.
Инициализация и управление ресурсами.
"""

from __future__ import annotations

from typing import Optional

from driver_locator.common.constants import TypeMsg
from driver_locator.common.logger import log_info
from driver_locator.core.locations import LocationStore, ProximityQueryEngine
from driver_locator.infra.redis_client import RedisClient, close_redis, init_redis
from driver_locator.worker import BaseWorker, start_workers, stop_workers


_redis: Optional[RedisClient] = None
_store: Optional[LocationStore] = None
_engine: Optional[ProximityQueryEngine] = None
_workers: list[BaseWorker] = []


async def init_dependencies(with_workers: bool = True) -> None:
    """Подключает Redis, создаёт сервисы и запускает фоновые воркеры."""
    global _redis, _store, _engine, _workers

    _redis = await init_redis()
    _store = LocationStore(redis=_redis)
    _engine = ProximityQueryEngine(store=_store, redis=_redis)

    if with_workers:
        _workers = await start_workers(_redis, _store)

    await log_info("Зависимости Location API инициализированы", type_msg=TypeMsg.INFO)


async def close_dependencies() -> None:
    """Останавливает воркеры и закрывает Redis."""
    global _redis, _store, _engine, _workers

    await stop_workers(_workers)
    _workers = []

    if _redis is not None:
        await close_redis()

    _redis = None
    _store = None
    _engine = None


def get_redis_client() -> RedisClient:
    if _redis is None:
        raise RuntimeError("Redis не инициализирован")
    return _redis


def get_location_store() -> LocationStore:
    if _store is None:
        raise RuntimeError("LocationStore не инициализирован")
    return _store


def get_query_engine() -> ProximityQueryEngine:
    if _engine is None:
        raise RuntimeError("ProximityQueryEngine не инициализирован")
    return _engine
