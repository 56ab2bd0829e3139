# driver_locator/infra/__init__.py
"""
Инфраструктурный слой: подключение к Redis.
"""

from driver_locator.infra.redis_client import RedisClient, get_redis, init_redis, close_redis

__all__ = [
    "RedisClient",
    "get_redis",
    "init_redis",
    "close_redis",
]
