# driver_locator/infra/redis_client.py
"""
Клиент Redis для detail-записей, GEO-индекса, множеств и Pub/Sub.
Все ключи получают префикс namespace.
"""

from __future__ import annotations

import redis.asyncio as redis
from redis.asyncio.client import Pipeline, PubSub

from driver_locator.common.logger import log_error, log_info, log_warning
from driver_locator.common.constants import TypeMsg


# (member, distance_km, (longitude, latitude))
GeoMatch = tuple[str, float, tuple[float, float]]


class RedisClient:
    """
    Асинхронный клиент Redis (Singleton).
    Поддерживает:
    - Чтение detail-записей (GET)
    - Geo-операции (GEOADD, GEORADIUS)
    - Set операции
    - Пайплайны без транзакции
    - Pub/Sub и keyspace-уведомления
    """

    _instance: RedisClient | None = None
    _client: redis.Redis | None = None

    def __new__(cls) -> RedisClient:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        """Инициализация (выполняется один раз благодаря Singleton)."""
        if hasattr(self, "_initialized"):
            return
        self._initialized = True
        self._client = None
        self._namespace = "locator"
        self._db = 0

    @property
    def client(self) -> redis.Redis:
        """Возвращает клиент Redis."""
        if self._client is None:
            raise RuntimeError("Redis клиент не инициализирован. Вызовите connect() сначала.")
        return self._client

    @property
    def db(self) -> int:
        """Номер логической БД (нужен для канала keyevent)."""
        return self._db

    def make_key(self, key: str) -> str:
        """Добавляет namespace к ключу."""
        if not self._namespace:
            return key
        return f"{self._namespace}:{key}"

    async def connect(
        self,
        url: str | None = None,
        max_connections: int = 50,
        namespace: str | None = None,
        db: int | None = None,
    ) -> None:
        """
        Подключается к Redis.

        Args:
            url: URL Redis (если None, берётся из конфига)
            max_connections: Максимальное количество соединений
            namespace: Префикс ключей (если None, берётся из конфига)
            db: Номер БД (если None, берётся из конфига)
        """
        if self._client is not None:
            return

        if url is None or namespace is None or db is None:
            from driver_locator.config import settings
            if url is None:
                url = settings.redis.url
                max_connections = settings.redis.REDIS_MAX_CONNECTIONS
            if namespace is None:
                namespace = settings.redis.REDIS_NAMESPACE
            if db is None:
                db = settings.redis.REDIS_DB

        self._namespace = namespace
        self._db = db

        await log_info("Подключение к Redis...", type_msg=TypeMsg.INFO)

        self._client = redis.from_url(
            url,
            max_connections=max_connections,
            decode_responses=True,
            # Битые байты заменяются на U+FFFD, а не роняют чтение ответа
            encoding_errors="replace",
        )

        try:
            await self._client.ping()
        except Exception:
            await self._client.aclose()
            self._client = None
            raise

        await log_info("Подключение к Redis установлено", type_msg=TypeMsg.INFO)

    async def disconnect(self) -> None:
        """Закрывает соединение с Redis."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
            await log_info("Соединение с Redis закрыто", type_msg=TypeMsg.INFO)

    # =========================================================================
    # БАЗОВЫЕ ОПЕРАЦИИ
    # =========================================================================

    async def get(self, key: str) -> str | None:
        """Получает значение по ключу."""
        return await self.client.get(self.make_key(key))

    def pipeline(self) -> Pipeline:
        """
        Пайплайн без MULTI/EXEC.
        Команды уходят одним пакетом, но не атомарно.
        """
        return self.client.pipeline(transaction=False)

    # =========================================================================
    # GEO ОПЕРАЦИИ
    # =========================================================================

    async def georadius(
        self,
        key: str,
        longitude: float,
        latitude: float,
        radius: float,
        unit: str = "km",
        count: int | None = None,
        sort: str = "ASC",
    ) -> list[GeoMatch]:
        """
        Ищет участников в радиусе от точки (граница включительно).

        Args:
            key: Ключ GEO-индекса
            longitude: Долгота центра
            latitude: Широта центра
            radius: Радиус поиска
            unit: Единица измерения (km, m, mi, ft)
            count: Максимальное количество результатов
            sort: Сортировка по расстоянию (ASC, DESC)

        Returns:
            Список (member, distance, (longitude, latitude))
        """
        results = await self.client.georadius(
            self.make_key(key),
            longitude,
            latitude,
            radius,
            unit=unit,
            withdist=True,
            withcoord=True,
            count=count,
            sort=sort,
        )
        return [
            (member, float(dist), (float(coord[0]), float(coord[1])))
            for member, dist, coord in results
        ]

    async def geomembers(self, key: str) -> list[str]:
        """Все участники GEO-индекса (GEO хранится как sorted set)."""
        return await self.client.zrange(self.make_key(key), 0, -1)

    # =========================================================================
    # SET ОПЕРАЦИИ
    # =========================================================================

    async def sismember(self, key: str, member: str) -> bool:
        """Проверяет принадлежность к множеству."""
        return bool(await self.client.sismember(self.make_key(key), member))

    async def smembers(self, key: str) -> set[str]:
        """Возвращает все элементы множества."""
        return await self.client.smembers(self.make_key(key))

    # =========================================================================
    # PUB/SUB И KEYSPACE-УВЕДОМЛЕНИЯ
    # =========================================================================

    def pubsub(self) -> PubSub:
        """Новый объект Pub/Sub на отдельном соединении."""
        return self.client.pubsub()

    async def enable_keyspace_notifications(self, events: str) -> bool:
        """
        Включает keyspace-уведомления (CONFIG SET notify-keyspace-events).

        Managed Redis часто запрещает CONFIG, поэтому ошибка не пробрасывается.

        Returns:
            True если настройка применена
        """
        try:
            await self.client.config_set("notify-keyspace-events", events)
        except Exception as e:
            await log_warning(f"Не удалось включить keyspace-уведомления: {e}")
            return False
        await log_info(
            f"Keyspace-уведомления включены (notify-keyspace-events={events})",
            type_msg=TypeMsg.INFO,
        )
        return True

    # =========================================================================
    # HEALTH CHECK
    # =========================================================================

    async def health_check(self) -> bool:
        """
        Проверяет здоровье подключения к Redis.

        Returns:
            True если подключение работает
        """
        try:
            return bool(await self.client.ping())
        except Exception as e:
            await log_error(f"Health check Redis failed: {e}")
            return False


def get_redis() -> RedisClient:
    """Возвращает глобальный экземпляр RedisClient."""
    return RedisClient()


async def init_redis() -> RedisClient:
    """
    Инициализирует подключение к Redis.
    Использует настройки из конфигурации.
    """
    from driver_locator.config import settings

    redis_client = get_redis()
    await redis_client.connect(
        url=settings.redis.url,
        max_connections=settings.redis.REDIS_MAX_CONNECTIONS,
        namespace=settings.redis.REDIS_NAMESPACE,
        db=settings.redis.REDIS_DB,
    )
    await log_info(
        f"Redis подключён: {settings.redis.REDIS_HOST}:{settings.redis.REDIS_PORT}/{settings.redis.REDIS_DB}",
        type_msg=TypeMsg.INFO,
    )
    return redis_client


async def close_redis() -> None:
    """Закрывает подключение к Redis."""
    await get_redis().disconnect()
