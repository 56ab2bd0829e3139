# driver_locator/core/locations/store.py
"""
Хранилище геолокации водителей.

Для каждого водителя в Redis живут три независимых представления:
- detail-запись driver:<id> — JSON Driver с TTL, источник истины о «живости»;
- участник <id> в GEO-индексе driver_locations — без TTL;
- участник <id> в множестве active_drivers — без TTL.

Запись идёт одним пайплайном без транзакции: при обрыве посреди пакета
представления могут разойтись. Сходимость обеспечивают следующий пинг
водителя и ExpirationReaper.
"""

from __future__ import annotations

from pydantic import ValidationError
from redis.exceptions import RedisError

from driver_locator.common.constants import ACTIVE_SET_KEY, DRIVER_PREFIX, GEO_SET_KEY
from driver_locator.common.exceptions import CorruptRecordError, InvalidInputError, StoreUnavailableError
from driver_locator.common.logger import log_debug, log_error
from driver_locator.core.locations.models import Driver, LocationUpdate, utcnow
from driver_locator.infra.redis_client import RedisClient, get_redis


def driver_key(driver_id: str) -> str:
    """Ключ detail-записи водителя (без namespace)."""
    return f"{DRIVER_PREFIX}{driver_id}"


class LocationStore:
    """
    Запись и чтение состояния водителей.

    Реализует:
    - upsert: detail-запись + GEO-индекс + множество активных одним пакетом
    - read: чтение detail-записи
    - remove: удаление из GEO-индекса и множества активных
    """

    def __init__(
        self,
        redis: RedisClient | None = None,
        detail_ttl: int | None = None,
    ) -> None:
        """
        Args:
            redis: Клиент Redis (глобальный, если None)
            detail_ttl: TTL detail-записи в секундах (из конфига, если None)
        """
        if detail_ttl is None:
            from driver_locator.config import settings
            detail_ttl = settings.redis_ttl.DRIVER_DETAIL_TTL

        self._redis = redis or get_redis()
        self._detail_ttl = detail_ttl

    @property
    def detail_ttl(self) -> int:
        return self._detail_ttl

    async def upsert(self, update: LocationUpdate) -> Driver:
        """
        Сохраняет пинг водителя.

        1. SET driver:<id> с TTL (перезаписывает и сбрасывает таймер)
        2. GEOADD в общий индекс
        3. SADD/SREM в множестве активных

        Raises:
            InvalidInputError: пустой driver_id
            StoreUnavailableError: пайплайн не выполнился (повтора нет)
        """
        if not update.driver_id or not update.driver_id.strip():
            raise InvalidInputError("driverId must not be empty")

        driver = Driver(
            id=update.driver_id,
            latitude=update.latitude,
            longitude=update.longitude,
            is_active=update.is_active,
            last_ping=utcnow(),
        )

        pipe = self._redis.pipeline()
        pipe.set(self._redis.make_key(driver_key(driver.id)), driver.to_json(), ex=self._detail_ttl)
        pipe.geoadd(self._redis.make_key(GEO_SET_KEY), (driver.longitude, driver.latitude, driver.id))
        if driver.is_active:
            pipe.sadd(self._redis.make_key(ACTIVE_SET_KEY), driver.id)
        else:
            pipe.srem(self._redis.make_key(ACTIVE_SET_KEY), driver.id)

        try:
            await pipe.execute()
        except RedisError as e:
            await log_error(
                f"Не удалось сохранить локацию водителя {driver.id}: {e}",
                extra={"driver_id": driver.id},
            )
            raise StoreUnavailableError("upsert", e) from e

        await log_debug(f"Локация водителя {driver.id} обновлена (active={driver.is_active})")
        return driver

    async def read(self, driver_id: str) -> Driver | None:
        """
        Читает detail-запись. GEO-индекс и множество не проверяются.

        Returns:
            Driver или None, если запись истекла или её не было

        Raises:
            CorruptRecordError: запись есть, но не парсится
            StoreUnavailableError: ошибка Redis
        """
        if not driver_id:
            return None

        try:
            data = await self._redis.get(driver_key(driver_id))
        except RedisError as e:
            raise StoreUnavailableError("read", e) from e
        except UnicodeDecodeError as e:
            # Значение не UTF-8: redis-py падает ещё при декодировании ответа
            await log_error(f"Повреждённая detail-запись водителя {driver_id}: {e}")
            raise CorruptRecordError(driver_id) from e

        if data is None:
            return None

        try:
            return Driver.model_validate_json(data)
        except ValidationError as e:
            await log_error(f"Повреждённая detail-запись водителя {driver_id}: {e}")
            raise CorruptRecordError(driver_id) from e

    async def remove(self, driver_id: str) -> None:
        """
        Убирает водителя из GEO-индекса и множества активных одним пакетом.
        Detail-запись не трогается.

        Raises:
            StoreUnavailableError: пайплайн не выполнился
        """
        pipe = self._redis.pipeline()
        pipe.zrem(self._redis.make_key(GEO_SET_KEY), driver_id)
        pipe.srem(self._redis.make_key(ACTIVE_SET_KEY), driver_id)
        try:
            await pipe.execute()
        except RedisError as e:
            raise StoreUnavailableError("remove", e) from e

    async def is_active(self, driver_id: str) -> bool:
        """Входит ли водитель в множество активных."""
        try:
            return await self._redis.sismember(ACTIVE_SET_KEY, driver_id)
        except RedisError as e:
            raise StoreUnavailableError("sismember", e) from e

    async def indexed_ids(self) -> set[str]:
        """Все id из GEO-индекса и множества активных."""
        try:
            geo_ids = await self._redis.geomembers(GEO_SET_KEY)
            active_ids = await self._redis.smembers(ACTIVE_SET_KEY)
        except RedisError as e:
            raise StoreUnavailableError("scan", e) from e
        return set(geo_ids) | set(active_ids)

    async def live_ids(self, driver_ids: list[str]) -> set[str]:
        """Из переданных id — те, у которых есть detail-запись."""
        if not driver_ids:
            return set()
        pipe = self._redis.pipeline()
        for driver_id in driver_ids:
            pipe.exists(self._redis.make_key(driver_key(driver_id)))
        try:
            results = await pipe.execute()
        except RedisError as e:
            raise StoreUnavailableError("exists", e) from e
        return {driver_id for driver_id, found in zip(driver_ids, results) if found}
