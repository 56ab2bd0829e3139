# driver_locator/core/locations/nearby.py
"""
Поиск активных водителей рядом с точкой.
"""

from __future__ import annotations

from redis.exceptions import RedisError

from driver_locator.common.constants import GEO_SET_KEY, TypeMsg
from driver_locator.common.exceptions import CorruptRecordError, InvalidInputError, StoreUnavailableError
from driver_locator.common.logger import log_info, log_warning
from driver_locator.core.locations.models import NearbyDriver, NearbyQuery
from driver_locator.core.locations.store import LocationStore
from driver_locator.infra.redis_client import GeoMatch, RedisClient, get_redis


class ProximityQueryEngine:
    """
    GEO-индекс → фильтр по множеству активных → обогащение detail-записью.

    Порядок кандидатов из GEORADIUS (по возрастанию расстояния) сохраняется.
    Ошибки по отдельному кандидату запрос не роняют.
    """

    def __init__(
        self,
        store: LocationStore | None = None,
        redis: RedisClient | None = None,
        default_radius_km: float | None = None,
        default_limit: int | None = None,
    ) -> None:
        if default_radius_km is None or default_limit is None:
            from driver_locator.config import settings
            if default_radius_km is None:
                default_radius_km = settings.search.DEFAULT_RADIUS_KM
            if default_limit is None:
                default_limit = settings.search.DEFAULT_LIMIT

        self._redis = redis or get_redis()
        self._store = store or LocationStore(redis=self._redis)
        self._default_radius_km = default_radius_km
        self._default_limit = default_limit

    def resolve(self, query: NearbyQuery) -> tuple[float, int]:
        """Радиус и лимит с подстановкой значений по умолчанию вместо 0."""
        if query.radius < 0 or query.limit < 0:
            raise InvalidInputError("radius and limit must not be negative")
        radius = query.radius or self._default_radius_km
        limit = query.limit or self._default_limit
        return radius, limit

    async def query_nearby(self, query: NearbyQuery) -> list[NearbyDriver]:
        """
        Активные водители в радиусе, не больше limit, ближайшие первыми.

        Raises:
            InvalidInputError: отрицательный радиус или лимит
            StoreUnavailableError: не удался GEORADIUS
        """
        radius, limit = self.resolve(query)

        try:
            candidates = await self._redis.georadius(
                GEO_SET_KEY,
                longitude=query.longitude,
                latitude=query.latitude,
                radius=radius,
                unit="km",
                count=limit,
                sort="ASC",
            )
        except RedisError as e:
            raise StoreUnavailableError("georadius", e) from e

        drivers: list[NearbyDriver] = []
        for candidate in candidates:
            driver = await self._accept(candidate)
            if driver is not None:
                drivers.append(driver)

        await log_info(
            f"Поиск рядом ({query.latitude}, {query.longitude}) r={radius}км: "
            f"{len(candidates)} кандидатов, {len(drivers)} активных",
            type_msg=TypeMsg.DEBUG,
        )
        return drivers

    async def _accept(self, candidate: GeoMatch) -> NearbyDriver | None:
        """Проверка членства в active_drivers и обогащение кандидата."""
        driver_id, distance, (longitude, latitude) = candidate

        try:
            if not await self._store.is_active(driver_id):
                return None
        except StoreUnavailableError as e:
            await log_warning(f"Проверка активности {driver_id} не удалась, пропускаем: {e}")
            return None

        try:
            record = await self._store.read(driver_id)
        except (CorruptRecordError, StoreUnavailableError):
            record = None

        # Запись могла истечь между SISMEMBER и GET: доверяем множеству активных
        if record is None:
            return NearbyDriver(
                id=driver_id,
                distance=distance,
                latitude=latitude,
                longitude=longitude,
                is_active=True,
            )

        return NearbyDriver(
            id=record.id,
            distance=distance,
            latitude=latitude,
            longitude=longitude,
            is_active=record.is_active,
            last_ping=record.last_ping,
        )
