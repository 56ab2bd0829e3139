# driver_locator/worker/sweeper.py
"""
Периодическая сверка: удаляет из GEO-индекса и множества активных водителей,
у которых уже нет detail-записи (например, событие expired было пропущено).
"""

from __future__ import annotations

import asyncio

from driver_locator.common.constants import TypeMsg
from driver_locator.common.exceptions import StoreUnavailableError
from driver_locator.common.logger import log_error, log_info
from driver_locator.core.locations.store import LocationStore
from driver_locator.infra.redis_client import RedisClient
from driver_locator.worker.base import BaseWorker


class StaleDriverSweeper(BaseWorker):
    """Раз в interval секунд сверяет индексы с detail-записями."""

    def __init__(
        self,
        interval: float,
        redis: RedisClient | None = None,
        store: LocationStore | None = None,
    ) -> None:
        if interval <= 0:
            raise ValueError("interval must be positive")
        super().__init__(redis=redis, min_delay=interval, max_delay=interval * 4)
        self._interval = interval
        self._store = store or LocationStore(redis=self.redis)
        self.removed_total = 0

    @property
    def name(self) -> str:
        return "stale_driver_sweeper"

    async def _run(self) -> None:
        while self._running:
            await asyncio.sleep(self._interval)
            try:
                await self.sweep_once()
                self._mark_healthy()
            except StoreUnavailableError as e:
                await log_error(f"Сверка индексов не удалась: {e}")

    async def sweep_once(self) -> list[str]:
        """
        Один проход сверки.

        Водитель, приславший пинг между проверкой и удалением, может потерять
        запись в индексе до своего следующего пинга.

        Returns:
            Отсортированный список удалённых id
        """
        indexed = sorted(await self._store.indexed_ids())
        if not indexed:
            return []

        live = await self._store.live_ids(indexed)
        stale = [driver_id for driver_id in indexed if driver_id not in live]

        removed: list[str] = []
        for driver_id in stale:
            try:
                await self._store.remove(driver_id)
            except StoreUnavailableError as e:
                await log_error(f"Не удалось удалить устаревшего водителя {driver_id}: {e}")
                continue
            removed.append(driver_id)

        self.removed_total += len(removed)
        if removed:
            await log_info(
                f"Сверка: удалено {len(removed)} устаревших водителей из {len(indexed)}",
                type_msg=TypeMsg.INFO,
            )
        return removed
