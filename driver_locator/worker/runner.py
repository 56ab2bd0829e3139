# driver_locator/worker/runner.py
"""
Запуск и остановка фоновых воркеров сервиса.
"""

from __future__ import annotations

from driver_locator.common.constants import KEYSPACE_EVENTS_EXPIRED, TypeMsg
from driver_locator.common.logger import log_info, log_warning
from driver_locator.config.loader import ReaperSettings
from driver_locator.core.locations.store import LocationStore
from driver_locator.infra.redis_client import RedisClient
from driver_locator.worker.base import BaseWorker
from driver_locator.worker.expiration_reaper import ExpirationReaper
from driver_locator.worker.sweeper import StaleDriverSweeper


async def start_workers(
    redis: RedisClient,
    store: LocationStore,
    config: ReaperSettings | None = None,
) -> list[BaseWorker]:
    """
    Включает keyspace-уведомления и запускает ExpirationReaper
    (и StaleDriverSweeper, если задан интервал сверки).

    Returns:
        Запущенные воркеры
    """
    if config is None:
        from driver_locator.config import settings
        config = settings.reaper

    workers: list[BaseWorker] = []

    notifications_ok = True
    if config.ENABLE_KEYSPACE_NOTIFICATIONS:
        notifications_ok = await redis.enable_keyspace_notifications(KEYSPACE_EVENTS_EXPIRED)

    if notifications_ok or not config.REAPER_REQUIRE_NOTIFICATIONS:
        workers.append(
            ExpirationReaper(
                redis=redis,
                store=store,
                min_delay=config.REAPER_RECONNECT_MIN_DELAY,
                max_delay=config.REAPER_RECONNECT_MAX_DELAY,
                poll_timeout=config.REAPER_POLL_TIMEOUT,
            )
        )
    else:
        await log_warning("Automatic cleanup of expired drivers will not work")

    if config.SWEEP_INTERVAL_SECONDS > 0:
        workers.append(
            StaleDriverSweeper(
                interval=config.SWEEP_INTERVAL_SECONDS,
                redis=redis,
                store=store,
            )
        )

    for worker in workers:
        await worker.start()

    await log_info(f"Запущено {len(workers)} воркеров", type_msg=TypeMsg.INFO)
    return workers


async def stop_workers(workers: list[BaseWorker]) -> None:
    """Останавливает воркеры в обратном порядке."""
    for worker in reversed(workers):
        await worker.stop()
