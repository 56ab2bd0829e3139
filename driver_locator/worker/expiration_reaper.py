# driver_locator/worker/expiration_reaper.py
"""
Очистка GEO-индекса и множества активных по истечению detail-записей.

Слушает канал __keyevent@<db>__:expired. Redis доставляет события
at-most-once и не хранит их: пока подписки нет, события теряются.
Пропуски закрывает периодическая сверка (StaleDriverSweeper).
"""

from __future__ import annotations

from typing import Any

from driver_locator.common.constants import DRIVER_PREFIX, EXPIRED_EVENTS_CHANNEL, TypeMsg
from driver_locator.common.exceptions import StoreUnavailableError
from driver_locator.common.logger import log_debug, log_error, log_info, log_warning
from driver_locator.core.locations.store import LocationStore
from driver_locator.infra.redis_client import RedisClient
from driver_locator.worker.base import BaseWorker


class ExpirationReaper(BaseWorker):
    """
    Подписчик на события истечения ключей.

    Для каждого истёкшего driver:<id> удаляет <id> из GEO-индекса и множества
    активных. Ошибка удаления логируется, повтора нет.
    """

    def __init__(
        self,
        redis: RedisClient | None = None,
        store: LocationStore | None = None,
        min_delay: float | None = None,
        max_delay: float | None = None,
        poll_timeout: float | None = None,
    ) -> None:
        if min_delay is None or max_delay is None or poll_timeout is None:
            from driver_locator.config import settings
            if min_delay is None:
                min_delay = settings.reaper.REAPER_RECONNECT_MIN_DELAY
            if max_delay is None:
                max_delay = settings.reaper.REAPER_RECONNECT_MAX_DELAY
            if poll_timeout is None:
                poll_timeout = settings.reaper.REAPER_POLL_TIMEOUT

        super().__init__(redis=redis, min_delay=min_delay, max_delay=max_delay)
        self._store = store or LocationStore(redis=self.redis)
        self._poll_timeout = poll_timeout

        self.processed = 0
        self.ignored = 0
        self.failed = 0

    @property
    def name(self) -> str:
        return "expiration_reaper"

    @property
    def channel(self) -> str:
        """Канал keyevent для текущей логической БД."""
        return EXPIRED_EVENTS_CHANNEL.format(db=self.redis.db)

    @property
    def detail_prefix(self) -> str:
        """Полный префикс ключей detail-записей (с namespace)."""
        return self.redis.make_key(DRIVER_PREFIX)

    async def _run(self) -> None:
        pubsub = self.redis.pubsub()
        try:
            await pubsub.psubscribe(self.channel)
            self._mark_healthy()
            await log_info(f"Подписка на {self.channel} оформлена", type_msg=TypeMsg.INFO)

            while self._running:
                try:
                    message = await pubsub.get_message(
                        ignore_subscribe_messages=True,
                        timeout=self._poll_timeout,
                    )
                except UnicodeDecodeError as e:
                    # Имя ключа не UTF-8: к водителям оно не относится
                    self.ignored += 1
                    await log_warning(f"Пропущено событие с не-UTF-8 ключом: {e}")
                    continue
                if message is None:
                    continue
                await self.handle_message(message)
        finally:
            await pubsub.aclose()

    async def handle_message(self, message: dict[str, Any]) -> None:
        """Разбирает сообщение Pub/Sub и передаёт ключ в handle_expired_key."""
        if message.get("type") not in ("message", "pmessage"):
            return

        key = message.get("data")
        if isinstance(key, bytes):
            key = key.decode("utf-8")
        if not isinstance(key, str):
            return

        await self.handle_expired_key(key)

    async def handle_expired_key(self, key: str) -> str | None:
        """
        Удаляет водителя, чья detail-запись истекла.

        Returns:
            id водителя или None, если ключ не относится к водителям
        """
        prefix = self.detail_prefix
        if not key.startswith(prefix):
            self.ignored += 1
            return None

        driver_id = key[len(prefix):]
        if not driver_id:
            self.ignored += 1
            return None

        try:
            await self._store.remove(driver_id)
        except StoreUnavailableError as e:
            self.failed += 1
            await log_error(
                f"Error cleaning up expired driver {driver_id}: {e}",
                extra={"driver_id": driver_id},
            )
            return driver_id

        self.processed += 1
        await log_debug(f"Истёкший водитель {driver_id} удалён из индекса")
        return driver_id

    def stats(self) -> dict[str, int]:
        """Счётчики обработанных событий."""
        return {
            "processed": self.processed,
            "ignored": self.ignored,
            "failed": self.failed,
            "restarts": self.restarts,
        }
