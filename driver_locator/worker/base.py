# driver_locator/worker/base.py
"""
Базовый класс для фоновых воркеров.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod

from driver_locator.common.logger import log_info, log_error
from driver_locator.common.constants import TypeMsg
from driver_locator.infra.redis_client import RedisClient, get_redis


class BaseWorker(ABC):
    """
    Фоновая задача под присмотром супервизора.

    Если _run() падает или завершается, пока воркер запущен, супервизор
    логирует это и перезапускает его с экспоненциальной задержкой.
    Задержка сбрасывается вызовом _mark_healthy().
    """

    def __init__(
        self,
        redis: RedisClient | None = None,
        min_delay: float = 1.0,
        max_delay: float = 30.0,
    ) -> None:
        """
        Args:
            redis: Redis клиент
            min_delay: Начальная задержка перезапуска, секунды
            max_delay: Потолок задержки перезапуска, секунды
        """
        self.redis = redis or get_redis()
        self._min_delay = min_delay
        self._max_delay = max(max_delay, min_delay)
        self._delay = min_delay
        self._running = False
        self._task: asyncio.Task | None = None
        self.restarts = 0

    @property
    @abstractmethod
    def name(self) -> str:
        """Имя воркера."""

    @abstractmethod
    async def _run(self) -> None:
        """Основной цикл воркера. Работает, пока self._running."""

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Запускает воркер."""
        if self._running:
            return

        self._running = True
        self._delay = self._min_delay
        self._task = asyncio.create_task(self._supervise(), name=self.name)
        await log_info(f"Воркер {self.name} запущен", type_msg=TypeMsg.INFO)

    async def stop(self) -> None:
        """Останавливает воркер."""
        if not self._running:
            return

        self._running = False

        if self._task is not None:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
            self._task = None

        await log_info(f"Воркер {self.name} остановлен", type_msg=TypeMsg.INFO)

    def _mark_healthy(self) -> None:
        """Сбрасывает задержку перезапуска после успешного старта цикла."""
        self._delay = self._min_delay

    def _next_delay(self) -> float:
        delay = self._delay
        self._delay = min(self._delay * 2, self._max_delay)
        return delay

    async def _supervise(self) -> None:
        while self._running:
            try:
                await self._run()
                if not self._running:
                    break
                await log_info(
                    f"Воркер {self.name}: цикл завершился, перезапуск",
                    type_msg=TypeMsg.WARNING,
                )
            except asyncio.CancelledError:
                raise
            except Exception as e:
                await log_error(f"Ошибка в воркере {self.name}: {e}", exc_info=True)

            self.restarts += 1
            delay = self._next_delay()
            await log_info(
                f"Воркер {self.name}: повтор через {delay:.1f} с",
                type_msg=TypeMsg.DEBUG,
            )
            await asyncio.sleep(delay)
