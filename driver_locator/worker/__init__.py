# driver_locator/worker/__init__.py
"""
Фоновые воркеры: очистка истёкших водителей и сверка индексов.
"""

from driver_locator.worker.base import BaseWorker
from driver_locator.worker.expiration_reaper import ExpirationReaper
from driver_locator.worker.sweeper import StaleDriverSweeper
from driver_locator.worker.runner import start_workers, stop_workers

__all__ = [
    "BaseWorker",
    "ExpirationReaper",
    "StaleDriverSweeper",
    "start_workers",
    "stop_workers",
]
