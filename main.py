#!/usr/bin/env python3
# main.py
"""
Точка входа Driver Locator.

Запуск:
    python main.py

Адрес Redis и порт берутся из config/config.json и переменных окружения
(REDIS_HOST, REDIS_PORT, PORT).
"""

from __future__ import annotations

import uvicorn

from driver_locator.config import settings
from driver_locator.common.logger import setup_logging


def main() -> None:
    """Запустить Location API вместе с фоновыми воркерами."""
    setup_logging()

    uvicorn.run(
        "driver_locator.services.location_api.app:app",
        host=settings.server.HOST,
        port=settings.server.PORT,
        reload=settings.system.DEBUG,
        log_level=settings.logging.LOG_LEVEL.lower(),
        timeout_keep_alive=settings.server.KEEP_ALIVE_TIMEOUT,
        timeout_graceful_shutdown=settings.server.GRACEFUL_SHUTDOWN_TIMEOUT,
    )


if __name__ == "__main__":
    main()
