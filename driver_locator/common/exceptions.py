# driver_locator/common/exceptions.py
"""
Исключения сервиса.

Иерархия:
- LocatorError — базовое
  - InvalidInputError — некорректный ввод, в Redis не ходим
  - StoreUnavailableError — Redis недоступен или операция упала (можно повторить)
  - CorruptRecordError — detail-запись есть, но не парсится
"""

from __future__ import annotations


class LocatorError(Exception):
    """Базовое исключение сервиса."""


class InvalidInputError(LocatorError):
    """Некорректные входные данные."""


class StoreUnavailableError(LocatorError):
    """Ошибка хранилища. Повтор остаётся на стороне клиента."""

    def __init__(self, operation: str, cause: Exception | None = None) -> None:
        self.operation = operation
        self.cause = cause
        message = f"Redis operation failed ({operation})"
        if cause is not None:
            message = f"{message}: {cause}"
        super().__init__(message)


class CorruptRecordError(LocatorError):
    """Detail-запись водителя не удалось разобрать."""

    def __init__(self, driver_id: str) -> None:
        self.driver_id = driver_id
        super().__init__(f"Failed to parse driver data for {driver_id}")
