# driver_locator/common/logger.py
"""
Модуль структурированного логирования.
Поддерживает JSON и цветной текстовый формат, запись в файл с ротацией.
"""

from __future__ import annotations

import inspect
import json
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from driver_locator.common.constants import TypeMsg


DEFAULT_LOGGER = "driver_locator"

# Общий файловый хендлер для всех логгеров
_GLOBAL_FILE_HANDLER: logging.Handler | None = None

_LOGGING_INITIALIZED: bool = False


# =============================================================================
# ФОРМАТТЕРЫ
# =============================================================================

class JsonFormatter(logging.Formatter):
    """Форматтер для JSON логов."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if hasattr(record, "extra_data"):
            log_data["extra"] = record.extra_data

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(logging.Formatter):
    """Цветной форматтер для консоли (разработка)."""

    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "CRITICAL": "\033[35m",   # Magenta
    }
    RESET = "\033[0m"
    GRAY = "\033[90m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.GRAY)
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")

        caller_info = ""
        extra_data = getattr(record, "extra_data", None)
        if extra_data and extra_data.get("caller_function"):
            caller_info = (
                f" {self.GRAY}[{extra_data.get('caller_module')}."
                f"{extra_data.get('caller_function')}() "
                f"{extra_data.get('caller_file')}:{extra_data.get('caller_line')}]{self.RESET}"
            )

        message = f"{timestamp} {color}[{record.levelname}]{self.RESET}{caller_info} {record.getMessage()}"

        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)

        return message


# =============================================================================
# ЛОГГЕР
# =============================================================================

_loggers: dict[str, logging.Logger] = {}


def setup_logging() -> None:
    """
    Инициализирует систему логирования.
    Идемпотентна: повторные вызовы ничего не делают.
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED:
        return

    _LOGGING_INITIALIZED = True

    get_logger(DEFAULT_LOGGER)

    # Шумные сторонние библиотеки
    logging.getLogger("redis").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def _read_logging_settings() -> dict[str, Any]:
    """Читает настройки логирования, с безопасными значениями по умолчанию."""
    defaults: dict[str, Any] = {
        "level": "DEBUG",
        "format": "colored",
        "to_file": False,
        "file_path": "logs/app.log",
        "max_bytes": 10485760,
        "backup_count": 5,
    }
    try:
        # Ленивый импорт: конфиг сам может логировать
        from driver_locator.config import settings
        section = settings.logging
    except Exception:
        return defaults

    values = {
        "level": section.LOG_LEVEL,
        "format": section.LOG_FORMAT,
        "to_file": section.LOG_TO_FILE,
        "file_path": section.LOG_FILE_PATH,
        "max_bytes": section.LOG_MAX_BYTES,
        "backup_count": section.LOG_BACKUP_COUNT,
    }
    # Защита от MagicMock в тестах
    for key, default in defaults.items():
        if not isinstance(values[key], type(default)):
            values[key] = default
    return values


def get_logger(name: str = DEFAULT_LOGGER) -> logging.Logger:
    """
    Возвращает настроенный логгер.
    Кэширует логгеры, чтобы не дублировать хендлеры.

    Args:
        name: Имя логгера

    Returns:
        Настроенный логгер
    """
    if name in _loggers:
        return _loggers[name]

    config = _read_logging_settings()

    logger = logging.getLogger(name)
    logger.setLevel(getattr(logging, config["level"].upper(), logging.DEBUG))

    if logger.handlers:
        return logger

    formatter: logging.Formatter = JsonFormatter() if config["format"] == "json" else ColoredFormatter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if config["to_file"]:
        global _GLOBAL_FILE_HANDLER
        if _GLOBAL_FILE_HANDLER is None:
            log_path = Path(config["file_path"])
            log_path.parent.mkdir(parents=True, exist_ok=True)
            _GLOBAL_FILE_HANDLER = RotatingFileHandler(
                filename=str(log_path),
                maxBytes=config["max_bytes"],
                backupCount=config["backup_count"],
                encoding="utf-8",
            )
            _GLOBAL_FILE_HANDLER.setFormatter(formatter)
        logger.addHandler(_GLOBAL_FILE_HANDLER)

    logger.propagate = False

    _loggers[name] = logger
    return logger


# =============================================================================
# ВСПОМОГАТЕЛЬНЫЕ ФУНКЦИИ ЛОГИРОВАНИЯ
# =============================================================================

def _get_caller_info() -> dict[str, Any]:
    """
    Информация о коде, вызвавшем функцию логирования.

    Стек: [0] _get_caller_info, [1] log_*, [2] вызывающий код.
    """
    frame = inspect.currentframe()
    caller_frame = None
    try:
        if frame is None:
            return {}

        caller_frame = frame.f_back
        if caller_frame:
            caller_frame = caller_frame.f_back
        if caller_frame is None:
            return {}

        frame_info = inspect.getframeinfo(caller_frame)
        caller_module = inspect.getmodule(caller_frame)

        return {
            "caller_function": caller_frame.f_code.co_name,
            "caller_module": caller_module.__name__ if caller_module else "unknown",
            "caller_file": Path(frame_info.filename).name if frame_info.filename else "unknown",
            "caller_line": frame_info.lineno,
        }
    except Exception:
        return {}
    finally:
        # Разрываем ссылки на фреймы
        del frame
        del caller_frame


def _emit(
    level: TypeMsg,
    message: str,
    logger_name: str,
    extra: dict[str, Any] | None,
    caller_info: dict[str, Any],
    exc_info: bool = False,
) -> None:
    logger = get_logger(logger_name)
    record_extra = {"extra_data": {**caller_info, **(extra or {})}}

    match level:
        case TypeMsg.DEBUG:
            logger.debug(message, extra=record_extra, exc_info=exc_info)
        case TypeMsg.WARNING:
            logger.warning(message, extra=record_extra, exc_info=exc_info)
        case TypeMsg.ERROR:
            logger.error(message, extra=record_extra, exc_info=exc_info)
        case TypeMsg.CRITICAL:
            logger.critical(message, extra=record_extra, exc_info=exc_info)
        case _:
            logger.info(message, extra=record_extra, exc_info=exc_info)


async def log_info(
    message: str,
    *,
    type_msg: TypeMsg = TypeMsg.INFO,
    logger_name: str = DEFAULT_LOGGER,
    extra: dict[str, Any] | None = None,
) -> None:
    """
    Асинхронное логирование с уровнем из type_msg.

    Args:
        message: Сообщение
        type_msg: Уровень сообщения
        logger_name: Имя логгера
        extra: Дополнительные данные
    """
    _emit(type_msg, message, logger_name, extra, _get_caller_info())


async def log_debug(
    message: str,
    logger_name: str = DEFAULT_LOGGER,
    extra: dict[str, Any] | None = None,
) -> None:
    """Логирование DEBUG уровня."""
    _emit(TypeMsg.DEBUG, message, logger_name, extra, _get_caller_info())


async def log_warning(
    message: str,
    logger_name: str = DEFAULT_LOGGER,
    extra: dict[str, Any] | None = None,
) -> None:
    """Логирование WARNING уровня."""
    _emit(TypeMsg.WARNING, message, logger_name, extra, _get_caller_info())


async def log_error(
    message: str,
    logger_name: str = DEFAULT_LOGGER,
    extra: dict[str, Any] | None = None,
    exc_info: bool = False,
) -> None:
    """
    Логирование ERROR уровня.

    Args:
        message: Сообщение об ошибке
        logger_name: Имя логгера
        extra: Дополнительные данные
        exc_info: Включать ли трейсбек текущего исключения
    """
    _emit(TypeMsg.ERROR, message, logger_name, extra, _get_caller_info(), exc_info=exc_info)
