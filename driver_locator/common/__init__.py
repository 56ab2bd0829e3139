# driver_locator/common/__init__.py
"""
Общие утилиты, константы, исключения и логгер.
"""

from driver_locator.common.logger import get_logger, log_info, log_error, log_warning, log_debug
from driver_locator.common.constants import TypeMsg
from driver_locator.common.exceptions import (
    LocatorError,
    InvalidInputError,
    StoreUnavailableError,
    CorruptRecordError,
)

__all__ = [
    "get_logger",
    "log_info",
    "log_error",
    "log_warning",
    "log_debug",
    "TypeMsg",
    "LocatorError",
    "InvalidInputError",
    "StoreUnavailableError",
    "CorruptRecordError",
]
