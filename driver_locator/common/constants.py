# driver_locator/common/constants.py
"""
Общие константы и перечисления.
"""

from enum import Enum


class TypeMsg(str, Enum):
    """Типы сообщений для логирования."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


# Ключи Redis (без namespace, его добавляет RedisClient)
GEO_SET_KEY = "driver_locations"  # GEO-индекс позиций водителей
DRIVER_PREFIX = "driver:"  # Префикс detail-записи водителя
ACTIVE_SET_KEY = "active_drivers"  # Множество активных водителей

# Канал keyevent-уведомлений об истечении ключей (подставляется номер БД)
EXPIRED_EVENTS_CHANNEL = "__keyevent@{db}__:expired"

# Значение notify-keyspace-events: keyevent-события + expired
KEYSPACE_EVENTS_EXPIRED = "Ex"
