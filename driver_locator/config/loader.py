# driver_locator/config/loader.py
"""
Загрузчик конфигурации проекта.
Единственный источник истины — config/config.json.
Адреса и секреты переопределяются из переменных окружения.
"""

from __future__ import annotations

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# =============================================================================
# ОПРЕДЕЛЕНИЕ ПУТЕЙ
# =============================================================================

def get_project_root() -> Path:
    """Возвращает корневую директорию проекта."""
    return Path(__file__).parent.parent.parent


def get_config_path() -> Path:
    """Возвращает путь к файлу конфигурации (можно переопределить CONFIG_PATH)."""
    env_path = os.getenv("CONFIG_PATH")
    if env_path:
        return Path(env_path)
    return get_project_root() / "config" / "config.json"


def load_config_json(path: Path | None = None) -> dict[str, Any]:
    """Загружает config.json и возвращает словарь без ключей-комментариев."""
    config_path = path or get_config_path()
    if not config_path.exists():
        raise FileNotFoundError(f"Файл конфигурации не найден: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        data = json.load(f)

    return {k: v for k, v in data.items() if not k.startswith("_comment_")}


# =============================================================================
# PYDANTIC МОДЕЛИ КОНФИГУРАЦИИ
# =============================================================================

class SystemSettings(BaseModel):
    """Системные настройки."""
    PROJECT_NAME: str = "driver_locator"
    VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"


class ServerSettings(BaseModel):
    """Настройки HTTP-сервера."""
    HOST: str = "0.0.0.0"
    PORT: int = 8080
    # Таймауты соединения (uvicorn), секунды
    KEEP_ALIVE_TIMEOUT: int = 360
    GRACEFUL_SHUTDOWN_TIMEOUT: int = 30


class LoggingSettings(BaseModel):
    """Настройки логирования."""
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "colored"
    LOG_TO_FILE: bool = False
    LOG_FILE_PATH: str = "logs/app.log"
    LOG_MAX_BYTES: int = 10485760
    LOG_BACKUP_COUNT: int = 5


class RedisSettings(BaseModel):
    """Настройки Redis."""
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 0
    REDIS_PASSWORD: str = ""
    REDIS_NAMESPACE: str = "locator"
    REDIS_MAX_CONNECTIONS: int = 50

    @field_validator("REDIS_PASSWORD", mode="before")
    @classmethod
    def get_from_env(cls, v: str) -> str:
        """Получает пароль из переменных окружения."""
        if not v:
            return os.getenv("REDIS_PASSWORD", "")
        return v

    @property
    def url(self) -> str:
        """Возвращает URL для подключения к Redis."""
        auth = f":{self.REDIS_PASSWORD}@" if self.REDIS_PASSWORD else ""
        return f"redis://{auth}{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


class RedisTTLSettings(BaseModel):
    """TTL ключей, секунды."""
    DRIVER_DETAIL_TTL: int = Field(default=60, gt=0)


class SearchSettings(BaseModel):
    """Значения по умолчанию для поиска водителей рядом."""
    DEFAULT_RADIUS_KM: float = Field(default=5.0, gt=0)
    DEFAULT_LIMIT: int = Field(default=10, gt=0)


class ReaperSettings(BaseModel):
    """Настройки очистки истёкших водителей."""
    ENABLE_KEYSPACE_NOTIFICATIONS: bool = True
    REAPER_REQUIRE_NOTIFICATIONS: bool = True
    REAPER_RECONNECT_MIN_DELAY: float = Field(default=1.0, gt=0)
    REAPER_RECONNECT_MAX_DELAY: float = Field(default=30.0, gt=0)
    REAPER_POLL_TIMEOUT: float = Field(default=1.0, gt=0)
    # 0: периодическая сверка выключена
    SWEEP_INTERVAL_SECONDS: float = Field(default=0.0, ge=0)


# =============================================================================
# ГЛАВНЫЙ КЛАСС НАСТРОЕК
# =============================================================================

class Settings(BaseSettings):
    """
    Главный класс настроек приложения.
    Агрегирует все секции конфигурации.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    system: SystemSettings = Field(default_factory=SystemSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)
    redis_ttl: RedisTTLSettings = Field(default_factory=RedisTTLSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    reaper: ReaperSettings = Field(default_factory=ReaperSettings)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Settings":
        """
        Создаёт Settings из плоского словаря (формат config.json).
        Переменные окружения имеют приоритет над файлом.
        """
        return cls(
            system=SystemSettings(
                PROJECT_NAME=data.get("PROJECT_NAME", "driver_locator"),
                VERSION=data.get("VERSION", "1.0.0"),
                DEBUG=data.get("DEBUG", False),
                ENVIRONMENT=os.getenv("ENVIRONMENT", data.get("ENVIRONMENT", "development")),
            ),
            server=ServerSettings(
                HOST=os.getenv("HOST", data.get("HOST", "0.0.0.0")),
                PORT=int(os.getenv("PORT", data.get("PORT", 8080))),
                KEEP_ALIVE_TIMEOUT=data.get("KEEP_ALIVE_TIMEOUT", 360),
                GRACEFUL_SHUTDOWN_TIMEOUT=data.get("GRACEFUL_SHUTDOWN_TIMEOUT", 30),
            ),
            logging=LoggingSettings(
                LOG_LEVEL=os.getenv("LOG_LEVEL", data.get("LOG_LEVEL", "INFO")),
                LOG_FORMAT=data.get("LOG_FORMAT", "colored"),
                LOG_TO_FILE=data.get("LOG_TO_FILE", False),
                LOG_FILE_PATH=data.get("LOG_FILE_PATH", "logs/app.log"),
                LOG_MAX_BYTES=data.get("LOG_MAX_BYTES", 10485760),
                LOG_BACKUP_COUNT=data.get("LOG_BACKUP_COUNT", 5),
            ),
            redis=RedisSettings(
                REDIS_HOST=os.getenv("REDIS_HOST", data.get("REDIS_HOST", "localhost")),
                REDIS_PORT=int(os.getenv("REDIS_PORT", data.get("REDIS_PORT", 6379))),
                REDIS_DB=int(os.getenv("REDIS_DB", data.get("REDIS_DB", 0))),
                REDIS_PASSWORD=os.getenv("REDIS_PASSWORD", data.get("REDIS_PASSWORD", "")),
                REDIS_NAMESPACE=data.get("REDIS_NAMESPACE", "locator"),
                REDIS_MAX_CONNECTIONS=data.get("REDIS_MAX_CONNECTIONS", 50),
            ),
            redis_ttl=RedisTTLSettings(
                DRIVER_DETAIL_TTL=data.get("DRIVER_DETAIL_TTL", 60),
            ),
            search=SearchSettings(
                DEFAULT_RADIUS_KM=data.get("DEFAULT_RADIUS_KM", 5.0),
                DEFAULT_LIMIT=data.get("DEFAULT_LIMIT", 10),
            ),
            reaper=ReaperSettings(
                ENABLE_KEYSPACE_NOTIFICATIONS=data.get("ENABLE_KEYSPACE_NOTIFICATIONS", True),
                REAPER_REQUIRE_NOTIFICATIONS=data.get("REAPER_REQUIRE_NOTIFICATIONS", True),
                REAPER_RECONNECT_MIN_DELAY=data.get("REAPER_RECONNECT_MIN_DELAY", 1.0),
                REAPER_RECONNECT_MAX_DELAY=data.get("REAPER_RECONNECT_MAX_DELAY", 30.0),
                REAPER_POLL_TIMEOUT=data.get("REAPER_POLL_TIMEOUT", 1.0),
                SWEEP_INTERVAL_SECONDS=float(
                    os.getenv("SWEEP_INTERVAL_SECONDS", data.get("SWEEP_INTERVAL_SECONDS", 0.0))
                ),
            ),
        )

    @classmethod
    def from_config_json(cls) -> "Settings":
        """Создаёт Settings из config.json."""
        return cls.from_dict(load_config_json())


@lru_cache()
def get_settings() -> Settings:
    """
    Возвращает синглтон настроек приложения.
    Перед чтением конфига подгружает .env из корня проекта.
    """
    from dotenv import load_dotenv

    env_path = get_project_root() / ".env"
    if env_path.exists():
        load_dotenv(env_path)

    return Settings.from_config_json()


settings = get_settings()
