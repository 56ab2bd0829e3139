# tests/config/test_config_loader.py
"""
Тесты для модуля загрузки конфигурации.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from driver_locator.config.loader import (
    ReaperSettings,
    RedisSettings,
    SearchSettings,
    Settings,
    get_config_path,
    get_project_root,
    load_config_json,
)


class TestGetProjectRoot:
    """Тесты для функции get_project_root."""

    def test_returns_path_object(self) -> None:
        assert isinstance(get_project_root(), Path)

    def test_root_contains_package_directory(self) -> None:
        assert (get_project_root() / "driver_locator").exists()

    def test_root_contains_config_directory(self) -> None:
        assert (get_project_root() / "config").exists()


class TestGetConfigPath:
    """Тесты для функции get_config_path."""

    def test_default_path(self) -> None:
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("CONFIG_PATH", None)
            path = get_config_path()
        assert path == get_project_root() / "config" / "config.json"

    def test_env_override(self, tmp_path: Path) -> None:
        custom = tmp_path / "custom.json"
        with patch.dict(os.environ, {"CONFIG_PATH": str(custom)}):
            assert get_config_path() == custom


class TestLoadConfigJson:
    """Тесты для функции load_config_json."""

    def test_comments_filtered(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.json"
        config_file.write_text(
            json.dumps({"_comment_redis": "Redis", "REDIS_HOST": "redis"}),
            encoding="utf-8",
        )

        data = load_config_json(config_file)

        assert data == {"REDIS_HOST": "redis"}

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config_json(tmp_path / "missing.json")

    def test_project_config_loads(self) -> None:
        data = load_config_json(get_project_root() / "config" / "config.json")
        assert data["DRIVER_DETAIL_TTL"] == 60
        assert not any(key.startswith("_comment_") for key in data)


class TestSectionModels:
    """Тесты секций настроек."""

    def test_redis_url_without_password(self) -> None:
        with patch.dict(os.environ, {"REDIS_PASSWORD": ""}):
            redis = RedisSettings(REDIS_HOST="redis", REDIS_PORT=6380, REDIS_DB=1, REDIS_PASSWORD="")
        assert redis.url == "redis://redis:6380/1"

    def test_redis_url_with_password(self) -> None:
        redis = RedisSettings(REDIS_HOST="redis", REDIS_PASSWORD="secret")
        assert redis.url == "redis://:secret@redis:6379/0"

    def test_search_defaults(self) -> None:
        search = SearchSettings()
        assert search.DEFAULT_RADIUS_KM == 5.0
        assert search.DEFAULT_LIMIT == 10

    def test_search_defaults_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            SearchSettings(DEFAULT_LIMIT=0)

    def test_sweep_disabled_by_default(self) -> None:
        assert ReaperSettings().SWEEP_INTERVAL_SECONDS == 0


class TestSettingsFromDict:
    """Тесты сборки Settings из плоского словаря."""

    def test_defaults(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_dict({})

        assert settings.server.PORT == 8080
        assert settings.redis.REDIS_NAMESPACE == "locator"
        assert settings.redis_ttl.DRIVER_DETAIL_TTL == 60
        assert settings.reaper.ENABLE_KEYSPACE_NOTIFICATIONS is True

    def test_values_from_file(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            settings = Settings.from_dict({
                "REDIS_HOST": "redis.internal",
                "DRIVER_DETAIL_TTL": 120,
                "DEFAULT_LIMIT": 25,
                "SWEEP_INTERVAL_SECONDS": 30,
            })

        assert settings.redis.REDIS_HOST == "redis.internal"
        assert settings.redis_ttl.DRIVER_DETAIL_TTL == 120
        assert settings.search.DEFAULT_LIMIT == 25
        assert settings.reaper.SWEEP_INTERVAL_SECONDS == 30.0

    def test_env_overrides_file(self) -> None:
        env = {
            "REDIS_HOST": "10.0.0.5",
            "REDIS_PORT": "6390",
            "REDIS_DB": "3",
            "PORT": "9000",
            "SWEEP_INTERVAL_SECONDS": "15",
        }
        with patch.dict(os.environ, env, clear=True):
            settings = Settings.from_dict({"REDIS_HOST": "localhost", "PORT": 8080})

        assert settings.redis.REDIS_HOST == "10.0.0.5"
        assert settings.redis.REDIS_PORT == 6390
        assert settings.redis.REDIS_DB == 3
        assert settings.server.PORT == 9000
        assert settings.reaper.SWEEP_INTERVAL_SECONDS == 15.0
        assert settings.redis.url == "redis://10.0.0.5:6390/3"
