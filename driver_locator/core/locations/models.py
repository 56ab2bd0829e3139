# driver_locator/core/locations/models.py
"""
Модели данных геолокации водителей.

Имена полей на проводе (JSON) — camelCase, как у мобильных клиентов:
id, isActive, latitude, longitude, lastPing, driverId.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def utcnow() -> datetime:
    """Текущее время в UTC (aware)."""
    return datetime.now(timezone.utc)


class Driver(BaseModel):
    """Снимок состояния водителя — содержимое detail-записи."""

    id: str = Field(..., min_length=1, description="Идентификатор водителя")
    is_active: bool = Field(False, alias="isActive", description="Доступен ли водитель")
    latitude: float = Field(..., description="Широта последнего пинга")
    longitude: float = Field(..., description="Долгота последнего пинга")
    last_ping: datetime = Field(default_factory=utcnow, alias="lastPing", description="Время последнего пинга")

    class Config:
        populate_by_name = True

    def to_json(self) -> str:
        """Сериализация для detail-записи."""
        return self.model_dump_json(by_alias=True)


class LocationUpdate(BaseModel):
    """Пинг водителя. Координаты не валидируются по диапазону."""

    driver_id: str = Field(..., alias="driverId", description="Идентификатор водителя")
    latitude: float = Field(..., description="Широта")
    longitude: float = Field(..., description="Долгота")
    is_active: bool = Field(False, alias="isActive", description="Доступен ли водитель")

    class Config:
        populate_by_name = True

    @field_validator("driver_id")
    @classmethod
    def driver_id_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("driverId must not be empty")
        return v


class NearbyQuery(BaseModel):
    """
    Запрос поиска водителей рядом.

    radius и limit равные 0 означают «по умолчанию» (5 км и 10 водителей).
    """

    latitude: float = Field(..., description="Широта центра")
    longitude: float = Field(..., description="Долгота центра")
    radius: float = Field(0.0, ge=0, description="Радиус, км")
    limit: int = Field(0, ge=0, description="Максимум водителей в ответе")


class NearbyDriver(BaseModel):
    """
    Водитель в ответе поиска.

    Координаты и distance всегда из GEO-индекса. last_ping отсутствует,
    если detail-запись не удалось прочитать.
    """

    id: str
    distance: float = Field(..., description="Расстояние до центра, км")
    latitude: float
    longitude: float
    is_active: bool = Field(True, alias="isActive")
    last_ping: Optional[datetime] = Field(None, alias="lastPing")

    class Config:
        populate_by_name = True
