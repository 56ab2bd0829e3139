# driver_locator/core/locations/__init__.py
"""
Домен геолокации водителей: модели, хранилище, поиск рядом.
"""

from driver_locator.core.locations.models import Driver, LocationUpdate, NearbyQuery, NearbyDriver
from driver_locator.core.locations.store import LocationStore, driver_key
from driver_locator.core.locations.nearby import ProximityQueryEngine

__all__ = [
    "Driver",
    "LocationUpdate",
    "NearbyQuery",
    "NearbyDriver",
    "LocationStore",
    "driver_key",
    "ProximityQueryEngine",
]
