# driver_locator/core/__init__.py
"""
Доменный слой (Core Domain).
"""

from driver_locator.core.locations import LocationStore, ProximityQueryEngine

__all__ = [
    "LocationStore",
    "ProximityQueryEngine",
]
