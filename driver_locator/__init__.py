"""
Driver Locator — сервис live-геолокации водителей.

Хранит последнюю позицию каждого водителя в Redis (GEO-индекс, множество
активных, detail-запись с TTL) и отвечает на запросы «кто рядом».
"""

__version__ = "1.0.0"
