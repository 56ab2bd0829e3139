# driver_locator/services/location_api/__init__.py
"""
Location API — HTTP-обёртка над LocationStore и ProximityQueryEngine.

Обеспечивает:
- Приём пингов водителей
- Чтение последнего состояния водителя
- Поиск активных водителей рядом
- Health check Redis
"""
