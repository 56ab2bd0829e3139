# driver_locator/services/__init__.py
"""
HTTP-сервисы приложения.

Сервисы:
- location_api: приём пингов водителей, чтение и поиск рядом
"""

__all__: list[str] = []
