# driver_locator/services/location_api/routes.py
"""
HTTP-маршруты Location API.

Endpoints:
- GET  /api/location/health - проверка Redis
- POST /api/location/drivers/update - пинг водителя
- POST /api/location/drivers/nearby - активные водители рядом
- GET  /api/location/drivers/{driver_id} - последнее состояние водителя
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from driver_locator.core.locations import (
    Driver,
    LocationStore,
    LocationUpdate,
    NearbyDriver,
    NearbyQuery,
    ProximityQueryEngine,
)
from driver_locator.infra.redis_client import RedisClient
from driver_locator.services.location_api.dependencies import (
    get_location_store,
    get_query_engine,
    get_redis_client,
)

router = APIRouter(prefix="/api/location", tags=["Location"])


@router.get("/health")
async def health_check(redis: RedisClient = Depends(get_redis_client)):
    if not await redis.health_check():
        return JSONResponse(status_code=503, content={"error": "Redis connection failed"})
    return {"status": True}


@router.post("/drivers/update", summary="Обновить геолокацию")
async def update_driver_location(
    update: LocationUpdate,
    store: LocationStore = Depends(get_location_store),
) -> dict[str, str]:
    """
    Пинг водителя: detail-запись, GEO-индекс и множество активных.

    Клиент шлёт пинги периодически, поэтому при ошибке повтор не нужен:
    следующий пинг восстановит состояние.
    """
    await store.upsert(update)
    return {"message": "Driver location updated successfully"}


@router.post(
    "/drivers/nearby",
    response_model=list[NearbyDriver],
    response_model_exclude_none=True,
    summary="Водители рядом",
)
async def find_nearby_drivers(
    query: NearbyQuery,
    engine: ProximityQueryEngine = Depends(get_query_engine),
) -> list[NearbyDriver]:
    return await engine.query_nearby(query)


@router.get("/drivers/{driver_id}", response_model=Driver, summary="Состояние водителя")
async def get_driver(
    driver_id: str,
    store: LocationStore = Depends(get_location_store),
) -> Driver:
    driver = await store.read(driver_id)
    if driver is None:
        raise HTTPException(status_code=404, detail="Driver not found")
    return driver
