# driver_locator/services/location_api/app.py
"""
FastAPI приложение Location API.

Ошибки возвращаются телом {"error": "<сообщение>"}.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from driver_locator import __version__
from driver_locator.common.constants import TypeMsg
from driver_locator.common.exceptions import CorruptRecordError, InvalidInputError, StoreUnavailableError
from driver_locator.common.logger import log_error, log_info, setup_logging
from driver_locator.services.location_api.dependencies import close_dependencies, init_dependencies
from driver_locator.services.location_api.routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Жизненный цикл приложения."""
    setup_logging()
    await log_info("Starting Location API...", type_msg=TypeMsg.INFO)
    await init_dependencies()

    yield

    await log_info("Shutting down Location API...", type_msg=TypeMsg.INFO)
    await close_dependencies()


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Маппинг исключений сервиса на HTTP-ответы."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error(400, "Invalid request payload")

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
        return _error(400, "Invalid request payload")

    @app.exception_handler(StoreUnavailableError)
    async def store_error_handler(request: Request, exc: StoreUnavailableError) -> JSONResponse:
        await log_error(f"{request.method} {request.url.path}: {exc}")
        return _error(500, str(exc))

    @app.exception_handler(CorruptRecordError)
    async def corrupt_record_handler(request: Request, exc: CorruptRecordError) -> JSONResponse:
        return _error(500, "Failed to parse driver data")

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))


def create_app(lifespan_handler=lifespan) -> FastAPI:
    """Создаёт приложение; тесты подменяют lifespan."""
    app = FastAPI(
        title="Driver Locator",
        description="Live-геолокация водителей и поиск активных водителей рядом.",
        version=__version__,
        lifespan=lifespan_handler,
    )
    register_exception_handlers(app)
    app.include_router(router)
    return app


app = create_app()
