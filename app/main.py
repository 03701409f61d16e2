"""Главный модуль FastAPI приложения."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.v1 import health, pull_requests, stats, teams, users
from app.core.cache import close_cache, init_cache
from app.core.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import (
    ServiceException,
    database_exception_handler,
    http_exception_handler,
    service_exception_handler,
    validation_exception_handler,
)
from app.core.logging_config import setup_logging

logger = logging.getLogger("app.http")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events."""
    setup_logging()
    await init_db()
    await init_cache()
    logger.info("service started on %s:%s", settings.APP_HOST, settings.APP_PORT)
    yield
    await close_cache()
    await close_db()


app = FastAPI(
    title="PR Reviewer Assignment Service",
    version="1.0.0",
    debug=settings.DEBUG,
    lifespan=lifespan,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


# Регистрируем обработчики исключений
app.add_exception_handler(ServiceException, service_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(SQLAlchemyError, database_exception_handler)

# Регистрируем роутеры
app.include_router(health.router)
app.include_router(teams.router)
app.include_router(users.router)
app.include_router(pull_requests.router)
app.include_router(stats.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.APP_HOST, port=settings.APP_PORT)
