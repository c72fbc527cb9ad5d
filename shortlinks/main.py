from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response, status
from fastapi.exception_handlers import http_exception_handler
from starlette.exceptions import HTTPException as StarletteHTTPException

from shortlinks.api import shortener
from shortlinks.core.config import settings
from shortlinks.core.errors import RequestDecodeError, StoreError
from shortlinks.core.logging_config import configure_logging
from shortlinks.db import database
from shortlinks.routers import health
from shortlinks.services.cache import redirect_cache

logger = configure_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Application '{settings.PROJECT_NAME}' starting up.")
    database.init_db()
    yield
    logger.info("Shutting down gracefully...")
    database.engine.dispose()
    if redirect_cache is not None:
        redirect_cache.close()


# Docs routes are disabled: every other GET path is a shortlink lookup
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="URL shortener: POST a link, GET the short id to be redirected",
    lifespan=lifespan,
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

app.include_router(health.router)
app.include_router(shortener.router)


# Methods without a route are "not found" like any unknown path
@app.exception_handler(StarletteHTTPException)
async def method_not_allowed_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return await http_exception_handler(request, exc)


@app.exception_handler(RequestDecodeError)
async def decode_exception_handler(request: Request, exc: RequestDecodeError):
    logger.error(f"Failed to decode request body: {exc}", exc_info=True)
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    logger.error(f"Store failure: {exc}", exc_info=True)
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return Response(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
