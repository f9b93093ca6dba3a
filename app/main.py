"""
Sello Market backend
Catalog, checkout with YooKassa payments, verification codes and moderation
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import subprocess
import os

from shared.core import ServiceHealth, setup_logging, RequestLoggingMiddleware, get_logger
from app.api import admin, catalog, orders, sellers, users, webhooks
from app.core_settings import get_settings
from app.domain.catalog import load_catalog
from app.domain.errors import MarketError
from app.infrastructure.db import get_engine, init_models

settings = get_settings()

SERVICE_NAME = settings.SERVICE_NAME
SERVICE_VERSION = settings.SERVICE_VERSION

setup_logging(service_name=SERVICE_NAME, level=settings.LOG_LEVEL)

logger = get_logger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle management"""
    logger.info(f"Starting {SERVICE_NAME} version {SERVICE_VERSION}")

    if settings.RUN_MIGRATIONS:
        try:
            logger.info("Running database migrations")
            result = subprocess.run(
                ["alembic", "upgrade", "head"],
                cwd=os.path.join(os.path.dirname(__file__), ".."),
                capture_output=True,
                text=True,
                check=False,
            )
            if result.returncode != 0:
                logger.warning(f"Migration output: {result.stderr}")
            else:
                logger.info("Database migrations completed")
        except OSError as e:
            logger.error(f"Migration error: {e}")

    try:
        init_models()
        logger.info("Database models initialized")
    except Exception as e:
        logger.error(f"Failed to initialize database models: {e}")
        raise

    yield

    logger.info(f"Shutting down {SERVICE_NAME}")

app = FastAPI(
    title=SERVICE_NAME,
    description="Sello Market storefront API",
    version=SERVICE_VERSION,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url=None,
    openapi_url="/api/openapi.json",
)

# Built once and shared read-only by every request
app.state.catalog = load_catalog(settings.CATALOG_PATH)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

@app.exception_handler(MarketError)
async def market_error_handler(request: Request, exc: MarketError):
    if exc.status_code >= 500:
        logger.error(f"{type(exc).__name__}: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid request"))
    return JSONResponse(status_code=400, content={"error": message})

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal error"})

health_service = ServiceHealth(SERVICE_NAME, SERVICE_VERSION, engine_factory=get_engine)
app.include_router(health_service.create_health_router(prefix="/api"))

app.include_router(catalog.router)
app.include_router(orders.router)
app.include_router(webhooks.router)
app.include_router(users.router)
app.include_router(sellers.router)
app.include_router(admin.router)
