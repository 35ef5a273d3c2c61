"""
Manziz Storefront - FastAPI Backend Application
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
import redis.asyncio as redis
import structlog

from storefront.config import settings
from storefront.cart.storage import InMemoryCartStorage, RedisCartStorage
from storefront.errors import NetworkError, StorefrontError
from storefront.payments.pesapal import PesapalClient
from storefront.services.images import build_image_storage
from storefront.api import (
    analytics,
    auth,
    carts,
    checkout,
    images,
    menu,
    messages,
    orders,
    payments,
    reservations,
)

logging.basicConfig(format="%(message)s", level=settings.log_level.upper())

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer()
        if settings.log_format == "console"
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()


def build_cart_storage():
    if settings.cart_storage == "memory":
        return InMemoryCartStorage(), None
    client = redis.from_url(settings.redis_url, decode_responses=True)
    return RedisCartStorage(client, ttl_seconds=settings.cart_ttl_seconds), client


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info("Starting Manziz Storefront API", version="1.0.0")

    app.state.cart_storage, redis_client = build_cart_storage()
    app.state.pesapal = PesapalClient.from_settings(settings)
    app.state.image_storage = build_image_storage(settings)

    yield

    await app.state.pesapal.aclose()
    if redis_client is not None:
        await redis_client.aclose()
    logger.info("Shutting down Manziz Storefront API")


# Create FastAPI application
app = FastAPI(
    title="Manziz Storefront",
    description="Online ordering, payments and support chat for the Manziz restaurant",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    """Typed errors become {"error", "message", ...} JSON bodies"""
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Request failed",
        path=request.url.path,
        error_code=exc.code,
        error=exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.error("Database error", path=request.url.path, error=str(exc))
    error = NetworkError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


@app.exception_handler(redis.RedisError)
async def cart_storage_error_handler(request: Request, exc: redis.RedisError):
    logger.error("Cart storage error", path=request.url.path, error=str(exc))
    error = NetworkError()
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


# Health check endpoints
@app.get("/health")
async def health():
    """Basic health check"""
    return {"status": "healthy", "service": "api", "version": "1.0.0"}


@app.get("/health/ready")
async def ready(request: Request):
    """Readiness check with dependency verification"""
    from storefront.database import SessionLocal

    checks = {}

    # Check database
    try:
        async with SessionLocal() as db:
            await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except (SQLAlchemyError, OSError) as e:
        checks["database"] = f"failed: {str(e)}"

    # Check cart storage
    try:
        await request.app.state.cart_storage.load("health")
        checks["cart_storage"] = "ok"
    except (redis.RedisError, OSError) as e:
        checks["cart_storage"] = f"failed: {str(e)}"

    all_ok = all(v == "ok" for v in checks.values())

    return {
        "status": "ready" if all_ok else "not_ready",
        "checks": checks,
    }


# Include API routers
app.include_router(auth.router, prefix="/auth", tags=["Authentication"])
app.include_router(menu.router, prefix="/menu", tags=["Menu"])
app.include_router(carts.router, prefix="/carts", tags=["Cart"])
app.include_router(checkout.router, prefix="/checkout", tags=["Checkout"])
app.include_router(payments.router, tags=["Payments"])
app.include_router(orders.router, prefix="/orders", tags=["Orders"])
app.include_router(reservations.router, prefix="/reservations", tags=["Reservations"])
app.include_router(messages.router, prefix="/messages", tags=["Messages"])

# Include admin routers
app.include_router(menu.admin_router, prefix="/admin/menu", tags=["Admin"])
app.include_router(orders.admin_router, prefix="/admin/orders", tags=["Admin"])
app.include_router(reservations.admin_router, prefix="/admin/reservations", tags=["Admin"])
app.include_router(messages.admin_router, prefix="/admin/messages", tags=["Admin"])
app.include_router(analytics.router, prefix="/admin/analytics", tags=["Admin"])
app.include_router(images.router, prefix="/admin/images", tags=["Admin"])

# Locally stored menu images
app.mount("/media", StaticFiles(directory=settings.images_path, check_dir=False), name="media")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
    )
