# storefront/main.py
from contextlib import asynccontextmanager

from fastapi import FastAPI
import uvicorn

from storefront.api.routers import admin, carts, checkout, health, orders, products, users, webhooks
from storefront.data.database import init_models
from storefront.utils.logging import RequestLoggingMiddleware, get_logger, setup_logging
from storefront.utils.settings import LOG_LEVEL, SERVICE_NAME

setup_logging(LOG_LEVEL)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {SERVICE_NAME}")
    try:
        init_models()
        logger.info("Database tables created")
    except Exception:
        logger.error("Failed to create tables", exc_info=True)
        raise
    yield
    logger.info(f"Shutting down {SERVICE_NAME}")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)

    # Include routers
    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(products.router)
    app.include_router(carts.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)
    app.include_router(admin.router)
    app.include_router(webhooks.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
