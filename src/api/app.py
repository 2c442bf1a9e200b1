"""
FastAPI application factory.

* Registers routes for shipments and admin.
* Ensures database tables exist on startup via the lifespan hook.
* Applies rate limiting and request logging.
* Swagger / OpenAPI UI available at ``/docs``.
"""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.api.middleware import limiter, log_requests
from src.api.routes import admin, shipments
from src.config import settings
from src.infrastructure.database import init_models

logging.basicConfig(level=logging.INFO)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup when configured to."""
    if settings.create_tables_on_startup:
        await init_models()
    yield


def create_app() -> FastAPI:
    app = FastAPI(
        title="Shipment Tracker API",
        description=(
            "Creates shipments, records status and location updates, and "
            "reports delivery progress and route distance along a "
            "shipment's checkpoints."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiter
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Access log
    app.middleware("http")(log_requests)

    # Routers
    app.include_router(shipments.router, prefix="/api/v1")
    app.include_router(admin.router, prefix="/api/v1")

    return app
