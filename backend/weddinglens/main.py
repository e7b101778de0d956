# backend/weddinglens/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .core.config import settings
from .core.constants import (
    ALLOWED_ORIGINS,
    API_DESCRIPTION,
    API_TITLE,
    API_VERSION,
    BRAND_NAME,
)
from .database import SessionLocal, init_db
from .errors import register_error_handlers
from .routes import prometheus
from .routes.v1 import (
    availability as availability_v1,
    bookings as bookings_v1,
    earnings as earnings_v1,
    packages as packages_v1,
    payments as payments_v1,
    photographers as photographers_v1,
    pricing as pricing_v1,
    services as services_v1,
    testimonials as testimonials_v1,
)
from .services.catalog_service import seed_catalog

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


logger = logging.getLogger(__name__)


def _bootstrap_database() -> None:
    if settings.get_database_url().startswith("sqlite"):
        # Postgres schemas are managed by alembic
        init_db()

    if not settings.seed_catalog_on_startup:
        return
    db = SessionLocal()
    try:
        counts = seed_catalog(db, settings.catalog_seed_path)
        if counts:
            logger.info(f"Seeded catalog: {counts}")
    finally:
        db.close()


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if not settings.stripe_configured:
        logger.warning("Stripe is not configured - payment intents will fail with 502")
    if not settings.webhook_secret:
        logger.warning("Stripe webhook secret missing - webhook signatures are NOT verified")

    _bootstrap_database()

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
)
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST"],
    allow_headers=["*"],
)

api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(photographers_v1.router, prefix="/photographers")
api_v1.include_router(services_v1.router, prefix="/services")
api_v1.include_router(packages_v1.router, prefix="/packages")
api_v1.include_router(testimonials_v1.router, prefix="/testimonials")
api_v1.include_router(availability_v1.router, prefix="/availability")
api_v1.include_router(pricing_v1.router, prefix="/pricing")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(payments_v1.router, prefix="/payments")
api_v1.include_router(earnings_v1.router, prefix="/earnings")
app.include_router(api_v1)

# Infrastructure (unversioned)
app.include_router(prometheus.router)


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
    environment: str
    timestamp: str


def _health_payload() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        service=f"{BRAND_NAME.lower()}-api",
        version=API_VERSION,
        environment=settings.environment,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )


@app.get("/health", response_model=HealthResponse)
def health_check(response: Response) -> HealthResponse:
    response.headers["Cache-Control"] = "no-store"
    return _health_payload()
