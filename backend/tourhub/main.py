# backend/tourhub/main.py
"""
Tourhub API application.

Run with ``uvicorn tourhub.main:app`` from the backend directory.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .core.config import is_running_tests, settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .database import get_db_pool_status
from .errors import register_error_handlers
from .middleware.prometheus_middleware import PrometheusMiddleware
from .middleware.tenant import TenantMiddleware
from .routes import prometheus
from .routes.v1 import (
    auth as auth_v1,
    availability as availability_v1,
    bookings as bookings_v1,
    checkout as checkout_v1,
    discounts as discounts_v1,
    offers as offers_v1,
    reviews as reviews_v1,
    tenant as tenant_v1,
    tours as tours_v1,
    user_bookings as user_bookings_v1,
    webhooks as webhooks_v1,
)
from .routes.v1.admin import (
    auth as admin_auth_v1,
    availability as admin_availability_v1,
    bookings as admin_bookings_v1,
    dashboard as admin_dashboard_v1,
    discounts as admin_discounts_v1,
    manifests as admin_manifests_v1,
    reviews as admin_reviews_v1,
    special_offers as admin_special_offers_v1,
    stop_sales as admin_stop_sales_v1,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    if is_running_tests():
        logger.info("Running under pytest (test mode active)")
    if not settings.stripe_configured:
        logger.warning("STRIPE_SECRET_KEY is not set; card checkout will fail")

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

# Register unified error envelope handlers
register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
    expose_headers=["x-tenant-id"],
)
logger.info("CORS allow_origins=%s allow_credentials=%s", settings.cors_origins, True)

app.add_middleware(TenantMiddleware)
app.add_middleware(PrometheusMiddleware)

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")

# Storefront
api_v1.include_router(tenant_v1.router, prefix="/tenant")
api_v1.include_router(tours_v1.router, prefix="/tours")
api_v1.include_router(reviews_v1.router, prefix="/tours")
api_v1.include_router(offers_v1.router, prefix="/offers")
api_v1.include_router(discounts_v1.router, prefix="/discounts")
api_v1.include_router(availability_v1.router, prefix="/availability")
api_v1.include_router(checkout_v1.router, prefix="/checkout")
api_v1.include_router(bookings_v1.router, prefix="/bookings")
api_v1.include_router(user_bookings_v1.router, prefix="/user")
api_v1.include_router(auth_v1.router, prefix="/auth")
api_v1.include_router(webhooks_v1.router, prefix="/webhooks")

# Back office
api_v1.include_router(admin_auth_v1.router, prefix="/admin")
api_v1.include_router(admin_dashboard_v1.router, prefix="/admin")
api_v1.include_router(admin_bookings_v1.router, prefix="/admin/bookings")
api_v1.include_router(admin_manifests_v1.router, prefix="/admin/manifests")
api_v1.include_router(admin_availability_v1.router, prefix="/admin/availability")
api_v1.include_router(admin_stop_sales_v1.router, prefix="/admin/stop-sales")
api_v1.include_router(admin_stop_sales_v1.logs_router, prefix="/admin/stop-sale-logs")
api_v1.include_router(admin_special_offers_v1.router, prefix="/admin/special-offers")
api_v1.include_router(admin_discounts_v1.router, prefix="/admin/discounts")
api_v1.include_router(admin_reviews_v1.router, prefix="/admin/reviews")

app.include_router(api_v1)
app.include_router(prometheus.router)


@app.get("/")
def read_root() -> dict:
    return {"message": f"Welcome to the {BRAND_NAME} API", "version": API_VERSION, "docs": "/docs"}


@app.get("/health")
def health_check() -> dict:
    """Liveness plus connection pool usage."""
    return {"status": "ok", "version": API_VERSION, "database": {"pool": get_db_pool_status()}}
