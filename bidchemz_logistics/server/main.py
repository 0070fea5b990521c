"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request timing, rate limiting and security headers), registers the exception
handlers and includes all API routers.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bidchemz_logistics.core.database import init_db
from bidchemz_logistics.core.logging_config import get_logger, setup_logging
from bidchemz_logistics.core.monitoring import initialize_logfire

from .api.v1 import (
    admin,
    auth,
    cron,
    documents,
    health,
    lead_cost,
    notifications,
    offers,
    partner,
    payment_requests,
    policies,
    quotes,
    shipments,
    user_data,
    wallet,
)
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware, RateLimitMiddleware, SecurityHeadersMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)

DEFAULT_JWT_SECRET = "dev-jwt-secret-change-me"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates the tables on startup and sets up Logfire when a token is configured.
    """
    # Startup
    try:
        logger.info("Starting up BidChemz Logistics Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    if settings.auth.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET is the development default; set a real secret in production")

    initialize_logfire(app)

    yield

    # Shutdown
    logger.info("Shutting down BidChemz Logistics Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    BidChemz Logistics API

    Chemical freight marketplace: traders post transport quotes, verified logistics
    partners pay a lead fee to bid on them, and the selected offer becomes a tracked shipment.
    """,
    version=constant.VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

# Set all CORS enabled origins
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=settings.cors.allow_methods,
    allow_headers=settings.cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)
app.add_middleware(RateLimitMiddleware)
app.add_middleware(SecurityHeadersMiddleware)

setup_exception_handlers(app)


app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth")
app.include_router(quotes.router, prefix=f"{constant.API_V1_STR}/quotes")
app.include_router(offers.router, prefix=f"{constant.API_V1_STR}/offers")
app.include_router(lead_cost.router, prefix=constant.API_V1_STR)
app.include_router(shipments.router, prefix=f"{constant.API_V1_STR}/shipments")
app.include_router(wallet.router, prefix=f"{constant.API_V1_STR}/wallet")
app.include_router(payment_requests.router, prefix=f"{constant.API_V1_STR}/payment-requests")
app.include_router(documents.router, prefix=f"{constant.API_V1_STR}/documents")
app.include_router(notifications.router, prefix=f"{constant.API_V1_STR}/notifications")
app.include_router(partner.router, prefix=f"{constant.API_V1_STR}/partner")
app.include_router(admin.router, prefix=f"{constant.API_V1_STR}/admin")
app.include_router(user_data.router, prefix=f"{constant.API_V1_STR}/user")
app.include_router(policies.router, prefix=f"{constant.API_V1_STR}/policies")
app.include_router(cron.router, prefix=f"{constant.API_V1_STR}/cron")
