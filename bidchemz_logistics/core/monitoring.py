"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for monitoring and
tracing of the marketplace, including:
- API endpoint tracing
- Database operation monitoring
- Outbound webhook (HTTPX) tracing
- Business events such as lead charges and quote lifecycle changes

Logfire stays dormant unless ``LOGFIRE_ENABLED`` is true and a token is set;
every helper in this module is then a cheap no-op.
"""

import logging
import os
from typing import Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)

LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_PROJECT_NAME = os.getenv("LOGFIRE_PROJECT_NAME", "bidchemz-logistics")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "bidchemz-logistics-server")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "1.0.0")

LOGFIRE_TRACE_SQLALCHEMY = os.getenv("LOGFIRE_TRACE_SQLALCHEMY", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_HTTPX = os.getenv("LOGFIRE_TRACE_HTTPX", "true").lower() in ("true", "1", "yes")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")

_configured = False


def is_logfire_active() -> bool:
    """Whether Logfire was configured successfully in this process."""
    return _configured


def initialize_logfire(app: FastAPI | None = None) -> None:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    Sets up Logfire with automatic instrumentation for SQLAlchemy, HTTPX and,
    when ``app`` is given, FastAPI endpoints. The initialization is conditional
    on the LOGFIRE_ENABLED environment variable.

    Args:
        app: FastAPI application instance for FastAPI instrumentation (optional).
    """
    global _configured

    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return

    try:
        logfire.configure(
            token=LOGFIRE_TOKEN,
            service_name=LOGFIRE_SERVICE_NAME,
            service_version=LOGFIRE_SERVICE_VERSION,
            environment=LOGFIRE_ENVIRONMENT,
        )
        _configured = True
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        return

    if LOGFIRE_TRACE_SQLALCHEMY:
        try:
            logfire.instrument_sqlalchemy()
            logger.info("Logfire: SQLAlchemy instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument SQLAlchemy: {e}")

    if LOGFIRE_TRACE_HTTPX:
        try:
            logfire.instrument_httpx()
            logger.info("Logfire: HTTPX instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument HTTPX: {e}")

    if LOGFIRE_TRACE_FASTAPI and app is not None:
        try:
            logfire.instrument_fastapi(app=app)
            logger.info("Logfire: FastAPI instrumentation enabled")
        except Exception as e:
            logger.warning(f"Failed to instrument FastAPI: {e}")

    logger.info(
        f"Logfire monitoring initialized: "
        f"project={LOGFIRE_PROJECT_NAME}, "
        f"environment={LOGFIRE_ENVIRONMENT}, "
        f"service={LOGFIRE_SERVICE_NAME}"
    )


def log_api_request(method: str, path: str, status_code: int, duration_ms: float) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
    """
    if not _configured:
        return
    try:
        logfire.info(
            "API request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
        )
    except Exception:
        logger.debug(f"Could not log API request to Logfire: {method} {path}")


def log_lead_charged(partner_id: str, quote_id: str, amount: float, lead_type: str) -> None:
    """
    Record a lead fee debited from a partner wallet.

    Args:
        partner_id: The charged partner
        quote_id: The quote the lead belongs to
        amount: Amount debited
        lead_type: EXCLUSIVE or SHARED
    """
    if not _configured:
        return
    try:
        logfire.info(
            "Lead fee charged",
            partner_id=partner_id,
            quote_id=quote_id,
            amount=amount,
            lead_type=lead_type,
        )
    except Exception:
        logger.debug(f"Could not log lead charge to Logfire: partner_id={partner_id}")


def log_quote_event(quote_id: str, event: str, **attributes) -> None:
    """Record a quote lifecycle event (created, matched, expired, selected)."""
    if not _configured:
        return
    try:
        logfire.info("Quote {event}", event=event, quote_id=quote_id, **attributes)
    except Exception:
        logger.debug(f"Could not log quote event to Logfire: quote_id={quote_id}")


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    if not _configured:
        return
    try:
        logfire.error(
            "{error_type}: {error_message}",
            error_type=error_type,
            error_message=error_message,
            **(context or {}),
        )
    except Exception:
        logger.debug(f"Could not log error to Logfire: {error_type}")


def log_webhook_delivery(event: str, url: str, status_code: Optional[int], attempts: int) -> None:
    """Record one outbound webhook attempt; ``status_code`` is None on transport errors."""
    if not _configured:
        return
    try:
        delivered = status_code is not None and 200 <= status_code < 300
        logfire.info(
            "Webhook {event} attempt {attempts}",
            event=event,
            url=url,
            status_code=status_code,
            attempts=attempts,
            delivered=delivered,
        )
    except Exception:
        logger.debug(f"Could not log webhook delivery to Logfire: {event}")


def log_background_job(name: str, status: str, duration_ms: float) -> None:
    """Record the outcome of one periodic job run (fulfilled or rejected)."""
    if not _configured:
        return
    try:
        logfire.info("Background job {name} {status}", name=name, status=status, duration_ms=duration_ms)
    except Exception:
        logger.debug(f"Could not log background job to Logfire: {name}")
