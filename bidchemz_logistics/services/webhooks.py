"""
Signed webhooks to the external marketplace.

Each event is POSTed once as ``{"event", "data", "timestamp"}`` with header
``X-Webhook-Signature: hex(hmac_sha256(secret, body))`` where ``body`` is the
exact compact JSON that goes over the wire. Every attempt, successful or not,
is stored in ``WebhookLog``; failures are retried by the background job and
never propagate into the request that triggered them.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from typing import Any, Dict, Optional

import httpx
from fastapi.encoders import jsonable_encoder
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database.base import utc_isoformat, utc_now
from bidchemz_logistics.core.database.entities.webhook_logs import WebhookLog
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import WebhookEvent
from bidchemz_logistics.core.monitoring import log_webhook_delivery
from bidchemz_logistics.server.core.config import settings

logger = get_logger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"
RETRY_BATCH_SIZE = 100


def build_payload(event: WebhookEvent, data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "event": WebhookEvent(event).value,
        "data": jsonable_encoder(data),
        "timestamp": utc_isoformat(utc_now()),
    }


def serialize_payload(payload: Dict[str, Any]) -> bytes:
    """Compact JSON encoding used both for signing and as the request body."""
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def sign_payload(body: bytes, secret: Optional[str] = None) -> str:
    key = (secret if secret is not None else settings.webhook.secret).encode("utf-8")
    return hmac.new(key, body, hashlib.sha256).hexdigest()


def verify_webhook_signature(body: bytes, signature: str, secret: Optional[str] = None) -> bool:
    """Constant-time check of ``signature`` against ``body``."""
    return hmac.compare_digest(sign_payload(body, secret), signature)


async def _post(client: httpx.AsyncClient, url: str, body: bytes, signature: str) -> tuple[Optional[int], str]:
    try:
        response = await client.post(
            url,
            content=body,
            headers={"Content-Type": "application/json", SIGNATURE_HEADER: signature},
        )
        return response.status_code, response.text
    except httpx.HTTPError as e:
        logger.warning(f"[WEBHOOK] Delivery to {url} failed: {e}")
        return None, str(e)


def _client(client: Optional[httpx.AsyncClient]) -> httpx.AsyncClient:
    return client or httpx.AsyncClient(timeout=settings.webhook.timeout_seconds)


async def send_webhook(
    session: AsyncSession,
    event: WebhookEvent,
    data: Dict[str, Any],
    *,
    url: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[WebhookLog]:
    """Deliver ``event`` once and log the attempt.

    Returns None without sending anything when no webhook URL is configured.
    """
    target = url or settings.webhook.url
    if not target:
        logger.debug(f"[WEBHOOK] No webhook URL configured, skipping {WebhookEvent(event).value}")
        return None

    payload = build_payload(event, data)
    body = serialize_payload(payload)
    signature = sign_payload(body)

    http = _client(client)
    try:
        status_code, response_body = await _post(http, target, body, signature)
    finally:
        if client is None:
            await http.aclose()

    log = WebhookLog(
        event=payload["event"],
        url=target,
        payload=payload,
        hmac_signature=signature,
        status=status_code,
        response_body=response_body,
        attempts=1,
        last_attempt=utc_now(),
    )
    session.add(log)
    await session.flush()
    log_webhook_delivery(payload["event"], target, status_code, 1)

    if status_code is not None and 200 <= status_code < 300:
        logger.info(f"[WEBHOOK] {payload['event']} delivered to {target}")
    else:
        logger.warning(f"[WEBHOOK] {payload['event']} to {target} failed with status {status_code}")
    return log


async def retry_failed_webhooks(
    session: AsyncSession,
    *,
    client: Optional[httpx.AsyncClient] = None,
) -> int:
    """Re-send failed deliveries that still have attempts left.

    Works through at most ``RETRY_BATCH_SIZE`` logs, oldest first. Returns the
    number of deliveries that succeeded this round.
    """
    max_attempts = settings.webhook.max_attempts
    stmt = (
        select(WebhookLog)
        .where(
            or_(WebhookLog.status.is_(None), WebhookLog.status < 200, WebhookLog.status >= 300),
            WebhookLog.attempts < max_attempts,
        )
        .order_by(WebhookLog.created_at.asc())
        .limit(RETRY_BATCH_SIZE)
    )
    result = await session.execute(stmt)
    pending = list(result.scalars().all())
    if not pending:
        return 0

    succeeded = 0
    http = _client(client)
    try:
        for log in pending:
            body = serialize_payload(log.payload)
            signature = sign_payload(body)
            status_code, response_body = await _post(http, log.url, body, signature)
            log.status = status_code
            log.response_body = response_body
            log.hmac_signature = signature
            log.attempts += 1
            log.last_attempt = utc_now()
            session.add(log)
            log_webhook_delivery(log.event, log.url, status_code, log.attempts)
            if status_code is not None and 200 <= status_code < 300:
                succeeded += 1
    finally:
        if client is None:
            await http.aclose()

    await session.flush()
    logger.info(f"[WEBHOOK] Retried {len(pending)} webhooks, {succeeded} delivered")
    return succeeded
