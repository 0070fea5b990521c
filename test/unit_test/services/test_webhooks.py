"""Unit tests for signed marketplace webhooks."""

import json
from typing import List

import httpx
import pytest

from bidchemz_logistics.core.database.entities.webhook_logs import WebhookLog
from bidchemz_logistics.core.models.domain.enums import WebhookEvent
from bidchemz_logistics.server.core.config import settings
from bidchemz_logistics.services.webhooks import (
    SIGNATURE_HEADER,
    build_payload,
    retry_failed_webhooks,
    send_webhook,
    serialize_payload,
    sign_payload,
    verify_webhook_signature,
)

WEBHOOK_URL = "http://mock/webhooks/bidchemz"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


class TestSigning:
    def test_payload_shape(self):
        payload = build_payload(WebhookEvent.QUOTE_REQUESTED, {"quoteId": "q-1"})
        assert payload["event"] == "QUOTE_REQUESTED"
        assert payload["data"] == {"quoteId": "q-1"}
        assert payload["timestamp"].endswith("Z")

    def test_serialization_is_compact(self):
        assert serialize_payload({"a": 1, "b": [1, 2]}) == b'{"a":1,"b":[1,2]}'

    def test_signature_verifies_only_for_the_same_body(self):
        body = serialize_payload({"event": "OFFER_SELECTED"})
        signature = sign_payload(body, "secret")
        assert len(signature) == 64
        assert verify_webhook_signature(body, signature, "secret") is True
        assert verify_webhook_signature(body + b" ", signature, "secret") is False
        assert verify_webhook_signature(body, signature, "other") is False


class TestSendWebhook:
    async def test_skipped_without_url(self, session):
        assert settings.webhook.url is None
        assert await send_webhook(session, WebhookEvent.QUOTE_REQUESTED, {"quoteId": "q-1"}) is None

    async def test_delivers_signed_body_and_logs(self, session):
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, text="ok")

        async with _client(handler) as client:
            log = await send_webhook(
                session,
                WebhookEvent.OFFER_SELECTED,
                {"offerId": "o-1", "price": 42000.0},
                url=WEBHOOK_URL,
                client=client,
            )

        assert len(seen) == 1
        request = seen[0]
        assert request.headers["Content-Type"] == "application/json"
        assert verify_webhook_signature(request.content, request.headers[SIGNATURE_HEADER])
        assert json.loads(request.content)["data"] == {"offerId": "o-1", "price": 42000.0}

        assert log.status == 200
        assert log.attempts == 1
        assert log.url == WEBHOOK_URL
        assert log.hmac_signature == request.headers[SIGNATURE_HEADER]

    async def test_failed_status_is_logged_not_raised(self, session):
        async with _client(lambda request: httpx.Response(503, text="down")) as client:
            log = await send_webhook(session, WebhookEvent.QUOTE_REQUESTED, {}, url=WEBHOOK_URL, client=client)
        assert log.status == 503
        assert log.response_body == "down"

    async def test_transport_error_is_logged_not_raised(self, session):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            log = await send_webhook(session, WebhookEvent.QUOTE_REQUESTED, {}, url=WEBHOOK_URL, client=client)
        assert log.status is None
        assert "connection refused" in log.response_body

    async def test_configured_url_is_used(self, session, monkeypatch):
        monkeypatch.setattr(settings, "WEBHOOK_URL", WEBHOOK_URL)
        async with _client(lambda request: httpx.Response(202)) as client:
            log = await send_webhook(session, WebhookEvent.LEAD_PAYMENT_FAILED, {}, client=client)
        assert log.url == WEBHOOK_URL
        assert log.status == 202


class TestRetryFailedWebhooks:
    async def _log(self, session, **fields) -> WebhookLog:
        payload = build_payload(WebhookEvent.QUOTE_REQUESTED, {"quoteId": "q-1"})
        log = WebhookLog(
            event=payload["event"],
            url=WEBHOOK_URL,
            payload=payload,
            hmac_signature="stale",
            **fields,
        )
        session.add(log)
        await session.commit()
        return log

    async def test_retries_failed_deliveries(self, session):
        failed = await self._log(session, status=500, attempts=1)
        unreachable = await self._log(session, status=None, attempts=2)

        async with _client(lambda request: httpx.Response(200)) as client:
            delivered = await retry_failed_webhooks(session, client=client)

        assert delivered == 2
        for log in (failed, unreachable):
            assert log.status == 200
            assert log.hmac_signature == sign_payload(serialize_payload(log.payload))
        assert failed.attempts == 2
        assert unreachable.attempts == 3

    async def test_skips_delivered_and_exhausted_logs(self, session):
        delivered = await self._log(session, status=200, attempts=1)
        exhausted = await self._log(session, status=500, attempts=settings.webhook.max_attempts)
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(200)

        async with _client(handler) as client:
            assert await retry_failed_webhooks(session, client=client) == 0

        assert calls == []
        assert delivered.attempts == 1
        assert exhausted.attempts == settings.webhook.max_attempts

    async def test_still_failing_counts_the_attempt(self, session):
        log = await self._log(session, status=500, attempts=1)
        async with _client(lambda request: httpx.Response(500)) as client:
            assert await retry_failed_webhooks(session, client=client) == 0
        assert log.attempts == 2
        assert log.status == 500
