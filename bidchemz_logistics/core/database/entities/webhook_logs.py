"""Webhook delivery log entity models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, UTCDateTime, new_id, utc_now


class WebhookLog(Base, table=True):
    """Entity for outbound webhook attempts.

    ``status`` is the HTTP status code of the last attempt, or null when the
    request never got a response.

    Table: webhook_logs
    """

    __tablename__ = "webhook_logs"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    event: str = Field(max_length=64, index=True)
    url: str = Field(max_length=512)
    payload: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)
    hmac_signature: str = Field(max_length=128)
    status: Optional[int] = Field(default=None)
    response_body: Optional[str] = Field(default=None)
    attempts: int = Field(default=1)
    last_attempt: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)
