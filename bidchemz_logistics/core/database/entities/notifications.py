"""Portal notification entity models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from bidchemz_logistics.core.models.domain.enums import NotificationPriority

from ..base import Base, UTCDateTime, new_id, utc_now


class Notification(Base, table=True):
    """Entity for in-portal notifications.

    Table: notifications
    """

    __tablename__ = "notifications"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    type: str = Field(max_length=64, description="Notification kind, e.g. NEW_LEAD")
    title: str = Field(max_length=255)
    message: str
    priority: NotificationPriority = Field(default=NotificationPriority.MEDIUM)
    read: bool = Field(default=False, index=True)
    data: Optional[Dict[str, Any]] = Field(default=None, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)
