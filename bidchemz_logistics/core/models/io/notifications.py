"""Portal notification I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from bidchemz_logistics.core.models.domain.enums import NotificationPriority


class NotificationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    type: str
    title: str
    message: str
    priority: NotificationPriority
    read: bool
    data: Optional[Dict[str, Any]] = None
    created_at: datetime


class NotificationListResponse(BaseModel):
    notifications: List[NotificationRead]
    unread_count: int


class MarkNotificationsRead(BaseModel):
    """Mark the listed notifications as read, or every notification when ``mark_all`` is set."""

    notification_ids: List[str] = []
    mark_all: bool = False


class MarkNotificationsResult(BaseModel):
    updated: int
