"""Portal notification endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.notifications import Notification
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.models.io.notifications import (
    MarkNotificationsRead,
    MarkNotificationsResult,
    NotificationListResponse,
    NotificationRead,
)
from bidchemz_logistics.server.dependencies import get_current_user

router = APIRouter(tags=["notifications"])


@router.get(
    "",
    response_model=NotificationListResponse,
    summary="List Notifications",
    description="The caller's latest portal notifications and how many are unread.",
)
async def list_notifications(
    limit: int = Query(default=20, ge=1, le=100),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> NotificationListResponse:
    result = await session.execute(
        select(Notification)
        .where(Notification.user_id == user.id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    unread = await session.execute(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user.id, Notification.read == False)  # noqa: E712
    )
    return NotificationListResponse(
        notifications=[NotificationRead.model_validate(n) for n in result.scalars().all()],
        unread_count=int(unread.scalar_one()),
    )


@router.patch(
    "",
    response_model=MarkNotificationsResult,
    summary="Mark Notifications Read",
    description="Mark the listed notifications, or all of them with `mark_all`, as read. Other users' ids are ignored.",
)
async def mark_notifications_read(
    data: MarkNotificationsRead,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MarkNotificationsResult:
    stmt = update(Notification).where(Notification.user_id == user.id, Notification.read == False)  # noqa: E712
    if not data.mark_all:
        if not data.notification_ids:
            return MarkNotificationsResult(updated=0)
        stmt = stmt.where(Notification.id.in_(data.notification_ids))
    result = await session.execute(stmt.values(read=True).execution_options(synchronize_session="fetch"))
    await session.commit()
    return MarkNotificationsResult(updated=result.rowcount or 0)
