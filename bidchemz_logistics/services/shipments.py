"""Shipment tracking updates and reviews."""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database.base import utc_now
from bidchemz_logistics.core.database.entities.shipments import Shipment
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.repositories.shipments import ShipmentRepository
from bidchemz_logistics.core.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import ShipmentStatus, UserRole, WebhookEvent

from .audit import record_audit
from .notifications import notify_shipment_update
from .webhooks import send_webhook

logger = get_logger(__name__)

PICKED_UP_STATUSES = (ShipmentStatus.PICKUP_SCHEDULED, ShipmentStatus.IN_TRANSIT)


def can_view_shipment(user: User, shipment: Shipment) -> bool:
    if user.role == UserRole.ADMIN:
        return True
    return user.id in (shipment.trader_id, shipment.partner_id)


async def get_visible_shipment(session: AsyncSession, user: User, shipment_id: str) -> Shipment:
    shipment = await ShipmentRepository(session).get_by_id(shipment_id)
    if shipment is None:
        raise NotFoundError("Shipment")
    if not can_view_shipment(user, shipment):
        raise PermissionDeniedError("Access denied")
    return shipment


async def update_shipment(
    session: AsyncSession,
    user: User,
    shipment_id: str,
    *,
    status: Optional[ShipmentStatus] = None,
    current_location: Optional[str] = None,
    notes: Optional[str] = None,
) -> Shipment:
    """Record a tracking update from the carrying partner or an admin.

    Appends a tracking event whenever the status or location changes, stamps
    pickup and delivery dates, and on a status change notifies the trader and
    the external marketplace.
    """
    repo = ShipmentRepository(session)
    shipment = await repo.get_by_id(shipment_id)
    if shipment is None:
        raise NotFoundError("Shipment")
    if user.role != UserRole.ADMIN and not (
        user.role == UserRole.LOGISTICS_PARTNER and shipment.partner_id == user.id
    ):
        raise PermissionDeniedError("You can only update your own shipments")

    now = utc_now()
    if status is not None:
        shipment.status = status
    if current_location:
        shipment.current_location = current_location

    if status is not None or current_location:
        event = {
            "timestamp": now.isoformat(),
            "status": ShipmentStatus(shipment.status).value,
            "location": shipment.current_location or "",
            "description": notes or f"Status updated to {ShipmentStatus(shipment.status).value}",
            "updated_by": user.id,
        }
        shipment.tracking_events = [*(shipment.tracking_events or []), event]

    if status in PICKED_UP_STATUSES:
        shipment.actual_pickup_date = now
    if status == ShipmentStatus.DELIVERED:
        shipment.actual_delivery_date = now

    shipment = await repo.update(shipment)
    await record_audit(
        session,
        action="UPDATE_SHIPMENT",
        entity="SHIPMENT",
        entity_id=shipment.id,
        user_id=user.id,
        quote_id=shipment.quote_id,
        shipment_id=shipment.id,
        changes={"status": status.value if status else None, "current_location": current_location},
    )

    if status is not None:
        await send_webhook(
            session,
            WebhookEvent.SHIPMENT_STATUS_UPDATED,
            {
                "shipment_id": shipment.id,
                "shipment_number": shipment.shipment_number,
                "new_status": status.value,
                "current_location": shipment.current_location,
                "quote_id": shipment.quote_id,
                "partner_id": shipment.partner_id,
            },
        )
        await notify_shipment_update(session, shipment)

    logger.info(f"Shipment {shipment.shipment_number} updated by {user.id}: status={shipment.status.value}")
    return shipment


async def review_shipment(session: AsyncSession, trader: User, shipment_id: str, rating: int, review: Optional[str]):
    """Let the trader rate a delivered shipment from 1 to 5."""
    repo = ShipmentRepository(session)
    shipment = await repo.get_by_id(shipment_id)
    if shipment is None:
        raise NotFoundError("Shipment")
    if shipment.trader_id != trader.id:
        raise PermissionDeniedError("Access denied")
    if shipment.status != ShipmentStatus.DELIVERED:
        raise ValidationFailedError("Only delivered shipments can be reviewed")
    if not 1 <= rating <= 5:
        raise ValidationFailedError("Rating must be between 1 and 5")

    shipment.rating = rating
    shipment.review = review
    shipment = await repo.update(shipment)
    await record_audit(
        session,
        action="REVIEW_SHIPMENT",
        entity="SHIPMENT",
        entity_id=shipment.id,
        user_id=trader.id,
        shipment_id=shipment.id,
        changes={"rating": rating},
    )
    return shipment
