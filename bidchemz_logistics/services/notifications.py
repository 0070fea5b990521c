"""
Multi-channel notifications.

Email, SMS and WhatsApp go through provider objects. The shipped providers
only log the outgoing message; a deployment wires in real gateways by
registering different providers. The PORTAL channel persists a
``Notification`` row that the web app polls.

Every delivered notification writes a ``NOTIFICATION_SENT`` audit entry. A
failing channel is logged and skipped so one broken gateway never blocks the
others.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database.entities.notifications import Notification
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.shipments import Shipment
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.errors import NotFoundError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import NotificationChannel, NotificationPriority
from bidchemz_logistics.server.core.config import settings

from .audit import record_audit

logger = get_logger(__name__)

ALL_CHANNELS = (
    NotificationChannel.EMAIL,
    NotificationChannel.SMS,
    NotificationChannel.WHATSAPP,
    NotificationChannel.PORTAL,
)


class NotificationProvider(ABC):
    """Delivers a message to a user over one channel."""

    channel: NotificationChannel

    @abstractmethod
    async def send(
        self,
        session: AsyncSession,
        user: User,
        *,
        title: str,
        message: str,
        priority: NotificationPriority,
        kind: str,
        data: Optional[Dict[str, Any]],
    ) -> bool:
        """Deliver the message; return False when the user cannot be reached on this channel."""


class LoggingEmailProvider(NotificationProvider):
    channel = NotificationChannel.EMAIL

    async def send(self, session, user, *, title, message, priority, kind, data) -> bool:
        if not user.email:
            logger.error(f"[EMAIL] No email address for user {user.id}")
            return False
        logger.info(f"[EMAIL] To: {user.email} | Subject: {title} | {message}")
        return True


class LoggingSmsProvider(NotificationProvider):
    channel = NotificationChannel.SMS

    async def send(self, session, user, *, title, message, priority, kind, data) -> bool:
        if not user.phone:
            logger.error(f"[SMS] No phone number for user {user.id}")
            return False
        logger.info(f"[SMS] To: {user.phone} | {message}")
        return True


class LoggingWhatsAppProvider(NotificationProvider):
    channel = NotificationChannel.WHATSAPP

    async def send(self, session, user, *, title, message, priority, kind, data) -> bool:
        if not user.phone:
            logger.error(f"[WHATSAPP] No phone number for user {user.id}")
            return False
        logger.info(f"[WHATSAPP] To: {user.phone} | {message}")
        return True


class PortalProvider(NotificationProvider):
    channel = NotificationChannel.PORTAL

    async def send(self, session, user, *, title, message, priority, kind, data) -> bool:
        session.add(
            Notification(
                user_id=user.id,
                type=kind,
                title=title,
                message=message,
                priority=priority,
                data=data,
            )
        )
        await session.flush()
        return True


_providers: Dict[NotificationChannel, NotificationProvider] = {
    provider.channel: provider
    for provider in (LoggingEmailProvider(), LoggingSmsProvider(), LoggingWhatsAppProvider(), PortalProvider())
}


def register_provider(provider: NotificationProvider) -> None:
    """Replace the provider used for ``provider.channel``."""
    _providers[provider.channel] = provider


def get_provider(channel: NotificationChannel) -> NotificationProvider:
    return _providers[NotificationChannel(channel)]


async def send_notification(
    session: AsyncSession,
    user: User,
    *,
    title: str,
    message: str,
    channel: NotificationChannel,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    kind: str = "GENERAL",
    data: Optional[Dict[str, Any]] = None,
) -> bool:
    """Send over a single channel and audit the delivery."""
    provider = get_provider(channel)
    delivered = await provider.send(
        session, user, title=title, message=message, priority=priority, kind=kind, data=data
    )
    if delivered:
        await record_audit(
            session,
            action="NOTIFICATION_SENT",
            entity="NOTIFICATION",
            entity_id=user.id,
            user_id=user.id,
            changes={
                "type": NotificationChannel(channel).value,
                "title": title,
                "priority": NotificationPriority(priority).value,
            },
        )
    return delivered


async def send_multi_channel_notification(
    session: AsyncSession,
    user_id: str,
    *,
    title: str,
    message: str,
    channels: Iterable[NotificationChannel] = ALL_CHANNELS,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    kind: str = "GENERAL",
    data: Optional[Dict[str, Any]] = None,
) -> List[NotificationChannel]:
    """Fan a message out over ``channels``.

    Returns the channels that delivered. Raises ``NotFoundError`` for an
    unknown user; per-channel failures are only logged.
    """
    user = await session.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)

    delivered: List[NotificationChannel] = []
    for channel in channels:
        try:
            if await send_notification(
                session,
                user,
                title=title,
                message=message,
                channel=channel,
                priority=priority,
                kind=kind,
                data=data,
            ):
                delivered.append(NotificationChannel(channel))
        except Exception as e:
            logger.error(f"Notification over {channel} to user {user_id} failed: {e}", exc_info=True)
    return delivered


# =====================================================================
# Business notifications
# =====================================================================


async def notify_partner_new_lead(session: AsyncSession, partner_id: str, quote: Quote) -> List[NotificationChannel]:
    message = (
        f"New freight lead available! {quote.cargo_name} from {quote.pickup_city} to {quote.delivery_city}. "
        f"Quantity: {quote.quantity:g} {quote.quantity_unit}. Ready: {quote.cargo_ready_date:%d %b %Y}"
    )
    return await send_multi_channel_notification(
        session,
        partner_id,
        title="New Lead Available",
        message=message,
        priority=NotificationPriority.HIGH,
        kind="NEW_LEAD",
        data={
            "quote_id": quote.id,
            "quote_number": quote.quote_number,
            "cargo_name": quote.cargo_name,
            "pickup_city": quote.pickup_city,
            "delivery_city": quote.delivery_city,
            "quantity": quote.quantity,
            "quantity_unit": quote.quantity_unit,
            "is_hazardous": quote.is_hazardous,
        },
    )


async def notify_low_balance(
    session: AsyncSession, user_id: str, balance: float, threshold: float
) -> List[NotificationChannel]:
    return await send_multi_channel_notification(
        session,
        user_id,
        title="Low Wallet Balance",
        message=(
            f"Your lead wallet balance is ₹{balance:,.2f}, at or below your alert threshold of "
            f"₹{threshold:,.2f}. Submit a payment request to keep receiving leads."
        ),
        channels=(NotificationChannel.EMAIL, NotificationChannel.PORTAL),
        priority=NotificationPriority.HIGH,
        kind="LOW_BALANCE",
        data={"balance": balance, "threshold": threshold},
    )


async def notify_offer_expiring(
    session: AsyncSession, partner_id: str, quote: Quote, remaining_minutes: int
) -> List[NotificationChannel]:
    return await send_multi_channel_notification(
        session,
        partner_id,
        title="Quote Closing Soon",
        message=f"Quote {quote.quote_number} closes in {remaining_minutes} minutes.",
        channels=(NotificationChannel.PORTAL, NotificationChannel.SMS),
        priority=NotificationPriority.URGENT,
        kind="OFFER_EXPIRING",
        data={"quote_id": quote.id, "quote_number": quote.quote_number, "remaining_minutes": remaining_minutes},
    )


async def notify_shipment_update(session: AsyncSession, shipment: Shipment) -> List[NotificationChannel]:
    status = shipment.status.value
    message = f"Shipment {shipment.shipment_number} is now {status.replace('_', ' ').lower()}"
    if shipment.current_location:
        message += f" at {shipment.current_location}"
    return await send_multi_channel_notification(
        session,
        shipment.trader_id,
        title="Shipment Update",
        message=message + ".",
        channels=(NotificationChannel.PORTAL,),
        priority=NotificationPriority.MEDIUM,
        kind="SHIPMENT_UPDATE",
        data={"shipment_id": shipment.id, "status": status},
    )


async def send_verification_email(session: AsyncSession, user: User, token: str) -> bool:
    link = f"{settings.app_url.rstrip('/')}/verify-email?token={token}"
    return await send_notification(
        session,
        user,
        title="Verify your BidChemz Logistics account",
        message=f"Confirm your email address within 24 hours: {link}",
        channel=NotificationChannel.EMAIL,
        kind="EMAIL_VERIFICATION",
    )


async def send_password_reset_email(session: AsyncSession, user: User, token: str) -> bool:
    link = f"{settings.app_url.rstrip('/')}/reset-password?token={token}"
    return await send_notification(
        session,
        user,
        title="Reset your BidChemz Logistics password",
        message=f"Use this link within one hour to choose a new password: {link}",
        channel=NotificationChannel.EMAIL,
        kind="PASSWORD_RESET",
    )
