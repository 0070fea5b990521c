"""
Personal data export and account deletion.

Accounts are anonymised and deactivated rather than deleted, so quotes,
shipments and the wallet ledger stay consistent for the other party and for
accounting.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi.encoders import jsonable_encoder
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database.base import utc_isoformat, utc_now
from bidchemz_logistics.core.database.entities.documents import Document
from bidchemz_logistics.core.database.entities.offers import Offer
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.shipments import Shipment
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.entities.wallets import LeadTransaction
from bidchemz_logistics.core.database.repositories.users import UserRepository
from bidchemz_logistics.core.database.repositories.wallets import LeadWalletRepository
from bidchemz_logistics.core.errors import ConflictError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import QuoteStatus, ShipmentStatus

from .audit import record_audit

logger = get_logger(__name__)

ACTIVE_QUOTE_STATUSES = (QuoteStatus.SUBMITTED, QuoteStatus.MATCHING, QuoteStatus.OFFERS_AVAILABLE)
ACTIVE_SHIPMENT_STATUSES = (ShipmentStatus.BOOKED, ShipmentStatus.PICKUP_SCHEDULED, ShipmentStatus.IN_TRANSIT)

ANONYMIZED_COMPANY = "Anonymized User"
ANONYMIZED_PHONE = "+00000000000"

RETENTION_POLICY = {
    "account_data": "5 years after account closure",
    "transaction_data": "7 years (legal requirement)",
    "audit_logs": "3 years",
    "documents": "5 years after shipment completion",
}


async def _all(session: AsyncSession, stmt) -> list:
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def export_user_data(session: AsyncSession, user: User) -> Dict[str, Any]:
    """Everything the platform stores about ``user`` as JSON-ready data."""
    capability = await UserRepository(session).get_capability(user.id)
    wallet = await LeadWalletRepository(session).get_by_user(user.id)
    transactions = (
        await _all(session, select(LeadTransaction).where(LeadTransaction.wallet_id == wallet.id)) if wallet else []
    )
    documents = await _all(session, select(Document).where(Document.uploaded_by == user.id))

    export = {
        "exported_at": utc_isoformat(utc_now()),
        "user": {
            "id": user.id,
            "email": user.email,
            "phone": user.phone,
            "role": user.role.value,
            "company_name": user.company_name,
            "gstin": user.gstin,
            "is_verified": user.is_verified,
            "is_active": user.is_active,
            "policy_version_accepted": user.policy_version_accepted,
            "created_at": user.created_at,
        },
        "partner_capability": capability.model_dump() if capability else None,
        "wallet": {"balance": wallet.balance, "currency": wallet.currency} if wallet else None,
        "quotes": [q.model_dump() for q in await _all(session, select(Quote).where(Quote.trader_id == user.id))],
        "offers": [o.model_dump() for o in await _all(session, select(Offer).where(Offer.partner_id == user.id))],
        "lead_transactions": [t.model_dump() for t in transactions],
        # keys and storage paths stay private
        "documents": [
            {"id": d.id, "file_name": d.file_name, "document_type": d.document_type.value, "created_at": d.created_at}
            for d in documents
        ],
        "retention_policy": RETENTION_POLICY,
    }
    await record_audit(session, action="EXPORT_DATA", entity="USER", entity_id=user.id, user_id=user.id)
    return jsonable_encoder(export)


async def delete_account(session: AsyncSession, user: User) -> User:
    """Anonymise and deactivate ``user``.

    Raises:
        ConflictError: the user still has open quotes or shipments in flight.
    """
    open_quotes = await _all(
        session,
        select(Quote.id).where(Quote.trader_id == user.id, Quote.status.in_(ACTIVE_QUOTE_STATUSES)),
    )
    active_shipments = await _all(
        session,
        select(Shipment.id).where(
            (Shipment.trader_id == user.id) | (Shipment.partner_id == user.id),
            Shipment.status.in_(ACTIVE_SHIPMENT_STATUSES),
        ),
    )
    if open_quotes or active_shipments:
        raise ConflictError(
            "Cannot delete account with active quotes or shipments. Please complete or cancel them first."
        )

    user.email = f"deleted-user-{user.id}@anonymized.local"
    user.phone = ANONYMIZED_PHONE
    user.company_name = ANONYMIZED_COMPANY
    user.gstin = None
    user.is_active = False
    session.add(user)
    await session.flush()

    await record_audit(session, action="DELETE_ACCOUNT", entity="USER", entity_id=user.id, user_id=user.id)
    logger.info(f"User {user.id} anonymised and deactivated")
    return user
