"""
Offline wallet top-ups.

Partners report a bank transfer, UPI payment or cheque; an admin approves it,
which credits the wallet, or rejects it. A request is reviewed exactly once.
"""

from __future__ import annotations

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database.base import utc_now
from bidchemz_logistics.core.database.entities.payment_requests import PaymentRequest
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.errors import NotFoundError, ValidationFailedError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import PaymentRequestStatus, TransactionType
from bidchemz_logistics.core.models.io.wallet import PaymentRequestCreate

from .audit import record_audit
from .wallet import credit_wallet, get_or_create_wallet

logger = get_logger(__name__)


async def create_payment_request(session: AsyncSession, partner: User, data: PaymentRequestCreate) -> PaymentRequest:
    request = PaymentRequest(user_id=partner.id, **data.model_dump())
    session.add(request)
    await session.flush()
    await record_audit(
        session,
        action="CREATE_PAYMENT_REQUEST",
        entity="PAYMENT_REQUEST",
        entity_id=request.id,
        user_id=partner.id,
        changes={"amount": request.amount, "payment_method": data.payment_method.value},
    )
    logger.info(f"Payment request {request.id} for ₹{request.amount:.2f} filed by {partner.id}")
    return request


async def review_payment_request(
    session: AsyncSession,
    admin: User,
    request_id: str,
    status: PaymentRequestStatus,
    review_notes: Optional[str] = None,
) -> PaymentRequest:
    """Approve or reject a pending request; approval credits the partner's wallet.

    Raises:
        NotFoundError: unknown request.
        ValidationFailedError: ``status`` is not a decision, or the request was already reviewed.
    """
    if status not in (PaymentRequestStatus.APPROVED, PaymentRequestStatus.REJECTED):
        raise ValidationFailedError("Invalid status. Must be APPROVED or REJECTED")

    request = await session.get(PaymentRequest, request_id)
    if request is None:
        raise NotFoundError("Payment request")
    if request.status != PaymentRequestStatus.PENDING:
        raise ValidationFailedError("Payment request has already been reviewed")

    request.status = status
    request.reviewed_by = admin.id
    request.reviewed_at = utc_now()
    request.review_notes = review_notes
    session.add(request)

    changes = {"amount": request.amount, "user_id": request.user_id}
    if status == PaymentRequestStatus.APPROVED:
        wallet = await get_or_create_wallet(session, request.user_id)
        await credit_wallet(
            session,
            wallet,
            request.amount,
            description=f"Manual recharge approved by admin (Ref: {request.reference_number or 'N/A'})",
            transaction_type=TransactionType.CREDIT,
        )
        changes["new_balance"] = wallet.balance

    await record_audit(
        session,
        action=f"{'APPROVE' if status == PaymentRequestStatus.APPROVED else 'REJECT'}_PAYMENT_REQUEST",
        entity="PAYMENT_REQUEST",
        entity_id=request.id,
        user_id=admin.id,
        changes=changes,
    )
    await session.flush()
    logger.info(f"Payment request {request.id} {status.value.lower()} by {admin.id}")
    return request
