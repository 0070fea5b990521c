"""
API endpoints for wallet top-up (payment) requests.

Partners file requests; admins list every request and approve or reject them.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.payment_requests import PaymentRequest
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.models.domain.enums import PaymentRequestStatus, UserRole
from bidchemz_logistics.core.models.io.wallet import PaymentRequestCreate, PaymentRequestRead, PaymentRequestReview
from bidchemz_logistics.server.dependencies import get_current_user, require_admin, require_partner
from bidchemz_logistics.services.payment_requests import create_payment_request, review_payment_request

router = APIRouter(tags=["payment-requests"])


@router.get(
    "",
    response_model=List[PaymentRequestRead],
    summary="List Payment Requests",
    description="Admins see every request, optionally filtered by status; everybody else sees their own.",
)
async def list_payment_requests(
    status_filter: Optional[PaymentRequestStatus] = Query(default=None, alias="status"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> List[PaymentRequestRead]:
    stmt = select(PaymentRequest)
    if UserRole(user.role) != UserRole.ADMIN:
        stmt = stmt.where(PaymentRequest.user_id == user.id)
    if status_filter is not None:
        stmt = stmt.where(PaymentRequest.status == status_filter)
    result = await session.execute(stmt.order_by(PaymentRequest.created_at.desc()))
    return [PaymentRequestRead.model_validate(r) for r in result.scalars().all()]


@router.post(
    "",
    response_model=PaymentRequestRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Payment Request",
    description="Report an offline payment so an admin can credit the lead wallet.",
    responses={400: {"description": "Amount not positive or payment method missing"}},
)
async def create_payment_request_endpoint(
    data: PaymentRequestCreate,
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> PaymentRequestRead:
    request = await create_payment_request(session, partner, data)
    await session.commit()
    await session.refresh(request)
    return PaymentRequestRead.model_validate(request)


@router.get(
    "/{request_id}",
    response_model=PaymentRequestRead,
    summary="Get Payment Request",
    responses={403: {"description": "Not the requester"}, 404: {"description": "Payment request not found"}},
)
async def get_payment_request(
    request_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> PaymentRequestRead:
    request = await session.get(PaymentRequest, request_id)
    if request is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment request not found")
    if UserRole(user.role) != UserRole.ADMIN and request.user_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return PaymentRequestRead.model_validate(request)


@router.put(
    "/{request_id}",
    response_model=PaymentRequestRead,
    summary="Review Payment Request",
    description="Approve (credits the wallet) or reject a pending request.",
    responses={
        400: {"description": "Invalid status or request already reviewed"},
        404: {"description": "Payment request not found"},
    },
)
async def review_payment_request_endpoint(
    request_id: str,
    data: PaymentRequestReview,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> PaymentRequestRead:
    request = await review_payment_request(session, admin, request_id, data.status, data.review_notes)
    await session.commit()
    await session.refresh(request)
    return PaymentRequestRead.model_validate(request)
