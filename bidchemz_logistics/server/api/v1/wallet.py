"""
Lead wallet endpoints.

Partners read their balance and ledger and tune low-balance alerts. Money
only enters a wallet through an approved payment request.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.models.io.wallet import (
    LeadTransactionRead,
    WalletRead,
    WalletResponse,
    WalletSettingsUpdate,
)
from bidchemz_logistics.server.dependencies import require_partner
from bidchemz_logistics.services import wallet as wallet_service

router = APIRouter(tags=["wallet"])


async def _wallet_or_404(session: AsyncSession, user: User):
    wallet = await wallet_service.get_wallet(session, user.id)
    if wallet is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Wallet not found")
    return wallet


@router.get(
    "",
    response_model=WalletResponse,
    summary="Get Wallet",
    description="The partner's lead wallet with its 50 most recent transactions.",
    responses={403: {"description": "Only logistics partners"}, 404: {"description": "Wallet not found"}},
)
async def get_wallet(
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> WalletResponse:
    wallet = await _wallet_or_404(session, partner)
    transactions = await wallet_service.transaction_history(session, wallet)
    return WalletResponse(
        wallet=WalletRead.model_validate(wallet),
        transactions=[LeadTransactionRead.model_validate(t) for t in transactions],
    )


@router.post(
    "",
    status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
    summary="Recharge Wallet (disabled)",
    description="Direct recharge is disabled; file a payment request instead.",
    responses={405: {"description": "Always"}},
)
async def recharge_wallet(partner: User = Depends(require_partner)):
    raise HTTPException(
        status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
        detail=(
            "Direct wallet recharge is disabled. Please use /api/v1/payment-requests "
            "to submit a recharge request for admin approval."
        ),
    )


@router.get(
    "/settings",
    response_model=WalletRead,
    summary="Get Wallet Alert Settings",
)
async def get_wallet_settings(
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> WalletRead:
    return WalletRead.model_validate(await _wallet_or_404(session, partner))


@router.put(
    "/settings",
    response_model=WalletRead,
    summary="Update Wallet Alert Settings",
    description="Toggle low-balance alerts and set the alert threshold (0 to 1,000,000).",
    responses={400: {"description": "Threshold out of range"}},
)
async def update_wallet_settings(
    data: WalletSettingsUpdate,
    partner: User = Depends(require_partner),
    session: AsyncSession = Depends(get_session),
) -> WalletRead:
    wallet = await wallet_service.get_or_create_wallet(session, partner.id)
    wallet = await wallet_service.update_alert_settings(
        session, wallet, alert_threshold=data.alert_threshold, low_balance_alert=data.low_balance_alert
    )
    await session.commit()
    await session.refresh(wallet)
    return WalletRead.model_validate(wallet)
