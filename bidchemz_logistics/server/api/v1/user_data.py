"""
Personal data endpoints: export everything stored about the caller, or
anonymise and deactivate the account.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.models.io.auth import MessageResponse
from bidchemz_logistics.server.dependencies import get_current_user
from bidchemz_logistics.services.data_export import delete_account, export_user_data

router = APIRouter(tags=["user-data"])


@router.get(
    "/export-data",
    summary="Export My Data",
    description="Account, capability, wallet, quotes, offers, ledger and document metadata as JSON.",
    response_description="A JSON document with everything stored about the caller.",
)
async def export_data(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> Dict[str, Any]:
    export = await export_user_data(session, user)
    await session.commit()
    return export


@router.delete(
    "/delete-account",
    response_model=MessageResponse,
    summary="Delete My Account",
    description="Anonymise personal fields and deactivate the account. Business records are kept for compliance.",
    responses={409: {"description": "Active quotes or shipments remain"}},
)
async def delete_my_account(
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await delete_account(session, user)
    await session.commit()
    return MessageResponse(message="Account deleted. Personal data has been anonymised.")
