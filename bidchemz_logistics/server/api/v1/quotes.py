"""
API endpoints for freight requests (quotes).

Traders create quotes and see only their own; partners and admins see every
quote. Admins may edit, delete, extend the bidding window and inspect which
partners a quote matches.
"""

from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.repositories.quotes import QuoteRepository
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import QuoteStatus, UserRole
from bidchemz_logistics.core.models.io.auth import MessageResponse
from bidchemz_logistics.core.models.io.quotes import (
    MatchedPartnerRead,
    PaginationMeta,
    QuoteCreate,
    QuoteCreateResponse,
    QuoteListResponse,
    QuotePage,
    QuoteRead,
    QuoteTimerExtend,
    QuoteTimerRead,
    QuoteUpdate,
)
from bidchemz_logistics.server.dependencies import get_current_user, require_admin, require_trader
from bidchemz_logistics.services import quote_timer
from bidchemz_logistics.services.audit import record_audit
from bidchemz_logistics.services.documents import purge_blobs
from bidchemz_logistics.services.matching import find_matching_partners
from bidchemz_logistics.services.pagination import calculate_pagination, get_page_params
from bidchemz_logistics.services.quotes import create_quote, delete_quote

logger = get_logger(__name__)

router = APIRouter(tags=["quotes"])


def _scope_trader(user: User) -> Optional[str]:
    return user.id if UserRole(user.role) == UserRole.TRADER else None


async def _get_visible_quote(session: AsyncSession, user: User, quote_id: str) -> Quote:
    quote = await QuoteRepository(session).get_by_id(quote_id)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote not found")
    if UserRole(user.role) == UserRole.TRADER and quote.trader_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return quote


def _timer_read(quote: Quote) -> QuoteTimerRead:
    remaining = quote_timer.get_remaining_time(quote)
    return QuoteTimerRead(
        quote_id=quote.id,
        status=quote.status,
        expires_at=quote.expires_at,
        remaining_minutes=remaining.remaining_minutes,
        has_expired=remaining.has_expired,
    )


@router.get(
    "",
    response_model=QuoteListResponse,
    summary="List Quotes",
    description="List freight requests, newest first. Traders only see their own requests.",
    response_description="A page of quotes with the total match count.",
)
async def list_quotes(
    status_filter: Optional[QuoteStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> QuoteListResponse:
    quotes, total = await QuoteRepository(session).search(
        trader_id=_scope_trader(user), status=status_filter, limit=limit, offset=offset
    )
    return QuoteListResponse(
        quotes=[QuoteRead.model_validate(q) for q in quotes],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get(
    "/paginated",
    response_model=QuotePage,
    summary="List Quotes (paginated)",
    description="Page/limit pagination over quotes. `limit` is clamped to 100 and `sort_order` is `asc` or `desc`.",
    response_description="Quotes for the requested page with pagination metadata.",
)
async def list_quotes_paginated(
    page: Optional[int] = Query(default=None),
    limit: Optional[int] = Query(default=None),
    sort_order: Optional[str] = Query(default=None),
    status_filter: Optional[QuoteStatus] = Query(default=None, alias="status"),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> QuotePage:
    params = get_page_params(page, limit, sort_order)
    quotes, total = await QuoteRepository(session).search(
        trader_id=_scope_trader(user),
        status=status_filter,
        limit=params.limit,
        offset=params.offset,
        newest_first=params.newest_first,
    )
    return QuotePage(
        data=[QuoteRead.model_validate(q) for q in quotes],
        pagination=PaginationMeta(**calculate_pagination(params.page, params.limit, total)),
    )


@router.post(
    "",
    response_model=QuoteCreateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Quote",
    description=(
        "Submit a freight request. Matching partners are notified and the bidding window "
        "opens when at least one partner matches."
    ),
    response_description="The stored quote and the number of partners it was offered to.",
    responses={
        201: {"description": "Quote created"},
        400: {"description": "Missing fields, or hazardous cargo without a hazard class"},
        403: {"description": "Only traders can create freight requests"},
    },
)
async def create_quote_endpoint(
    data: QuoteCreate,
    user: User = Depends(require_trader),
    session: AsyncSession = Depends(get_session),
) -> QuoteCreateResponse:
    """
    Create a freight request.

    - Hazardous cargo must name its UN hazard class.
    - The quote expires 48 hours after submission unless a matching partner
      starts the shorter bidding timer.
    """
    quote, partners = await create_quote(session, user.id, data.to_entity_fields())
    await session.commit()
    await session.refresh(quote)
    return QuoteCreateResponse(quote=QuoteRead.model_validate(quote), matched_partners=len(partners))


@router.get(
    "/{quote_id}",
    response_model=QuoteRead,
    summary="Get Quote",
    description="Retrieve one freight request.",
    responses={403: {"description": "Trader does not own the quote"}, 404: {"description": "Quote not found"}},
)
async def get_quote(
    quote_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> QuoteRead:
    return QuoteRead.model_validate(await _get_visible_quote(session, user, quote_id))


@router.patch(
    "/{quote_id}",
    response_model=QuoteRead,
    summary="Update Quote",
    description="Admin edit of a quote's status, expiry, notes or external bid reference.",
    responses={404: {"description": "Quote not found"}},
)
async def update_quote(
    quote_id: str,
    data: QuoteUpdate,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> QuoteRead:
    repo = QuoteRepository(session)
    quote = await repo.get_by_id(quote_id)
    if quote is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quote not found")

    changes = data.model_dump(exclude_unset=True)
    for key, value in changes.items():
        setattr(quote, key, value)
    quote = await repo.update(quote)
    await record_audit(
        session,
        action="UPDATE",
        entity="QUOTE",
        entity_id=quote.id,
        user_id=admin.id,
        quote_id=quote.id,
        changes={key: str(value) for key, value in changes.items()},
    )
    await session.commit()
    await session.refresh(quote)
    return QuoteRead.model_validate(quote)


@router.delete(
    "/{quote_id}",
    response_model=MessageResponse,
    summary="Delete Quote",
    description="Admin removal of a quote with its offers, shipments and documents.",
    responses={404: {"description": "Quote not found"}},
)
async def delete_quote_endpoint(
    quote_id: str,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    blob_paths = await delete_quote(session, quote_id, admin.id)
    await session.commit()
    purge_blobs(blob_paths)
    return MessageResponse(message="Quote deleted successfully")


@router.get(
    "/{quote_id}/timer",
    response_model=QuoteTimerRead,
    summary="Get Quote Timer",
    description="Time remaining on the quote's bidding window.",
)
async def get_quote_timer(
    quote_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> QuoteTimerRead:
    return _timer_read(await _get_visible_quote(session, user, quote_id))


@router.post(
    "/{quote_id}/timer",
    response_model=QuoteTimerRead,
    summary="Extend Quote Timer",
    description="Admin extension of a running bidding window.",
    responses={400: {"description": "Timer not started"}, 404: {"description": "Quote not found"}},
)
async def extend_quote_timer(
    quote_id: str,
    data: QuoteTimerExtend,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> QuoteTimerRead:
    quote = await quote_timer.extend_quote_timer(session, quote_id, data.additional_minutes, user_id=admin.id)
    await session.commit()
    await session.refresh(quote)
    return _timer_read(quote)


@router.get(
    "/{quote_id}/matches",
    response_model=List[MatchedPartnerRead],
    summary="Matching Partners",
    description="Partners whose capabilities and wallet currently qualify them for the quote, premium first.",
    responses={404: {"description": "Quote not found"}},
)
async def get_quote_matches(
    quote_id: str,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> List[MatchedPartnerRead]:
    partners = await find_matching_partners(session, quote_id)
    return [MatchedPartnerRead(**vars(p)) for p in partners]
