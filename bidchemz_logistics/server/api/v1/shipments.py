"""
API endpoints for shipments.

Shipments are created by offer selection. Traders and partners see the
shipments they are party to; the carrying partner posts tracking updates and
the trader reviews the delivery.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.documents import Document
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.repositories.shipments import ShipmentRepository
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import ShipmentStatus, UserRole
from bidchemz_logistics.core.models.io.auth import MessageResponse
from bidchemz_logistics.core.models.io.shipments import (
    ShipmentListResponse,
    ShipmentRead,
    ShipmentReview,
    ShipmentTracking,
    ShipmentUpdate,
)
from bidchemz_logistics.server.dependencies import get_current_user, require_admin, require_trader
from bidchemz_logistics.services import shipments as shipment_service
from bidchemz_logistics.services.audit import record_audit
from bidchemz_logistics.services.documents import purge_blobs

logger = get_logger(__name__)

router = APIRouter(tags=["shipments"])


@router.get(
    "",
    response_model=ShipmentListResponse,
    summary="List Shipments",
    description="Traders see their bookings, partners the shipments they carry, admins everything.",
    response_description="Shipments, newest first.",
)
async def list_shipments(
    status_filter: Optional[ShipmentStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=50, ge=1, le=100),
    offset: int = Query(default=0, ge=0),
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ShipmentListResponse:
    role = UserRole(user.role)
    trader_id = user.id if role == UserRole.TRADER else None
    partner_id = user.id if role == UserRole.LOGISTICS_PARTNER else None
    repo = ShipmentRepository(session)
    shipments = await repo.search(
        trader_id=trader_id, partner_id=partner_id, status=status_filter, limit=limit, offset=offset
    )
    total = await repo.count({"trader_id": trader_id, "partner_id": partner_id, "status": status_filter})
    return ShipmentListResponse(shipments=[ShipmentRead.model_validate(s) for s in shipments], total=total)


@router.get(
    "/{shipment_id}",
    response_model=ShipmentRead,
    summary="Get Shipment",
    responses={403: {"description": "Not a party to the shipment"}, 404: {"description": "Shipment not found"}},
)
async def get_shipment(
    shipment_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ShipmentRead:
    return ShipmentRead.model_validate(await shipment_service.get_visible_shipment(session, user, shipment_id))


@router.patch(
    "/{shipment_id}",
    response_model=ShipmentRead,
    summary="Update Shipment",
    description=(
        "Tracking update by the carrying partner or an admin. "
        "Status changes notify the trader and the marketplace webhook."
    ),
    responses={403: {"description": "Not the carrying partner"}, 404: {"description": "Shipment not found"}},
)
async def update_shipment(
    shipment_id: str,
    data: ShipmentUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ShipmentRead:
    shipment = await shipment_service.update_shipment(
        session,
        user,
        shipment_id,
        status=data.status,
        current_location=data.current_location,
        notes=data.notes,
    )
    await session.commit()
    await session.refresh(shipment)
    return ShipmentRead.model_validate(shipment)


@router.get(
    "/{shipment_id}/track",
    response_model=ShipmentTracking,
    summary="Track Shipment",
    description="Current status, location and full tracking history.",
)
async def track_shipment(
    shipment_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> ShipmentTracking:
    shipment = await shipment_service.get_visible_shipment(session, user, shipment_id)
    return ShipmentTracking(
        shipment_number=shipment.shipment_number,
        status=shipment.status,
        current_location=shipment.current_location,
        estimated_delivery=shipment.estimated_delivery,
        tracking_events=shipment.tracking_events or [],
    )


@router.post(
    "/{shipment_id}/review",
    response_model=ShipmentRead,
    summary="Review Shipment",
    description="Trader rating (1-5) and optional review of a delivered shipment.",
    responses={400: {"description": "Shipment not delivered yet"}, 403: {"description": "Not the trader's shipment"}},
)
async def review_shipment(
    shipment_id: str,
    data: ShipmentReview,
    trader: User = Depends(require_trader),
    session: AsyncSession = Depends(get_session),
) -> ShipmentRead:
    shipment = await shipment_service.review_shipment(session, trader, shipment_id, data.rating, data.review)
    await session.commit()
    await session.refresh(shipment)
    return ShipmentRead.model_validate(shipment)


@router.delete(
    "/{shipment_id}",
    response_model=MessageResponse,
    summary="Delete Shipment",
    description="Admin removal of a shipment and its documents.",
    responses={404: {"description": "Shipment not found"}},
)
async def delete_shipment(
    shipment_id: str,
    admin: User = Depends(require_admin),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    repo = ShipmentRepository(session)
    shipment = await repo.get_by_id(shipment_id)
    if shipment is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Shipment not found")

    documents = await session.execute(select(Document).where(Document.shipment_id == shipment_id))
    blob_paths = []
    for document in documents.scalars().all():
        blob_paths.append(document.storage_path)
        await session.delete(document)
    quote_id = shipment.quote_id
    await repo.delete(shipment_id)
    await record_audit(
        session, action="DELETE", entity="SHIPMENT", entity_id=shipment_id, user_id=admin.id, quote_id=quote_id
    )
    await session.commit()
    purge_blobs(blob_paths)
    return MessageResponse(message="Shipment deleted successfully")
