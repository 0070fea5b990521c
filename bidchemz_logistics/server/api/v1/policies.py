"""Platform policy endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.models.domain.enums import UserRole
from bidchemz_logistics.core.models.io.policies import PolicyAccept, PolicyListResponse, PolicyRead
from bidchemz_logistics.server.dependencies import get_current_user
from bidchemz_logistics.services import policies as policy_service

router = APIRouter(tags=["policies"])


def _policy_list(user: User) -> PolicyListResponse:
    return PolicyListResponse(
        current_version=policy_service.CURRENT_POLICY_VERSION,
        accepted_version=user.policy_version_accepted,
        needs_acceptance=policy_service.needs_policy_acceptance(user),
        policies=[PolicyRead(**vars(p)) for p in policy_service.policies_for_role(UserRole(user.role)).values()],
    )


@router.get(
    "",
    response_model=PolicyListResponse,
    summary="List Policies",
    description="Policies that apply to the caller's role and whether the current version still needs accepting.",
)
async def list_policies(user: User = Depends(get_current_user)) -> PolicyListResponse:
    return _policy_list(user)


@router.post(
    "/accept",
    response_model=PolicyListResponse,
    summary="Accept Policies",
    responses={400: {"description": "Version is not the current one"}},
)
async def accept_policies(
    data: PolicyAccept,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> PolicyListResponse:
    user = await policy_service.accept_policies(session, user, data.version)
    await session.commit()
    await session.refresh(user)
    return _policy_list(user)
