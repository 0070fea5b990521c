"""
User repository.

Data access for accounts and the verification/reset tokens that belong to
them.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.models.domain.enums import UserRole

from ..entities.partner_capabilities import PartnerCapability
from ..entities.users import EmailVerificationToken, PasswordResetToken, User
from .base import SQLModelRepository


class UserRepository(SQLModelRepository[User]):
    """Repository for user accounts."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Look up a user by email, case-insensitively."""
        result = await self.session.execute(select(User).where(User.email == email.strip().lower()))
        return result.scalars().first()

    async def short_id_exists(self, short_id: str) -> bool:
        result = await self.session.execute(select(User.id).where(User.short_id == short_id))
        return result.first() is not None

    async def list_by_role(self, role: Optional[UserRole] = None, limit: int = 100) -> List[User]:
        return await self.list(limit=limit, filters={"role": role})

    async def list_matchable_partners(self) -> List[tuple[User, Optional[PartnerCapability]]]:
        """Active, verified logistics partners with their capability row, if any."""
        stmt = (
            select(User, PartnerCapability)
            .join(PartnerCapability, PartnerCapability.user_id == User.id, isouter=True)
            .where(
                User.role == UserRole.LOGISTICS_PARTNER,
                User.is_active == True,  # noqa: E712
                User.is_verified == True,  # noqa: E712
            )
            .order_by(User.created_at.asc())
        )
        result = await self.session.execute(stmt)
        return [(user, capability) for user, capability in result.all()]

    async def get_capability(self, user_id: str) -> Optional[PartnerCapability]:
        result = await self.session.execute(select(PartnerCapability).where(PartnerCapability.user_id == user_id))
        return result.scalars().first()

    # -----------------------------------------------------------------
    # Tokens
    # -----------------------------------------------------------------

    async def get_verification_token(self, token: str) -> Optional[EmailVerificationToken]:
        result = await self.session.execute(
            select(EmailVerificationToken).where(EmailVerificationToken.token == token)
        )
        return result.scalars().first()

    async def get_reset_token(self, token: str) -> Optional[PasswordResetToken]:
        result = await self.session.execute(select(PasswordResetToken).where(PasswordResetToken.token == token))
        return result.scalars().first()

    async def delete_reset_tokens(self, user_id: str) -> None:
        await self.session.execute(delete(PasswordResetToken).where(PasswordResetToken.user_id == user_id))

    async def delete_verification_tokens(self, user_id: str) -> None:
        await self.session.execute(
            delete(EmailVerificationToken).where(EmailVerificationToken.user_id == user_id)
        )
