"""
User account entity models.

This module contains the account table shared by traders, logistics partners
and administrators, plus the single-use tokens issued for email verification
and password resets.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from bidchemz_logistics.core.models.domain.enums import UserRole

from ..base import Base, UTCDateTime, new_id, utc_now


class UserBase(Base):
    """Base fields for user entity."""

    email: str = Field(max_length=255, unique=True, index=True, description="Login email, stored lowercase")
    phone: str = Field(max_length=32, description="Contact phone number")
    role: UserRole = Field(description="Account role")
    company_name: Optional[str] = Field(default=None, max_length=255)
    gstin: Optional[str] = Field(default=None, max_length=32, description="Indian GST identification number")


class User(UserBase, table=True):
    """Entity for marketplace accounts.

    Table: users
    """

    __tablename__ = "users"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    password_hash: str = Field(max_length=255)
    short_id: Optional[str] = Field(default=None, max_length=32, unique=True, index=True)

    is_verified: bool = Field(default=False)
    is_active: bool = Field(default=True)

    policy_version_accepted: Optional[str] = Field(default=None, max_length=16)
    policy_accepted_at: Optional[datetime] = Field(default=None, sa_type=UTCDateTime)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now}, sa_type=UTCDateTime)

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"


class EmailVerificationToken(Base, table=True):
    """Token mailed to a new user; valid for 24 hours.

    Table: email_verification_tokens
    """

    __tablename__ = "email_verification_tokens"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    token: str = Field(max_length=128, unique=True, index=True)
    expires_at: datetime = Field(sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)


class PasswordResetToken(Base, table=True):
    """Token mailed on a forgot-password request; valid for one hour.

    Table: password_reset_tokens
    """

    __tablename__ = "password_reset_tokens"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    token: str = Field(max_length=128, unique=True, index=True)
    expires_at: datetime = Field(sa_type=UTCDateTime)
    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
