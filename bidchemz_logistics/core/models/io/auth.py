"""
Authentication I/O models.

Request and response schemas for signup, login, email verification and
password reset.
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from bidchemz_logistics.core.models.domain.enums import UserRole

MIN_PHONE_DIGITS = 10


class SignupRequest(BaseModel):
    """Schema for creating an account."""

    email: EmailStr
    password: str = Field(min_length=1)
    phone: str = Field(description="Contact phone number, at least 10 digits")
    role: UserRole
    company_name: Optional[str] = Field(default=None, max_length=255)
    gstin: Optional[str] = Field(default=None, max_length=32)

    @field_validator("phone")
    @classmethod
    def phone_has_enough_digits(cls, value: str) -> str:
        if len(re.sub(r"\D", "", value)) < MIN_PHONE_DIGITS:
            raise ValueError(f"Phone number must contain at least {MIN_PHONE_DIGITS} digits")
        return value.strip()


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserRead(BaseModel):
    """Public view of an account; never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    phone: str
    role: UserRole
    company_name: Optional[str] = None
    gstin: Optional[str] = None
    short_id: Optional[str] = None
    is_verified: bool
    is_active: bool
    policy_version_accepted: Optional[str] = None
    created_at: datetime


class AuthResponse(BaseModel):
    user: UserRead
    token: Optional[str] = Field(default=None, description="Bearer token; absent until the email is verified")
    message: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(min_length=1)
    password: str = Field(min_length=1)


class MessageResponse(BaseModel):
    message: str
