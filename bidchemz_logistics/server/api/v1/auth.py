"""
Authentication endpoints.

Signup, login, email verification and password reset. Accounts stay locked
until the emailed verification link is used.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.io.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    UserRead,
)
from bidchemz_logistics.server.dependencies import get_current_user
from bidchemz_logistics.services import accounts

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])


@router.post(
    "/signup",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign Up",
    description="Register a trader or logistics partner account. A verification link is emailed to the new user.",
    response_description="The created account, without a token until the email is verified.",
    responses={
        201: {"description": "Account created"},
        400: {"description": "Missing fields, invalid role, short phone number or weak password"},
        403: {"description": "Admin accounts cannot sign up"},
        409: {"description": "Email already registered"},
    },
)
async def signup(data: SignupRequest, session: AsyncSession = Depends(get_session)) -> AuthResponse:
    user = await accounts.register_user(session, data)
    await session.commit()
    await session.refresh(user)
    return AuthResponse(
        user=UserRead.model_validate(user),
        message="Signup successful. Please verify your email.",
    )


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log In",
    description="Exchange email and password for a bearer token.",
    response_description="The account and its access token.",
    responses={
        200: {"description": "Login successful"},
        401: {"description": "Invalid email or password"},
        403: {"description": "Account deactivated or email not verified"},
    },
)
async def login(data: LoginRequest, session: AsyncSession = Depends(get_session)) -> AuthResponse:
    try:
        result = await accounts.authenticate(session, data.email, data.password)
    except accounts.AuthenticationError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    await session.commit()
    await session.refresh(result.user)
    return AuthResponse(user=UserRead.model_validate(result.user), token=result.token, message="Login successful")


@router.get(
    "/me",
    response_model=UserRead,
    summary="Current User",
    description="Return the account behind the bearer token.",
    response_description="The authenticated account.",
)
async def me(user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(user)


@router.get(
    "/verify-email",
    response_model=MessageResponse,
    summary="Verify Email",
    description="Consume an email verification token.",
    responses={400: {"description": "Invalid or expired token"}},
)
async def verify_email(
    token: str = Query(min_length=1),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await accounts.verify_email(session, token)
    await session.commit()
    return MessageResponse(message="Email verified successfully")


@router.post(
    "/forgot-password",
    response_model=MessageResponse,
    summary="Forgot Password",
    description="Email a password reset link. The response is the same whether or not the email is registered.",
)
async def forgot_password(
    data: ForgotPasswordRequest,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await accounts.request_password_reset(session, data.email)
    await session.commit()
    return MessageResponse(message="If the email exists, a reset link has been sent")


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    summary="Reset Password",
    description="Set a new password using a reset token.",
    responses={400: {"description": "Invalid or expired token, or weak password"}},
)
async def reset_password(
    data: ResetPasswordRequest,
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    await accounts.reset_password(session, data.token, data.password)
    await session.commit()
    return MessageResponse(message="Password updated")
