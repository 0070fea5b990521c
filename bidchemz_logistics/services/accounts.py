"""
Account lifecycle: signup, login, email verification and password reset.

Emails are addressed case-insensitively; they are stored lowercase. New
accounts start unverified and cannot log in until the emailed token is used.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database.base import as_utc, utc_now
from bidchemz_logistics.core.database.entities.users import EmailVerificationToken, PasswordResetToken, User
from bidchemz_logistics.core.database.repositories.users import UserRepository
from bidchemz_logistics.core.errors import ConflictError, PermissionDeniedError, ValidationFailedError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import UserRole
from bidchemz_logistics.core.models.io.auth import SignupRequest

from .audit import record_audit
from .notifications import send_password_reset_email, send_verification_email
from .password_policy import validate_password_strength
from .security import (
    TokenPayload,
    create_access_token,
    generate_short_id,
    generate_token_hex,
    hash_password,
    verify_password,
)
from .wallet import get_or_create_wallet

logger = get_logger(__name__)

VERIFICATION_TOKEN_TTL = timedelta(hours=24)
RESET_TOKEN_TTL = timedelta(hours=1)
INVALID_CREDENTIALS = "Invalid email or password"
INVALID_OR_EXPIRED_TOKEN = "Invalid or expired token"


class AuthenticationError(Exception):
    """Raised on a failed login; the router maps it to 401."""


@dataclass
class LoginResult:
    user: User
    token: str


def _check_password(password: str) -> None:
    result = validate_password_strength(password)
    if not result.is_valid:
        raise ValidationFailedError("Weak password", extra={"errors": result.errors})


async def _unique_short_id(repo: UserRepository, role: UserRole) -> str:
    while True:
        short_id = generate_short_id(role)
        if not await repo.short_id_exists(short_id):
            return short_id


async def register_user(session: AsyncSession, data: SignupRequest) -> User:
    """Create an unverified account and mail its verification token.

    Logistics partners also get an empty lead wallet.

    Raises:
        PermissionDeniedError: admin accounts cannot sign up.
        ValidationFailedError: the password fails the strength policy.
        ConflictError: the email is already registered.
    """
    if data.role == UserRole.ADMIN:
        raise PermissionDeniedError("Admin signup not allowed")
    _check_password(data.password)

    repo = UserRepository(session)
    email = data.email.strip().lower()
    if await repo.get_by_email(email) is not None:
        raise ConflictError("User already exists")

    user = User(
        email=email,
        password_hash=hash_password(data.password),
        phone=data.phone,
        role=data.role,
        company_name=data.company_name,
        gstin=data.gstin,
        short_id=await _unique_short_id(repo, data.role),
    )
    await repo.create(user)

    if data.role == UserRole.LOGISTICS_PARTNER:
        await get_or_create_wallet(session, user.id)

    await issue_verification_token(session, user)
    await record_audit(session, action="SIGNUP", entity="USER", entity_id=user.id, user_id=user.id)
    logger.info(f"[AUTH] Registered {data.role.value} account {user.id}")
    return user


async def issue_verification_token(session: AsyncSession, user: User) -> str:
    token = generate_token_hex()
    session.add(
        EmailVerificationToken(user_id=user.id, token=token, expires_at=utc_now() + VERIFICATION_TOKEN_TTL)
    )
    await session.flush()
    await send_verification_email(session, user, token)
    return token


async def authenticate(session: AsyncSession, email: str, password: str) -> LoginResult:
    """Check credentials and issue an access token.

    Raises:
        AuthenticationError: unknown email or wrong password.
        PermissionDeniedError: deactivated or unverified account.
    """
    user = await UserRepository(session).get_by_email(email)
    if user is None:
        raise AuthenticationError(INVALID_CREDENTIALS)
    if not user.is_active:
        raise PermissionDeniedError("Account is deactivated. Please contact support.")
    if not user.is_verified:
        raise PermissionDeniedError("Please verify your email before logging in.")
    if not verify_password(password, user.password_hash):
        raise AuthenticationError(INVALID_CREDENTIALS)

    token = create_access_token(
        TokenPayload(user_id=user.id, email=user.email, role=user.role, company_name=user.company_name)
    )
    await record_audit(session, action="LOGIN", entity="USER", entity_id=user.id, user_id=user.id)
    return LoginResult(user=user, token=token)


async def verify_email(session: AsyncSession, token: str) -> User:
    """Consume a verification token and mark its account verified."""
    repo = UserRepository(session)
    record = await repo.get_verification_token(token)
    if record is None or as_utc(record.expires_at) < utc_now():
        raise ValidationFailedError(INVALID_OR_EXPIRED_TOKEN)

    user = await repo.get_by_id(record.user_id)
    if user is None:
        raise ValidationFailedError(INVALID_OR_EXPIRED_TOKEN)
    user.is_verified = True
    session.add(user)
    await repo.delete_verification_tokens(user.id)
    await record_audit(session, action="VERIFY_EMAIL", entity="USER", entity_id=user.id, user_id=user.id)
    await session.flush()
    return user


async def request_password_reset(session: AsyncSession, email: str) -> Optional[str]:
    """Mail a reset token when ``email`` belongs to an account.

    Returns the token, or ``None`` when no account matched. Callers must not
    reveal which of the two happened.
    """
    user = await UserRepository(session).get_by_email(email)
    if user is None:
        logger.info("[AUTH] Password reset requested for unknown email")
        return None

    token = generate_token_hex()
    session.add(PasswordResetToken(user_id=user.id, token=token, expires_at=utc_now() + RESET_TOKEN_TTL))
    await session.flush()
    await send_password_reset_email(session, user, token)
    return token


async def reset_password(session: AsyncSession, token: str, new_password: str) -> User:
    """Set a new password from a reset token; all of the user's reset tokens are then dropped."""
    repo = UserRepository(session)
    record = await repo.get_reset_token(token)
    if record is None or as_utc(record.expires_at) < utc_now():
        raise ValidationFailedError(INVALID_OR_EXPIRED_TOKEN)
    _check_password(new_password)

    user = await repo.get_by_id(record.user_id)
    if user is None:
        raise ValidationFailedError(INVALID_OR_EXPIRED_TOKEN)
    user.password_hash = hash_password(new_password)
    session.add(user)
    await repo.delete_reset_tokens(user.id)
    await record_audit(session, action="RESET_PASSWORD", entity="USER", entity_id=user.id, user_id=user.id)
    await session.flush()
    return user
