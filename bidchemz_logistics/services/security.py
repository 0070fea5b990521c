"""
Credentials and access tokens.

Passwords are hashed with bcrypt; access tokens are HS256 JWTs carrying the
user id (``sub``), email, role and company name.
"""

from __future__ import annotations

import secrets
import string
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

import bcrypt
import jwt

from bidchemz_logistics.core.database.base import utc_now
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import UserRole
from bidchemz_logistics.server.core.config import settings

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "
_SHORT_ID_ALPHABET = string.ascii_lowercase + string.digits
_NUMBER_ALPHABET = string.ascii_uppercase + string.digits


class InvalidTokenError(Exception):
    """Raised when an access token is malformed, expired or wrongly signed."""


@dataclass(frozen=True)
class TokenPayload:
    user_id: str
    email: str
    role: UserRole
    company_name: Optional[str] = None


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.auth.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash, or a password bcrypt refuses to process
        return False


def create_access_token(payload: TokenPayload, expires_delta: Optional[timedelta] = None) -> str:
    auth = settings.auth
    issued_at = utc_now()
    claims: Dict[str, Any] = {
        "sub": payload.user_id,
        "email": payload.email,
        "role": UserRole(payload.role).value,
        "company_name": payload.company_name,
        "iat": issued_at,
        "exp": issued_at + (expires_delta or timedelta(days=auth.jwt_expires_days)),
    }
    return jwt.encode(claims, auth.jwt_secret, algorithm=auth.jwt_algorithm)


def decode_access_token(token: str) -> TokenPayload:
    """Validate ``token`` and return its payload.

    Raises:
        InvalidTokenError: expired, tampered or otherwise unusable token.
    """
    auth = settings.auth
    try:
        claims = jwt.decode(
            token,
            auth.jwt_secret,
            algorithms=[auth.jwt_algorithm],
            options={"require": ["sub", "exp"]},
        )
        return TokenPayload(
            user_id=claims["sub"],
            email=claims.get("email", ""),
            role=UserRole(claims.get("role")),
            company_name=claims.get("company_name"),
        )
    except jwt.ExpiredSignatureError as e:
        logger.debug("[AUTH] Expired access token")
        raise InvalidTokenError("Token has expired") from e
    except (jwt.InvalidTokenError, ValueError) as e:
        logger.debug(f"[AUTH] Rejected access token: {e}")
        raise InvalidTokenError("Invalid token") from e


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Return the token from an ``Authorization: Bearer <token>`` header, if present."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None


def generate_token_hex(nbytes: int = 32) -> str:
    """Random token for email verification and password reset links."""
    return secrets.token_hex(nbytes)


def generate_short_id(role: UserRole) -> str:
    """Public handle such as ``buyer_k3x9qa`` or ``partner_7hd02m``."""
    prefix = "buyer" if UserRole(role) == UserRole.TRADER else "partner"
    suffix = "".join(secrets.choice(_SHORT_ID_ALPHABET) for _ in range(6))
    return f"{prefix}_{suffix}"


def _random_code(length: int) -> str:
    return "".join(secrets.choice(_NUMBER_ALPHABET) for _ in range(length))


def generate_quote_number() -> str:
    """``FRQ-<epoch ms>-<9 random chars>``."""
    return f"FRQ-{int(time.time() * 1000)}-{_random_code(9)}"


def generate_shipment_number() -> str:
    """``SHP-<epoch ms>-<7 random chars>``."""
    return f"SHP-{int(time.time() * 1000)}-{_random_code(7)}"
