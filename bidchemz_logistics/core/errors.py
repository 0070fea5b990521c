"""Error types raised by the business services.

Services raise these instead of ``HTTPException`` so they stay usable from
background jobs; the server registers a handler that maps each one to an HTTP
status and a ``{"detail": ...}`` body.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class DomainError(Exception):
    """Base error for all marketplace business-rule violations."""

    status_code: int = 400

    def __init__(self, message: str, *, extra: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class ValidationFailedError(DomainError):
    """Raised when a request is well-formed but violates a business rule."""

    status_code = 400


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    status_code = 404

    def __init__(self, entity: str, entity_id: Optional[str] = None) -> None:
        message = f"{entity} not found" if entity_id is None else f"{entity} {entity_id} not found"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id


class PermissionDeniedError(DomainError):
    """Raised when the caller may not act on a record."""

    status_code = 403


class ConflictError(DomainError):
    """Raised when the action collides with existing state."""

    status_code = 409


class InsufficientBalanceError(DomainError):
    """Raised when a partner wallet cannot cover a lead fee."""

    status_code = 400

    def __init__(self, required: float, available: float) -> None:
        super().__init__(
            "Insufficient wallet balance",
            extra={"required": round(required, 2), "available": round(available, 2)},
        )
        self.required = required
        self.available = available


class DecryptionError(DomainError):
    """Raised when an encrypted blob cannot be authenticated or decrypted."""

    status_code = 500
