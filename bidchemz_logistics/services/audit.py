"""Audit trail helper."""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database.entities.audit_logs import AuditLog
from bidchemz_logistics.core.logging_config import get_logger

logger = get_logger(__name__)


async def record_audit(
    session: AsyncSession,
    *,
    action: str,
    entity: str,
    entity_id: Optional[str] = None,
    user_id: Optional[str] = None,
    quote_id: Optional[str] = None,
    shipment_id: Optional[str] = None,
    changes: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """Add an audit entry to the current unit of work."""
    entry = AuditLog(
        action=action,
        entity=entity,
        entity_id=entity_id,
        user_id=user_id,
        quote_id=quote_id,
        shipment_id=shipment_id,
        changes=changes or {},
    )
    session.add(entry)
    logger.debug(f"[AUDIT] {action} {entity} {entity_id or ''} by {user_id or 'system'}")
    return entry
