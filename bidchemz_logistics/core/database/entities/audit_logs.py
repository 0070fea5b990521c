"""
Audit log entity models.

Append-only record of security and business relevant actions (logins, offer
submissions, wallet changes, timer events).
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from sqlmodel import JSON, Field

from ..base import Base, UTCDateTime, new_id, utc_now


class AuditLog(Base, table=True):
    """Entity for audit trail entries.

    Table: audit_logs
    """

    __tablename__ = "audit_logs"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: Optional[str] = Field(default=None, max_length=64, index=True)
    quote_id: Optional[str] = Field(default=None, max_length=64, index=True)
    shipment_id: Optional[str] = Field(default=None, max_length=64, index=True)

    action: str = Field(max_length=64, index=True)
    entity: str = Field(max_length=64)
    entity_id: Optional[str] = Field(default=None, max_length=64)
    changes: Dict[str, Any] = Field(default_factory=dict, sa_type=JSON)

    created_at: datetime = Field(default_factory=utc_now, index=True, sa_type=UTCDateTime)

    def __repr__(self) -> str:
        return f"AuditLog(action={self.action}, entity={self.entity}, entity_id={self.entity_id})"
