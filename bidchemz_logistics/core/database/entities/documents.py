"""
Document entity models.

Documents (MSDS sheets, invoices, packing lists) are stored encrypted on disk;
the row keeps the storage path and the per-document key.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from bidchemz_logistics.core.models.domain.enums import DocumentType

from ..base import Base, UTCDateTime, new_id, utc_now


class Document(Base, table=True):
    """Entity for uploaded, encrypted documents.

    Table: documents
    """

    __tablename__ = "documents"

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    quote_id: Optional[str] = Field(default=None, foreign_key="quotes.id", max_length=64, index=True)
    shipment_id: Optional[str] = Field(default=None, foreign_key="shipments.id", max_length=64, index=True)
    uploaded_by: str = Field(foreign_key="users.id", max_length=64, index=True)

    file_name: str = Field(max_length=255)
    file_type: str = Field(max_length=128)
    file_size: int = Field(ge=0)
    storage_path: str = Field(max_length=512)
    encryption_key: str = Field(max_length=128)
    document_type: DocumentType = Field(default=DocumentType.MSDS)

    created_at: datetime = Field(default_factory=utc_now, sa_type=UTCDateTime)
