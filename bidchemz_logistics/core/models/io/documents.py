"""Document I/O models."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict

from bidchemz_logistics.core.models.domain.enums import DocumentType


class DocumentRead(BaseModel):
    """Document metadata; the storage path and key never leave the server."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    quote_id: Optional[str] = None
    shipment_id: Optional[str] = None
    uploaded_by: str
    file_name: str
    file_type: str
    file_size: int
    document_type: DocumentType
    created_at: datetime
