"""
Encrypted document storage.

Uploads are encrypted with a per-document AES-256-GCM key before they touch
the disk. The trader owning the quote, the partner carrying its shipment and
admins may read a document back.
"""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bidchemz_logistics.core.database.entities.documents import Document
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.shipments import Shipment
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from bidchemz_logistics.core.logging_config import get_logger
from bidchemz_logistics.core.models.domain.enums import DocumentType, UserRole
from bidchemz_logistics.server.core.config import settings

from .audit import record_audit
from .file_encryption import decrypt_file, encrypt_file, secure_delete_file

logger = get_logger(__name__)


async def store_document(
    session: AsyncSession,
    uploader: User,
    *,
    quote_id: str,
    file_name: str,
    file_type: str,
    content: bytes,
    document_type: DocumentType = DocumentType.MSDS,
) -> Document:
    """Encrypt ``content`` to disk and record it against the trader's quote."""
    if not content:
        raise ValidationFailedError("No file uploaded")
    if len(content) > settings.max_upload_bytes:
        raise ValidationFailedError(f"File exceeds the {settings.max_upload_bytes} byte limit")

    quote = await session.get(Quote, quote_id)
    if quote is None:
        raise NotFoundError("Quote")
    if quote.trader_id != uploader.id:
        raise PermissionDeniedError("Access denied")

    path, key = encrypt_file(content, settings.upload_dir)
    try:
        document = Document(
            quote_id=quote_id,
            uploaded_by=uploader.id,
            file_name=file_name or "unknown",
            file_type=file_type or "application/octet-stream",
            file_size=len(content),
            storage_path=str(path),
            encryption_key=key,
            document_type=document_type,
        )
        session.add(document)
        await session.flush()
        await record_audit(
            session,
            action="UPLOAD_DOCUMENT",
            entity="DOCUMENT",
            entity_id=document.id,
            user_id=uploader.id,
            quote_id=quote_id,
            changes={"file_name": document.file_name, "document_type": document_type.value},
        )
    except Exception:
        secure_delete_file(path)
        raise
    logger.info(f"Document {document.id} ({len(content)} bytes) stored for quote {quote_id}")
    return document


async def _carrying_partner_ids(session: AsyncSession, document: Document) -> set[str]:
    stmt = select(Shipment.partner_id)
    if document.shipment_id:
        stmt = stmt.where(Shipment.id == document.shipment_id)
    elif document.quote_id:
        stmt = stmt.where(Shipment.quote_id == document.quote_id)
    else:
        return set()
    result = await session.execute(stmt)
    return {row[0] for row in result.all()}


async def can_access_document(session: AsyncSession, user: User, document: Document) -> bool:
    if user.role == UserRole.ADMIN or document.uploaded_by == user.id:
        return True
    if document.quote_id:
        quote = await session.get(Quote, document.quote_id)
        if quote is not None and quote.trader_id == user.id:
            return True
    return user.id in await _carrying_partner_ids(session, document)


async def get_accessible_document(session: AsyncSession, user: User, document_id: str) -> Document:
    document = await session.get(Document, document_id)
    if document is None:
        raise NotFoundError("Document")
    if not await can_access_document(session, user, document):
        raise PermissionDeniedError("Access denied")
    return document


async def read_document(session: AsyncSession, user: User, document_id: str) -> tuple[Document, bytes]:
    """Decrypt a document for download and audit the access."""
    document = await get_accessible_document(session, user, document_id)
    try:
        content = decrypt_file(document.storage_path, document.encryption_key)
    except FileNotFoundError:
        logger.error(f"Encrypted blob for document {document.id} is missing at {document.storage_path}")
        raise NotFoundError("File")
    await record_audit(
        session,
        action="DOWNLOAD_DOCUMENT",
        entity="DOCUMENT",
        entity_id=document.id,
        user_id=user.id,
        quote_id=document.quote_id,
        shipment_id=document.shipment_id,
    )
    return document, content


async def remove_document(session: AsyncSession, user: User, document_id: str, reason: Optional[str] = None) -> str:
    """Delete a document's row; uploader or admin only.

    The encrypted blob stays on disk and its path is returned. Callers shred
    it with ``purge_blobs`` once the transaction has committed, so a failed
    commit never leaves a row pointing at a missing file.
    """
    document = await session.get(Document, document_id)
    if document is None:
        raise NotFoundError("Document")
    if user.role != UserRole.ADMIN and document.uploaded_by != user.id:
        raise PermissionDeniedError("Access denied")

    storage_path = document.storage_path
    quote_id, shipment_id, file_name = document.quote_id, document.shipment_id, document.file_name
    await session.delete(document)
    await session.flush()
    await record_audit(
        session,
        action="DELETE_DOCUMENT",
        entity="DOCUMENT",
        entity_id=document_id,
        user_id=user.id,
        quote_id=quote_id,
        shipment_id=shipment_id,
        changes={"file_name": file_name, "reason": reason or "user_request"},
    )
    return storage_path


def purge_blobs(paths: Iterable[str]) -> int:
    """Securely delete encrypted blobs whose rows are gone; returns how many existed."""
    return sum(1 for path in paths if secure_delete_file(path))
