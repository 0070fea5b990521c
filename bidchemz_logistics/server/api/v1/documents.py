"""
API endpoints for encrypted documents (MSDS sheets, invoices, packing lists).
"""

from __future__ import annotations

from urllib.parse import quote as url_quote

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database import get_session
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.models.domain.enums import DocumentType
from bidchemz_logistics.core.models.io.auth import MessageResponse
from bidchemz_logistics.core.models.io.documents import DocumentRead
from bidchemz_logistics.server.core.config import settings
from bidchemz_logistics.server.dependencies import get_current_user, require_trader
from bidchemz_logistics.services import documents as document_service

router = APIRouter(tags=["documents"])


@router.post(
    "/upload",
    response_model=DocumentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Upload Document",
    description="Multipart upload of a document for one of the trader's quotes. The file is encrypted at rest.",
    responses={
        400: {"description": "Empty or oversized file"},
        403: {"description": "Quote belongs to another trader"},
        404: {"description": "Quote not found"},
    },
)
async def upload_document(
    file: UploadFile = File(...),
    quote_id: str = Form(...),
    document_type: DocumentType = Form(default=DocumentType.MSDS),
    trader: User = Depends(require_trader),
    session: AsyncSession = Depends(get_session),
) -> DocumentRead:
    # One byte past the limit is enough for store_document to refuse the file
    content = await file.read(settings.max_upload_bytes + 1)
    document = await document_service.store_document(
        session,
        trader,
        quote_id=quote_id,
        file_name=file.filename or "unknown",
        file_type=file.content_type or "application/octet-stream",
        content=content,
        document_type=document_type,
    )
    blob_path = document.storage_path
    try:
        await session.commit()
    except Exception:
        document_service.purge_blobs([blob_path])
        raise
    await session.refresh(document)
    return DocumentRead.model_validate(document)


@router.get(
    "/{document_id}",
    response_model=DocumentRead,
    summary="Get Document Metadata",
    responses={403: {"description": "Access denied"}, 404: {"description": "Document not found"}},
)
async def get_document(
    document_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> DocumentRead:
    return DocumentRead.model_validate(await document_service.get_accessible_document(session, user, document_id))


@router.get(
    "/{document_id}/download",
    summary="Download Document",
    description="Decrypt and stream the document to the quote's trader, the carrying partner or an admin.",
    response_class=Response,
    responses={403: {"description": "Access denied"}, 404: {"description": "Document or file not found"}},
)
async def download_document(
    document_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> Response:
    document, content = await document_service.read_document(session, user, document_id)
    await session.commit()
    return Response(
        content=content,
        media_type=document.file_type,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{url_quote(document.file_name)}"},
    )


@router.delete(
    "/{document_id}",
    response_model=MessageResponse,
    summary="Delete Document",
    description="Overwrite and remove the encrypted file; uploader or admin only.",
    responses={403: {"description": "Access denied"}, 404: {"description": "Document not found"}},
)
async def delete_document(
    document_id: str,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(get_session),
) -> MessageResponse:
    blob_path = await document_service.remove_document(session, user, document_id)
    await session.commit()
    document_service.purge_blobs([blob_path])
    return MessageResponse(message="Document deleted successfully")
