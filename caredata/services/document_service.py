"""
Client document service.

Upload flow:
1. Validate extension / size against settings.
2. Resolve the client (row-level segment check).
3. Hand the bytes to the injected DocumentStore.
4. Record the Document row with the store key.

The document's segment is the request's authorized segment, falling
back to the client's.
"""

import logging
from pathlib import Path

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.config import settings
from caredata.core.errors import NotFoundError, ValidationError
from caredata.models.document import Document
from caredata.rbac.context import AuthContext, segment_filter
from caredata.rbac.segment_guard import authorize_row, authorize_segment
from caredata.services import client_service
from caredata.services.storage_service import DocumentStore

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    ".pdf": "application/pdf",
    ".doc": "application/msword",
    ".docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
}


def validate_upload(filename: str, size: int) -> str:
    """Return the lower-cased extension or raise ValidationError."""
    ext = Path(filename).suffix.lower()
    if ext not in settings.ALLOWED_DOCUMENT_EXTENSIONS:
        raise ValidationError(
            "Invalid file type",
            details=f"Allowed types: {', '.join(settings.ALLOWED_DOCUMENT_EXTENSIONS)}",
        )
    if size == 0:
        raise ValidationError("No file uploaded")
    if size > settings.MAX_UPLOAD_BYTES:
        max_mb = settings.MAX_UPLOAD_BYTES / (1024 * 1024)
        raise ValidationError(f"File size exceeds {max_mb:.0f} MB limit")
    return ext


async def upload_document(
    db: AsyncSession,
    ctx: AuthContext,
    store: DocumentStore,
    *,
    client_id: int,
    document_name: str,
    document_type: str,
    filename: str,
    data: bytes,
    content_type: str | None = None,
) -> Document:
    ext = validate_upload(filename, len(data))
    client = await client_service.get_client(client_id, db, ctx.with_segment(None))

    segment_id = ctx.segment_id if ctx.segment_id is not None else client.segment_id
    await authorize_segment(ctx, segment_id, db)

    key = await store.save(filename, data)
    document = Document(
        client_id=client_id,
        document_name=document_name,
        document_type=document_type,
        filename=filename,
        file_path=key,
        content_type=content_type or CONTENT_TYPES.get(ext, "application/octet-stream"),
        segment_id=segment_id,
        created_by=ctx.user_id,
    )
    db.add(document)
    try:
        await db.flush()
        await db.commit()
    except Exception:
        logger.exception("Failed to record document %s, removing stored file", key)
        await store.delete(key)
        raise
    logger.info(
        "Document %s (%s, %d bytes) uploaded for client %s by user %s",
        document.id,
        filename,
        len(data),
        client_id,
        ctx.user_id,
    )
    return document


async def get_document(document_id: int, db: AsyncSession, ctx: AuthContext) -> Document:
    document = await db.get(Document, document_id)
    if document is None:
        raise NotFoundError("Document not found")
    await authorize_row(ctx, document.segment_id, db)
    return document


async def list_documents_for_client(
    client_id: int,
    db: AsyncSession,
    ctx: AuthContext,
) -> list[Document]:
    await client_service.get_client(client_id, db, ctx.with_segment(None))
    stmt = (
        select(Document)
        .where(Document.client_id == client_id)
        .where(segment_filter(Document.segment_id, ctx))
        .order_by(Document.uploaded_at.desc(), Document.id.desc())
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


def open_document(document: Document, store: DocumentStore) -> Path:
    path = store.local_path(document.file_path)
    if not path.is_file():
        logger.error("Document %s missing from store at %s", document.id, document.file_path)
        raise NotFoundError("Document file not found")
    return path
