"""
Document controller — client document upload / listing / download.

Uploads are multipart (`file` + form fields).  The download route also
accepts the access token as `?token=` so it can be used as a plain
link.
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from caredata.core.database import get_db
from caredata.rbac.context import AuthContext
from caredata.rbac.dependencies import scoped_context
from caredata.schemas import DocumentOut
from caredata.services import document_service
from caredata.services.storage_service import DocumentStore, get_document_store

router = APIRouter(prefix="/api/documents", tags=["Documents"])


@router.post("", response_model=DocumentOut, status_code=201)
async def upload_document(
    file: UploadFile = File(...),
    client_id: int = Form(..., alias="clientId"),
    document_name: str = Form(..., alias="documentName", min_length=1),
    document_type: str = Form(..., alias="documentType", min_length=1),
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    data = await file.read()
    document = await document_service.upload_document(
        db,
        ctx,
        store,
        client_id=client_id,
        document_name=document_name,
        document_type=document_type,
        filename=file.filename or "upload",
        data=data,
        content_type=file.content_type,
    )
    return DocumentOut.model_validate(document)


@router.get("/client/{client_id}", response_model=list[DocumentOut])
async def list_documents_for_client(
    client_id: int,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    documents = await document_service.list_documents_for_client(client_id, db, ctx)
    return [DocumentOut.model_validate(d) for d in documents]


@router.get("/{document_id}", response_model=DocumentOut)
async def get_document(
    document_id: int,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
):
    document = await document_service.get_document(document_id, db, ctx)
    return DocumentOut.model_validate(document)


@router.get("/{document_id}/download", response_class=FileResponse)
async def download_document(
    document_id: int,
    ctx: AuthContext = Depends(scoped_context),
    db: AsyncSession = Depends(get_db),
    store: DocumentStore = Depends(get_document_store),
):
    document = await document_service.get_document(document_id, db, ctx)
    path = document_service.open_document(document, store)
    return FileResponse(
        path,
        media_type=document.content_type or "application/octet-stream",
        filename=document.filename,
    )
