import logging
import uuid
from pathlib import Path
from typing import Annotated
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db, get_settings
from thesisflow.models import User, Thesis, Document
from thesisflow.schemas import DocumentResponse
from thesisflow.services.documents import (
    DocumentTooLarge,
    UnsupportedDocumentType,
    DocumentExtractionError,
    SUPPORTED_MIME_TYPES,
    normalize_mime_type,
    read_upload,
    extract_text,
)
from thesisflow.api.v1.deps import get_current_user, get_user_thesis, require_thesis, get_thesis_item

router = APIRouter()
settings = get_settings()
logger = logging.getLogger(__name__)


async def list_thesis_documents(db: AsyncSession, thesis: Thesis) -> list[Document]:
    result = await db.execute(
        select(Document).where(Document.thesis_id == thesis.id).order_by(Document.created_at)
    )
    return list(result.scalars().all())


@router.get("", response_model=list[DocumentResponse])
async def list_documents(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if not thesis:
        return []
    return await list_thesis_documents(db, thesis)


@router.post("/upload", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def upload_document(
    current_user: Annotated[User, Depends(get_current_user)],
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)],
    file: UploadFile = File(...),
    title: str | None = Form(default=None),
):
    mime_type = normalize_mime_type(file.content_type)
    if mime_type not in SUPPORTED_MIME_TYPES:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Unsupported file type. Upload a PDF or plain text file.",
        )

    try:
        data = await read_upload(file, settings.max_upload_bytes)
        content = extract_text(data, mime_type)
    except DocumentTooLarge:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)}MB",
        )
    except UnsupportedDocumentType:
        raise HTTPException(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            detail="Unsupported file type. Upload a PDF or plain text file.",
        )
    except DocumentExtractionError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Could not extract text from the PDF",
        )
    finally:
        await file.close()

    filename = Path(file.filename or "document").name
    document = Document(
        thesis_id=thesis.id,
        user_id=current_user.id,
        title=(title or "").strip() or filename,
        content=content,
        filename=filename,
        mime_type=mime_type,
    )
    db.add(document)
    await db.commit()
    await db.refresh(document)

    logger.info("Stored document %s (%d chars) for thesis %s", document.id, len(content), thesis.id)
    return document


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    document = await get_thesis_item(db, Document, document_id, thesis, "Document")
    await db.delete(document)
    await db.commit()
