from datetime import datetime, timezone
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db, as_utc
from thesisflow.models import Thesis, Chapter, SharedAccess
from thesisflow.schemas import SharedThesisResponse

router = APIRouter()


@router.get("/{token}", response_model=SharedThesisResponse)
async def open_shared_thesis(
    token: str,
    db: Annotated[AsyncSession, Depends(get_db)]
):
    """Read-only view of a thesis for whoever holds a share link. No login needed."""
    result = await db.execute(select(SharedAccess).where(SharedAccess.token == token))
    access = result.scalar_one_or_none()
    if not access:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Share link not found")

    if access.expires_at and as_utc(access.expires_at) <= datetime.now(timezone.utc):
        raise HTTPException(status_code=status.HTTP_410_GONE, detail="Share link has expired")

    thesis = await db.get(Thesis, access.thesis_id)
    result = await db.execute(
        select(Chapter).where(Chapter.thesis_id == access.thesis_id).order_by(Chapter.order_index)
    )
    chapters = result.scalars().all()

    if not access.accepted:
        access.accepted = True
        await db.commit()

    return {
        "thesis": thesis,
        "chapters": chapters,
        "permission_level": access.permission_level,
    }
