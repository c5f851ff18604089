import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import User, Thesis, SharedAccess
from thesisflow.schemas import (
    ProfileUpdate, UserResponse, ThesisUpdate, ThesisResponse,
    ShareCreate, SharedAccessResponse, SettingsResponse
)
from thesisflow.api.v1.deps import get_current_user, get_user_thesis, require_thesis, get_thesis_item, touch
from thesisflow.api.v1.theses import apply_thesis_update

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=SettingsResponse)
async def get_settings_page(
    current_user: Annotated[User, Depends(get_current_user)],
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    shared_access = []
    if thesis:
        result = await db.execute(
            select(SharedAccess).where(SharedAccess.thesis_id == thesis.id).order_by(SharedAccess.created_at)
        )
        shared_access = result.scalars().all()
    return {"user": current_user, "thesis": thesis, "shared_access": shared_access}


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    data: ProfileUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    touch(current_user)

    await db.commit()
    await db.refresh(current_user)
    return current_user


@router.patch("/thesis", response_model=ThesisResponse)
async def update_thesis_settings(
    data: ThesisUpdate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    apply_thesis_update(thesis, data)
    await db.commit()
    await db.refresh(thesis)
    return thesis


@router.post("/share", response_model=SharedAccessResponse, status_code=status.HTTP_201_CREATED)
async def create_share(
    data: ShareCreate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    expires_at = None
    if data.expires_in_days:
        expires_at = datetime.now(timezone.utc) + timedelta(days=data.expires_in_days)

    access = SharedAccess(
        thesis_id=thesis.id,
        email=data.email.lower(),
        token=secrets.token_urlsafe(32),
        permission_level=data.permission_level,
        expires_at=expires_at,
    )
    db.add(access)
    await db.commit()
    await db.refresh(access)

    logger.info("Shared thesis %s with %s (%s)", thesis.id, access.email, access.permission_level)
    return access


@router.delete("/share/{share_id}", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_share(
    share_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    access = await get_thesis_item(db, SharedAccess, share_id, thesis, "Shared access")
    await db.delete(access)
    await db.commit()
