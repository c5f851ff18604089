import uuid
from datetime import datetime, timezone
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import User, JournalEntry, JournalEntryType
from thesisflow.schemas import JournalEntryCreate, JournalEntryUpdate, JournalEntryResponse
from thesisflow.api.v1.deps import get_current_user, touch

router = APIRouter()


async def _get_entry(db: AsyncSession, entry_id: uuid.UUID, user: User) -> JournalEntry:
    # Journal entries belong to the user, not the thesis
    result = await db.execute(
        select(JournalEntry).where(JournalEntry.id == entry_id, JournalEntry.user_id == user.id)
    )
    entry = result.scalar_one_or_none()
    if not entry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Journal entry not found")
    return entry


@router.get("", response_model=list[JournalEntryResponse])
async def list_entries(
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)],
    entry_type: JournalEntryType | None = None,
):
    query = select(JournalEntry).where(JournalEntry.user_id == current_user.id)
    if entry_type:
        query = query.where(JournalEntry.entry_type == entry_type)
    result = await db.execute(query.order_by(JournalEntry.entry_date.desc(), JournalEntry.created_at.desc()))
    return result.scalars().all()


@router.post("", response_model=JournalEntryResponse, status_code=status.HTTP_201_CREATED)
async def create_entry(
    data: JournalEntryCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    entry = JournalEntry(
        user_id=current_user.id,
        content=data.content,
        entry_type=data.entry_type,
        tags=[tag.strip() for tag in data.tags if tag.strip()],
        entry_date=data.entry_date or datetime.now(timezone.utc),
    )
    db.add(entry)
    await db.commit()
    await db.refresh(entry)
    return entry


@router.patch("/{entry_id}", response_model=JournalEntryResponse)
async def update_entry(
    entry_id: uuid.UUID,
    data: JournalEntryUpdate,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    entry = await _get_entry(db, entry_id, current_user)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(entry, field, value)
    touch(entry)

    await db.commit()
    await db.refresh(entry)
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_entry(
    entry_id: uuid.UUID,
    current_user: Annotated[User, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    entry = await _get_entry(db, entry_id, current_user)
    await db.delete(entry)
    await db.commit()
