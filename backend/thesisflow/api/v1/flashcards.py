import uuid
from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import Thesis, Flashcard
from thesisflow.schemas import FlashcardCreate, FlashcardUpdate, FlashcardResponse, FlashcardStats
from thesisflow.utils.text_stats import mastery_counts
from thesisflow.api.v1.deps import get_user_thesis, require_thesis, get_thesis_item, touch

router = APIRouter()


@router.get("", response_model=list[FlashcardResponse])
async def list_flashcards(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)],
    category: str | None = None,
):
    if not thesis:
        return []
    query = select(Flashcard).where(Flashcard.thesis_id == thesis.id)
    if category:
        query = query.where(Flashcard.category == category)
    result = await db.execute(query.order_by(Flashcard.created_at))
    return result.scalars().all()


@router.get("/stats", response_model=FlashcardStats)
async def flashcard_stats(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if not thesis:
        return mastery_counts([])
    levels = await db.scalars(select(Flashcard.mastery_level).where(Flashcard.thesis_id == thesis.id))
    return mastery_counts(levels.all())


@router.post("", response_model=FlashcardResponse, status_code=status.HTTP_201_CREATED)
async def create_flashcard(
    data: FlashcardCreate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    card = Flashcard(thesis_id=thesis.id, mastery_level=0, **data.model_dump())
    db.add(card)
    await db.commit()
    await db.refresh(card)
    return card


@router.patch("/{card_id}", response_model=FlashcardResponse)
async def update_flashcard(
    card_id: uuid.UUID,
    data: FlashcardUpdate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    card = await get_thesis_item(db, Flashcard, card_id, thesis, "Flashcard")
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(card, field, value)
    touch(card)

    await db.commit()
    await db.refresh(card)
    return card


@router.delete("/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_flashcard(
    card_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    card = await get_thesis_item(db, Flashcard, card_id, thesis, "Flashcard")
    await db.delete(card)
    await db.commit()
