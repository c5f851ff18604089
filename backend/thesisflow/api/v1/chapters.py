import uuid
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import User, Thesis, Chapter, Comment, ChapterStatus
from thesisflow.schemas import (
    ChapterCreate, ChapterUpdate, ChapterResponse,
    CommentCreate, CommentUpdate, CommentResponse
)
from thesisflow.utils.text_stats import count_words
from thesisflow.api.v1.deps import get_current_user, require_thesis, get_thesis_item, touch

router = APIRouter()
comments_router = APIRouter()


async def list_thesis_chapters(db: AsyncSession, thesis: Thesis) -> list[Chapter]:
    result = await db.execute(
        select(Chapter).where(Chapter.thesis_id == thesis.id).order_by(Chapter.order_index, Chapter.created_at)
    )
    return list(result.scalars().all())


@router.get("", response_model=list[ChapterResponse])
async def list_chapters(
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    return await list_thesis_chapters(db, thesis)


@router.post("", response_model=ChapterResponse, status_code=status.HTTP_201_CREATED)
async def create_chapter(
    data: ChapterCreate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    siblings = await db.scalar(select(func.count(Chapter.id)).where(Chapter.thesis_id == thesis.id))
    chapter = Chapter(
        thesis_id=thesis.id,
        title=data.title,
        content=data.content,
        word_count=count_words(data.content),
        target_word_count=data.target_word_count,
        deadline=data.deadline,
        order_index=siblings or 0,
        status=ChapterStatus.DRAFT,
    )
    db.add(chapter)
    await db.commit()
    await db.refresh(chapter)
    return chapter


@router.get("/{chapter_id}", response_model=ChapterResponse)
async def get_chapter(
    chapter_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    return await get_thesis_item(db, Chapter, chapter_id, thesis, "Chapter")


@router.patch("/{chapter_id}", response_model=ChapterResponse)
async def update_chapter(
    chapter_id: uuid.UUID,
    data: ChapterUpdate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    chapter = await get_thesis_item(db, Chapter, chapter_id, thesis, "Chapter")

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        if value is None and field in ("title", "content", "status"):
            continue
        setattr(chapter, field, value)
    if update_data.get("content") is not None:
        chapter.word_count = count_words(chapter.content)
    touch(chapter)

    await db.commit()
    await db.refresh(chapter)
    return chapter


@router.delete("/{chapter_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chapter(
    chapter_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    chapter = await get_thesis_item(db, Chapter, chapter_id, thesis, "Chapter")
    await db.delete(chapter)
    await db.commit()


@router.get("/{chapter_id}/comments", response_model=list[CommentResponse])
async def list_comments(
    chapter_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    await get_thesis_item(db, Chapter, chapter_id, thesis, "Chapter")
    result = await db.execute(
        select(Comment).where(Comment.chapter_id == chapter_id).order_by(Comment.created_at)
    )
    return result.scalars().all()


@router.post("/{chapter_id}/comments", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def create_comment(
    chapter_id: uuid.UUID,
    data: CommentCreate,
    current_user: Annotated[User, Depends(get_current_user)],
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    await get_thesis_item(db, Chapter, chapter_id, thesis, "Chapter")
    comment = Comment(
        chapter_id=chapter_id,
        user_id=current_user.id,
        content=data.content,
        paragraph_index=data.paragraph_index,
    )
    db.add(comment)
    await db.commit()
    await db.refresh(comment)
    return comment


async def _get_comment(db: AsyncSession, comment_id: uuid.UUID, thesis: Thesis) -> Comment:
    result = await db.execute(
        select(Comment)
        .join(Chapter, Chapter.id == Comment.chapter_id)
        .where(Comment.id == comment_id, Chapter.thesis_id == thesis.id)
    )
    comment = result.scalar_one_or_none()
    if not comment:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    return comment


@comments_router.patch("/{comment_id}", response_model=CommentResponse)
async def update_comment(
    comment_id: uuid.UUID,
    data: CommentUpdate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    comment = await _get_comment(db, comment_id, thesis)
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in ("content", "resolved"):
            continue
        setattr(comment, field, value)
    touch(comment)

    await db.commit()
    await db.refresh(comment)
    return comment


@comments_router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    comment = await _get_comment(db, comment_id, thesis)
    await db.delete(comment)
    await db.commit()
