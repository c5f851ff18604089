import logging
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import Thesis, Chapter, ChapterStatus, Flashcard
from thesisflow.schemas import (
    AIAssistRequest, AIAssistResponse, AIStatusResponse,
    FlashcardGenerateRequest, FlashcardResponse,
    MethodologyRequest, MethodologyResponse
)
from thesisflow.services import generation
from thesisflow.services.ai_provider import AIProvider, AIProviderError, AIProviderNotConfigured
from thesisflow.utils.text_stats import count_words
from thesisflow.api.v1.deps import get_user_thesis, require_thesis, get_ai_provider, touch
from thesisflow.api.v1.chapters import list_thesis_chapters
from thesisflow.api.v1.documents import list_thesis_documents

router = APIRouter()
logger = logging.getLogger(__name__)

GENERATION_FAILED = "Failed to generate content"


def _require_configured(provider: AIProvider) -> None:
    if not provider.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"AI assistance is not configured. Set the API key for the '{provider.name}' provider.",
        )


def _generation_failed(action: str, exc: Exception) -> HTTPException:
    if isinstance(exc, AIProviderNotConfigured):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    logger.error("AI %s failed: %s", action, exc)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=GENERATION_FAILED)


@router.get("/status", response_model=AIStatusResponse)
async def ai_status(provider: Annotated[AIProvider, Depends(get_ai_provider)]):
    return {"provider": provider.name, "model": provider.model, "configured": provider.configured}


@router.post("/assist", response_model=AIAssistResponse)
async def assist(
    data: AIAssistRequest,
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    provider: Annotated[AIProvider, Depends(get_ai_provider)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    _require_configured(provider)

    documents = await list_thesis_documents(db, thesis) if thesis else []
    try:
        response = await generation.assist(
            provider,
            data.action,
            data.chapter_title,
            data.content,
            data.prompt,
            documents=documents,
        )
    except AIProviderError as e:
        raise _generation_failed(data.action, e)
    return {"response": response}


@router.post("/generate-flashcards", response_model=list[FlashcardResponse], status_code=status.HTTP_201_CREATED)
async def generate_flashcards(
    data: FlashcardGenerateRequest,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    provider: Annotated[AIProvider, Depends(get_ai_provider)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    _require_configured(provider)

    chapters = await list_thesis_chapters(db, thesis)
    try:
        cards = await generation.generate_flashcards(provider, thesis, chapters, data.amount)
    except AIProviderError as e:
        raise _generation_failed("flashcard generation", e)

    created = [
        Flashcard(thesis_id=thesis.id, front=card["front"], back=card["back"], category=data.category, mastery_level=0)
        for card in cards
    ]
    db.add_all(created)
    await db.commit()
    return created


@router.post("/generate-methodology", response_model=MethodologyResponse)
async def generate_methodology(
    data: MethodologyRequest,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    provider: Annotated[AIProvider, Depends(get_ai_provider)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if not generation.methodology_label(data.methodology_type, data.specific_methodology):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unknown {data.methodology_type} methodology: {data.specific_methodology}",
        )
    _require_configured(provider)

    try:
        content = await generation.generate_methodology(
            provider, thesis, data.methodology_type, data.specific_methodology
        )
    except AIProviderError as e:
        raise _generation_failed("methodology generation", e)

    result = await db.execute(
        select(Chapter)
        .where(Chapter.thesis_id == thesis.id, Chapter.title == generation.METHODOLOGY_CHAPTER_TITLE)
        .order_by(Chapter.order_index)
        .limit(1)
    )
    chapter = result.scalar_one_or_none()
    if not chapter:
        chapters = await list_thesis_chapters(db, thesis)
        chapter = Chapter(
            thesis_id=thesis.id,
            title=generation.METHODOLOGY_CHAPTER_TITLE,
            order_index=len(chapters),
            status=ChapterStatus.DRAFT,
        )
        db.add(chapter)

    chapter.content = content
    chapter.word_count = count_words(content)
    touch(chapter)

    thesis.methodology_type = data.methodology_type
    thesis.specific_methodology = data.specific_methodology
    touch(thesis)

    await db.commit()
    await db.refresh(chapter)
    logger.info("Wrote %s methodology chapter %s for thesis %s", data.specific_methodology, chapter.id, thesis.id)
    return {"chapter_id": chapter.id, "chapter": chapter}
