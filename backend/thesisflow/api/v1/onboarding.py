import logging
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import User, Thesis, ThesisStatus
from thesisflow.schemas import OnboardingRequest, ThesisResponse
from thesisflow.api.v1.deps import get_current_user, get_user_thesis, touch

router = APIRouter()
logger = logging.getLogger(__name__)


def _non_blank(items: list[str]) -> list[str]:
    return [item.strip() for item in items if item and item.strip()]


@router.post("/complete", response_model=ThesisResponse, status_code=status.HTTP_201_CREATED)
async def complete_onboarding(
    data: OnboardingRequest,
    current_user: Annotated[User, Depends(get_current_user)],
    existing: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if existing:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Onboarding already completed")

    current_user.study_level = data.study_level
    current_user.field = data.field
    current_user.language = data.language
    current_user.onboarding_completed = True
    touch(current_user)

    thesis = Thesis(
        user_id=current_user.id,
        title=data.thesis_title.strip(),
        topic=data.topic,
        language=data.language,
        research_questions=_non_blank(data.research_questions),
        objectives=_non_blank(data.objectives),
        status=ThesisStatus.ACTIVE,
        matrix_columns=[],
    )
    db.add(thesis)
    await db.commit()
    await db.refresh(thesis)

    logger.info("User %s completed onboarding with thesis %s", current_user.id, thesis.id)
    return thesis
