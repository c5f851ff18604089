import logging
from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import Thesis
from thesisflow.schemas import ThesisUpdate, ThesisResponse
from thesisflow.api.v1.deps import get_user_thesis, touch

router = APIRouter()
logger = logging.getLogger(__name__)


async def _existing_thesis(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)]
) -> Thesis:
    if not thesis:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Thesis not found")
    return thesis


_REQUIRED_FIELDS = {"title", "status", "research_questions", "objectives", "matrix_columns"}
_LIST_FIELDS = {"research_questions", "objectives", "matrix_columns"}


def apply_thesis_update(thesis: Thesis, data: ThesisUpdate) -> None:
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None:
            if field in _REQUIRED_FIELDS:
                continue
        elif field in _LIST_FIELDS:
            value = [v.strip() for v in value if v and v.strip()]
            if field == "matrix_columns":
                value = list(dict.fromkeys(value))
        setattr(thesis, field, value)
    touch(thesis)


@router.get("", response_model=ThesisResponse)
async def get_thesis(thesis: Annotated[Thesis, Depends(_existing_thesis)]):
    return thesis


@router.patch("", response_model=ThesisResponse)
async def update_thesis(
    data: ThesisUpdate,
    thesis: Annotated[Thesis, Depends(_existing_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    apply_thesis_update(thesis, data)
    await db.commit()
    await db.refresh(thesis)
    return thesis


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def delete_thesis(
    thesis: Annotated[Thesis, Depends(_existing_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    await db.delete(thesis)
    await db.commit()
    logger.info("Deleted thesis %s", thesis.id)
