"""Per-page aggregate reads; every counter is recomputed on each request."""

from typing import Annotated
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import Thesis, ChapterStatus
from thesisflow.schemas import DashboardResponse, DashboardStats, PlannerResponse, EditorResponse
from thesisflow.utils.text_stats import progress_percentage
from thesisflow.api.v1.deps import get_user_thesis
from thesisflow.api.v1.chapters import list_thesis_chapters
from thesisflow.api.v1.tasks import list_thesis_tasks
from thesisflow.api.v1.milestones import list_thesis_milestones

router = APIRouter()


def compute_stats(chapters, tasks, milestones) -> DashboardStats:
    completed = sum(1 for c in chapters if c.status == ChapterStatus.FINAL)
    return DashboardStats(
        total_words=sum(c.word_count or 0 for c in chapters),
        completed_chapters=completed,
        total_chapters=len(chapters),
        pending_tasks=sum(1 for t in tasks if not t.completed),
        upcoming_deadlines=sum(1 for m in milestones if not m.completed),
        progress=progress_percentage(completed, len(chapters)),
    )


@router.get("/dashboard", response_model=DashboardResponse)
async def dashboard(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if not thesis:
        return DashboardResponse(thesis=None, stats=DashboardStats())

    chapters = await list_thesis_chapters(db, thesis)
    tasks = await list_thesis_tasks(db, thesis)
    milestones = await list_thesis_milestones(db, thesis)
    return {
        "thesis": thesis,
        "chapters": chapters,
        "tasks": tasks,
        "milestones": milestones,
        "stats": compute_stats(chapters, tasks, milestones),
    }


@router.get("/planner", response_model=PlannerResponse)
async def planner(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if not thesis:
        return PlannerResponse(thesis=None)
    return {"thesis": thesis, "milestones": await list_thesis_milestones(db, thesis)}


@router.get("/editor", response_model=EditorResponse)
async def editor(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if not thesis:
        return EditorResponse(thesis=None)
    return {"thesis": thesis, "chapters": await list_thesis_chapters(db, thesis)}
