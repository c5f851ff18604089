import uuid
from datetime import datetime, timezone
from typing import Annotated
from fastapi import APIRouter, Body, Depends, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import Thesis, Milestone
from thesisflow.schemas import MilestoneCreate, MilestoneInitialize, MilestoneUpdate, MilestoneResponse
from thesisflow.services.milestones import DEFAULT_MILESTONES
from thesisflow.api.v1.deps import get_user_thesis, require_thesis, get_thesis_item, touch

router = APIRouter()


async def list_thesis_milestones(db: AsyncSession, thesis: Thesis) -> list[Milestone]:
    result = await db.execute(
        select(Milestone).where(Milestone.thesis_id == thesis.id).order_by(Milestone.order_index, Milestone.created_at)
    )
    return list(result.scalars().all())


async def _count(db: AsyncSession, thesis: Thesis) -> int:
    return await db.scalar(select(func.count(Milestone.id)).where(Milestone.thesis_id == thesis.id)) or 0


@router.get("", response_model=list[MilestoneResponse])
async def list_milestones(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if not thesis:
        return []
    return await list_thesis_milestones(db, thesis)


@router.post("", response_model=MilestoneResponse, status_code=status.HTTP_201_CREATED)
async def create_milestone(
    data: MilestoneCreate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    milestone = Milestone(
        thesis_id=thesis.id,
        name=data.name,
        description=data.description,
        target_date=data.target_date,
        order_index=await _count(db, thesis),
    )
    db.add(milestone)
    await db.commit()
    await db.refresh(milestone)
    return milestone


@router.post("/initialize", response_model=list[MilestoneResponse], status_code=status.HTTP_201_CREATED)
async def initialize_milestones(
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)],
    data: Annotated[MilestoneInitialize | None, Body()] = None,
):
    """Create a batch of milestones, the default eight-step plan unless a list is given."""
    if data and data.milestones is not None:
        template = [m.model_dump() for m in data.milestones]
    else:
        template = DEFAULT_MILESTONES

    offset = await _count(db, thesis)
    created = []
    for i, item in enumerate(template):
        milestone = Milestone(
            thesis_id=thesis.id,
            name=item["name"],
            description=item.get("description"),
            target_date=item.get("target_date"),
            order_index=offset + i,
        )
        db.add(milestone)
        created.append(milestone)

    await db.commit()
    return created


@router.patch("/{milestone_id}", response_model=MilestoneResponse)
async def update_milestone(
    milestone_id: uuid.UUID,
    data: MilestoneUpdate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    milestone = await get_thesis_item(db, Milestone, milestone_id, thesis, "Milestone")

    update_data = data.model_dump(exclude_unset=True)
    completed = update_data.pop("completed", None)
    for field, value in update_data.items():
        if value is None and field == "name":
            continue
        setattr(milestone, field, value)

    if completed is not None and completed != milestone.completed:
        milestone.completed = completed
        milestone.completed_date = datetime.now(timezone.utc) if completed else None
    touch(milestone)

    await db.commit()
    await db.refresh(milestone)
    return milestone


@router.delete("/{milestone_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_milestone(
    milestone_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    milestone = await get_thesis_item(db, Milestone, milestone_id, thesis, "Milestone")
    await db.delete(milestone)
    await db.commit()
