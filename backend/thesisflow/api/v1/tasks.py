import uuid
from typing import Annotated
from fastapi import APIRouter, Depends, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import Thesis, Chapter, Task, TaskStatus
from thesisflow.schemas import TaskCreate, TaskUpdate, TaskResponse, TasksPageResponse
from thesisflow.api.v1.deps import get_user_thesis, require_thesis, get_thesis_item, touch
from thesisflow.api.v1.chapters import list_thesis_chapters

router = APIRouter()


async def list_thesis_tasks(db: AsyncSession, thesis: Thesis) -> list[Task]:
    result = await db.execute(
        select(Task).where(Task.thesis_id == thesis.id).order_by(Task.order_index, Task.created_at)
    )
    return list(result.scalars().all())


@router.get("", response_model=TasksPageResponse)
async def tasks_page(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if not thesis:
        return TasksPageResponse()

    return {
        "tasks": await list_thesis_tasks(db, thesis),
        "chapters": await list_thesis_chapters(db, thesis),
    }


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    data: TaskCreate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if data.chapter_id:
        await get_thesis_item(db, Chapter, data.chapter_id, thesis, "Chapter")

    siblings = await db.scalar(select(func.count(Task.id)).where(Task.thesis_id == thesis.id))
    task = Task(
        thesis_id=thesis.id,
        chapter_id=data.chapter_id,
        title=data.title,
        description=data.description,
        priority=data.priority,
        due_date=data.due_date,
        status=TaskStatus.TODO,
        completed=False,
        order_index=siblings or 0,
    )
    db.add(task)
    await db.commit()
    await db.refresh(task)
    return task


def apply_task_update(task: Task, data: TaskUpdate) -> None:
    """Partial update; ``completed`` always follows ``status``."""
    update_data = data.model_dump(exclude_unset=True)
    completed = update_data.pop("completed", None)

    for field, value in update_data.items():
        if value is None and field in ("title", "status", "priority", "order_index"):
            continue
        setattr(task, field, value)

    # A bare checkbox toggle moves the card between the todo and done columns
    if update_data.get("status") is None and completed is not None:
        if completed:
            task.status = TaskStatus.DONE
        elif task.status == TaskStatus.DONE:
            task.status = TaskStatus.TODO

    task.completed = task.status == TaskStatus.DONE
    touch(task)


@router.patch("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: uuid.UUID,
    data: TaskUpdate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    task = await get_thesis_item(db, Task, task_id, thesis, "Task")
    if data.chapter_id:
        await get_thesis_item(db, Chapter, data.chapter_id, thesis, "Chapter")

    apply_task_update(task, data)
    await db.commit()
    await db.refresh(task)
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    task = await get_thesis_item(db, Task, task_id, thesis, "Task")
    await db.delete(task)
    await db.commit()
