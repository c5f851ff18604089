import uuid
from typing import Annotated
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import PlainTextResponse
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import Thesis, Reference, CitationStyle
from thesisflow.schemas import ReferenceCreate, ReferenceUpdate, ReferenceResponse, CitationResponse
from thesisflow.services.citations import format_citation, export_citations
from thesisflow.api.v1.deps import get_user_thesis, require_thesis, get_thesis_item, touch

router = APIRouter()


async def list_thesis_references(db: AsyncSession, thesis: Thesis) -> list[Reference]:
    result = await db.execute(
        select(Reference).where(Reference.thesis_id == thesis.id).order_by(Reference.created_at)
    )
    return list(result.scalars().all())


@router.get("")
async def list_references(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
) -> dict[str, list[ReferenceResponse]]:
    if not thesis:
        return {"references": []}
    references = await list_thesis_references(db, thesis)
    return {"references": [ReferenceResponse.model_validate(ref) for ref in references]}


@router.get("/export", response_class=PlainTextResponse)
async def export_references(
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)],
    style: CitationStyle = Query(default=CitationStyle.APA),
):
    references = await list_thesis_references(db, thesis)
    return PlainTextResponse(
        export_citations(references, style),
        headers={"Content-Disposition": f'attachment; filename="references-{style.value}.txt"'},
    )


@router.post("", response_model=ReferenceResponse, status_code=status.HTTP_201_CREATED)
async def create_reference(
    data: ReferenceCreate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    reference = Reference(thesis_id=thesis.id, matrix_data={}, **data.model_dump())
    db.add(reference)
    await db.commit()
    await db.refresh(reference)
    return reference


@router.get("/{reference_id}/citation", response_model=CitationResponse)
async def get_citation(
    reference_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)],
    style: CitationStyle | None = None,
):
    reference = await get_thesis_item(db, Reference, reference_id, thesis, "Reference")
    style = style or CitationStyle(reference.citation_style)
    return {"style": style, "citation": format_citation(reference, style)}


@router.patch("/{reference_id}", response_model=ReferenceResponse)
async def update_reference(
    reference_id: uuid.UUID,
    data: ReferenceUpdate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    reference = await get_thesis_item(db, Reference, reference_id, thesis, "Reference")
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is None and field in ("title", "authors", "tags", "citation_style", "matrix_data"):
            continue
        setattr(reference, field, value)
    touch(reference)

    await db.commit()
    await db.refresh(reference)
    return reference


@router.delete("/{reference_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_reference(
    reference_id: uuid.UUID,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    reference = await get_thesis_item(db, Reference, reference_id, thesis, "Reference")
    await db.delete(reference)
    await db.commit()
