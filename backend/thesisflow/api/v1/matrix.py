"""
Literature matrix: the thesis's ordered column names crossed with its references.

Cells live inside each reference's ``matrix_data`` map, so adding a column never
backfills rows and a missing key simply renders as an empty cell.
"""

from typing import Annotated
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from thesisflow.core import get_db
from thesisflow.models import Thesis, Reference
from thesisflow.schemas import MatrixColumnCreate, MatrixCellUpdate, MatrixResponse, ReferenceResponse
from thesisflow.api.v1.deps import get_user_thesis, require_thesis, get_thesis_item, touch
from thesisflow.api.v1.references import list_thesis_references

router = APIRouter()


def build_matrix(columns: list[str], references: list[Reference]) -> dict:
    rows = []
    for ref in references:
        data = ref.matrix_data or {}
        rows.append({
            "reference_id": ref.id,
            "title": ref.title,
            "authors": ref.authors or [],
            "year": ref.year,
            "cells": {column: data.get(column, "") for column in columns},
        })
    return {"columns": columns, "rows": rows}


@router.get("", response_model=MatrixResponse)
async def get_matrix(
    thesis: Annotated[Thesis | None, Depends(get_user_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if not thesis:
        return {"columns": [], "rows": []}
    references = await list_thesis_references(db, thesis)
    return build_matrix(list(thesis.matrix_columns or []), references)


@router.post("/columns", response_model=list[str], status_code=status.HTTP_201_CREATED)
async def add_column(
    data: MatrixColumnCreate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    columns = list(thesis.matrix_columns or [])
    if data.name in columns:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Column already exists")

    thesis.matrix_columns = [*columns, data.name]
    touch(thesis)
    await db.commit()
    return thesis.matrix_columns


@router.delete("/columns/{name:path}", response_model=list[str])
async def remove_column(
    name: str,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    columns = list(thesis.matrix_columns or [])
    if name not in columns:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Column not found")

    # Cell values stay in each reference's map; re-adding the column brings them back
    thesis.matrix_columns = [column for column in columns if column != name]
    touch(thesis)
    await db.commit()
    return thesis.matrix_columns


@router.put("/cells", response_model=ReferenceResponse)
async def update_cell(
    data: MatrixCellUpdate,
    thesis: Annotated[Thesis, Depends(require_thesis)],
    db: Annotated[AsyncSession, Depends(get_db)]
):
    if data.column not in (thesis.matrix_columns or []):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Unknown matrix column")

    reference = await get_thesis_item(db, Reference, data.reference_id, thesis, "Reference")
    reference.matrix_data = {**(reference.matrix_data or {}), data.column: data.value}
    touch(reference)

    await db.commit()
    await db.refresh(reference)
    return reference
