"""Endpoints for a child's history of past illnesses."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models import PastDisease
from app.schemas import DiseaseCreate, DiseaseRead, DiseaseUpdate, SuccessResponse
from app.crud import (
    create_record,
    delete_record,
    get_diseases_by_child,
    get_record,
    save_record,
)
from app.auth import get_current_user_id
from app.access import require_child_read, require_child_write

router = APIRouter(prefix="/diseases", tags=["diseases"])


async def _get_disease(db: AsyncSession, disease_id: str) -> PastDisease:
    disease = await get_record(db, PastDisease, disease_id)
    if not disease:
        raise HTTPException(status_code=404, detail="Disease not found")
    return disease


@router.get("", response_model=list[DiseaseRead])
async def list_diseases(
    child_id: str = Query(..., alias="childId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_read(db, user_id, child_id)
    return await get_diseases_by_child(db, child_id)


@router.post("", response_model=DiseaseRead)
async def create_disease(
    data: DiseaseCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_write(db, user_id, data.child_id)
    return await create_record(db, PastDisease(**data.model_dump()))


@router.put("/{disease_id}", response_model=DiseaseRead)
async def update_disease(
    disease_id: str,
    data: DiseaseUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    disease = await _get_disease(db, disease_id)
    await require_child_write(db, user_id, disease.child_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(disease, field, value)
    return await save_record(db, disease)


@router.delete("/{disease_id}", response_model=SuccessResponse)
async def delete_disease(
    disease_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    disease = await _get_disease(db, disease_id)
    await require_child_write(db, user_id, disease.child_id)
    await delete_record(db, disease)
    return SuccessResponse()
