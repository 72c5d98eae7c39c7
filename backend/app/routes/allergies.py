from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models import Allergy
from app.schemas import AllergyCreate, AllergyRead, AllergyUpdate, SuccessResponse
from app.crud import (
    create_record,
    delete_record,
    get_allergies_by_child,
    get_record,
    save_record,
)
from app.auth import get_current_user_id
from app.access import require_child_read, require_child_write

router = APIRouter(prefix="/allergies", tags=["allergies"])


async def _get_allergy(db: AsyncSession, allergy_id: str) -> Allergy:
    allergy = await get_record(db, Allergy, allergy_id)
    if not allergy:
        raise HTTPException(status_code=404, detail="Allergy not found")
    return allergy


@router.get("", response_model=list[AllergyRead])
async def list_allergies(
    child_id: str = Query(..., alias="childId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_read(db, user_id, child_id)
    return await get_allergies_by_child(db, child_id)


@router.post("", response_model=AllergyRead)
async def create_allergy(
    data: AllergyCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_write(db, user_id, data.child_id)
    return await create_record(db, Allergy(**data.model_dump()))


@router.put("/{allergy_id}", response_model=AllergyRead)
async def update_allergy(
    allergy_id: str,
    data: AllergyUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    allergy = await _get_allergy(db, allergy_id)
    await require_child_write(db, user_id, allergy.child_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(allergy, field, value)
    return await save_record(db, allergy)


@router.delete("/{allergy_id}", response_model=SuccessResponse)
async def delete_allergy(
    allergy_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    allergy = await _get_allergy(db, allergy_id)
    await require_child_write(db, user_id, allergy.child_id)
    await delete_record(db, allergy)
    return SuccessResponse()
