from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models import Medication
from app.schemas import (
    MedicationCreate,
    MedicationRead,
    MedicationUpdate,
    SuccessResponse,
)
from app.crud import (
    create_record,
    delete_record,
    get_medications_by_child,
    get_record,
    save_record,
)
from app.auth import get_current_user_id
from app.access import require_child_read, require_child_write

router = APIRouter(prefix="/medications", tags=["medications"])


async def _get_medication(db: AsyncSession, medication_id: str) -> Medication:
    medication = await get_record(db, Medication, medication_id)
    if not medication:
        raise HTTPException(status_code=404, detail="Medication not found")
    return medication


@router.get("", response_model=list[MedicationRead])
async def list_medications(
    child_id: str = Query(..., alias="childId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_read(db, user_id, child_id)
    return await get_medications_by_child(db, child_id)


@router.post("", response_model=MedicationRead)
async def create_medication(
    data: MedicationCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_write(db, user_id, data.child_id)
    return await create_record(db, Medication(**data.model_dump()))


@router.put("/{medication_id}", response_model=MedicationRead)
async def update_medication(
    medication_id: str,
    data: MedicationUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    medication = await _get_medication(db, medication_id)
    await require_child_write(db, user_id, medication.child_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(medication, field, value)
    return await save_record(db, medication)


@router.delete("/{medication_id}", response_model=SuccessResponse)
async def delete_medication(
    medication_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    medication = await _get_medication(db, medication_id)
    await require_child_write(db, user_id, medication.child_id)
    await delete_record(db, medication)
    return SuccessResponse()
