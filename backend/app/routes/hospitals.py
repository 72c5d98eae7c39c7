"""Endpoints for the caller's private list of hospitals."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models import Hospital
from app.schemas import (
    HospitalCreate,
    HospitalRead,
    HospitalUpdate,
    SuccessResponse,
)
from app.crud import (
    create_record,
    delete_record,
    get_hospitals_by_owner,
    get_record,
    save_record,
)
from app.auth import get_current_user_id

router = APIRouter(prefix="/hospitals", tags=["hospitals"])


async def _get_own_hospital(
    db: AsyncSession, hospital_id: str, user_id: str
) -> Hospital:
    hospital = await get_record(db, Hospital, hospital_id)
    if not hospital or hospital.owner_id != user_id:
        raise HTTPException(status_code=404, detail="Hospital not found")
    return hospital


@router.get("", response_model=list[HospitalRead])
async def list_hospitals(
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    return await get_hospitals_by_owner(db, user_id)


@router.post("", response_model=HospitalRead)
async def create_hospital(
    data: HospitalCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    return await create_record(db, Hospital(owner_id=user_id, **data.model_dump()))


@router.put("/{hospital_id}", response_model=HospitalRead)
async def update_hospital(
    hospital_id: str,
    data: HospitalUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    hospital = await _get_own_hospital(db, hospital_id, user_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(hospital, field, value)
    return await save_record(db, hospital)


@router.delete("/{hospital_id}", response_model=SuccessResponse)
async def delete_hospital(
    hospital_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    hospital = await _get_own_hospital(db, hospital_id, user_id)
    await delete_record(db, hospital)
    return SuccessResponse()
