"""Endpoints for the caller's private list of doctors."""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models import Doctor
from app.schemas import DoctorCreate, DoctorRead, DoctorUpdate, SuccessResponse
from app.crud import (
    create_record,
    delete_record,
    get_doctors_by_owner,
    get_record,
    save_record,
)
from app.auth import get_current_user_id

router = APIRouter(prefix="/doctors", tags=["doctors"])


async def _get_own_doctor(db: AsyncSession, doctor_id: str, user_id: str) -> Doctor:
    doctor = await get_record(db, Doctor, doctor_id)
    if not doctor or doctor.owner_id != user_id:
        raise HTTPException(status_code=404, detail="Doctor not found")
    return doctor


@router.get("", response_model=list[DoctorRead])
async def list_doctors(
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    return await get_doctors_by_owner(db, user_id)


@router.post("", response_model=DoctorRead)
async def create_doctor(
    data: DoctorCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    return await create_record(db, Doctor(owner_id=user_id, **data.model_dump()))


@router.put("/{doctor_id}", response_model=DoctorRead)
async def update_doctor(
    doctor_id: str,
    data: DoctorUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    doctor = await _get_own_doctor(db, doctor_id, user_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(doctor, field, value)
    return await save_record(db, doctor)


@router.delete("/{doctor_id}", response_model=SuccessResponse)
async def delete_doctor(
    doctor_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    doctor = await _get_own_doctor(db, doctor_id, user_id)
    await delete_record(db, doctor)
    return SuccessResponse()
