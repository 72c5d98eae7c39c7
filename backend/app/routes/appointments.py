"""Endpoints for upcoming and past medical appointments."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models import Appointment
from app.schemas import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentUpdate,
    AppointmentWithChild,
    SuccessResponse,
)
from app.crud import (
    create_record,
    delete_record,
    get_appointments_by_child,
    get_record,
    get_upcoming_appointments_for_user,
    save_record,
)
from app.auth import get_current_user_id
from app.access import require_child_read, require_child_write

router = APIRouter(prefix="/appointments", tags=["appointments"])


async def _get_appointment(db: AsyncSession, appointment_id: str) -> Appointment:
    appointment = await get_record(db, Appointment, appointment_id)
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


@router.get("", response_model=list[AppointmentRead])
async def list_appointments(
    child_id: str = Query(..., alias="childId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_read(db, user_id, child_id)
    return await get_appointments_by_child(db, child_id)


@router.get("/upcoming", response_model=list[AppointmentWithChild])
async def list_upcoming_appointments(
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Next appointments across every child the caller can see."""
    rows = await get_upcoming_appointments_for_user(db, user_id)
    return [
        AppointmentWithChild(
            **AppointmentRead.model_validate(appointment).model_dump(),
            child_name=child_name,
        )
        for appointment, child_name in rows
    ]


@router.post("", response_model=AppointmentRead)
async def create_appointment(
    data: AppointmentCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_write(db, user_id, data.child_id)
    return await create_record(db, Appointment(**data.model_dump()))


@router.put("/{appointment_id}", response_model=AppointmentRead)
async def update_appointment(
    appointment_id: str,
    data: AppointmentUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    appointment = await _get_appointment(db, appointment_id)
    await require_child_write(db, user_id, appointment.child_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(appointment, field, value)
    return await save_record(db, appointment)


@router.delete("/{appointment_id}", response_model=SuccessResponse)
async def delete_appointment(
    appointment_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    appointment = await _get_appointment(db, appointment_id)
    await require_child_write(db, user_id, appointment.child_id)
    await delete_record(db, appointment)
    return SuccessResponse()
