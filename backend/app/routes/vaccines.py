"""Endpoints for tracking a child's vaccination schedule."""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models import Vaccine
from app.schemas import (
    SuccessResponse,
    VaccineBatchCreate,
    VaccineCreate,
    VaccineRead,
    VaccineUpdate,
    VaccineWithChild,
)
from app.crud import (
    create_record,
    create_vaccines,
    delete_record,
    get_pending_vaccines_for_user,
    get_record,
    get_vaccines_by_child,
    save_record,
)
from app.auth import get_current_user_id
from app.access import require_child_read, require_child_write

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vaccines", tags=["vaccines"])


async def _get_vaccine(db: AsyncSession, vaccine_id: str) -> Vaccine:
    vaccine = await get_record(db, Vaccine, vaccine_id)
    if not vaccine:
        raise HTTPException(status_code=404, detail="Vaccine not found")
    return vaccine


@router.get("", response_model=list[VaccineRead])
async def list_vaccines(
    child_id: str = Query(..., alias="childId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_read(db, user_id, child_id)
    return await get_vaccines_by_child(db, child_id)


@router.get("/pending", response_model=list[VaccineWithChild])
async def list_pending_vaccines(
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """First unapplied vaccines across every child the caller can see."""
    rows = await get_pending_vaccines_for_user(db, user_id)
    return [
        VaccineWithChild(
            **VaccineRead.model_validate(vaccine).model_dump(), child_name=child_name
        )
        for vaccine, child_name in rows
    ]


@router.post("", response_model=VaccineRead)
async def create_vaccine(
    data: VaccineCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_write(db, user_id, data.child_id)
    return await create_record(db, Vaccine(**data.model_dump()))


@router.post("/batch", response_model=list[VaccineRead])
async def create_vaccine_batch(
    data: VaccineBatchCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Seed a child's schedule with a list of not yet applied vaccines."""
    await require_child_write(db, user_id, data.child_id)
    vaccines = await create_vaccines(
        db, data.child_id, [(v.name, v.recommended_age) for v in data.vaccines]
    )
    logger.info(
        "%d vaccines added for child %s by user %s",
        len(vaccines),
        data.child_id,
        user_id,
    )
    return vaccines


@router.put("/{vaccine_id}", response_model=VaccineRead)
async def update_vaccine(
    vaccine_id: str,
    data: VaccineUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    vaccine = await _get_vaccine(db, vaccine_id)
    await require_child_write(db, user_id, vaccine.child_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(vaccine, field, value)
    return await save_record(db, vaccine)


@router.delete("/{vaccine_id}", response_model=SuccessResponse)
async def delete_vaccine(
    vaccine_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    vaccine = await _get_vaccine(db, vaccine_id)
    await require_child_write(db, user_id, vaccine.child_id)
    await delete_record(db, vaccine)
    return SuccessResponse()
