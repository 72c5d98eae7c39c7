"""Endpoints for medical visits and the photos attached to them."""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.models import MedicalVisit, VisitPhoto
from app.schemas import (
    SuccessResponse,
    VisitCreate,
    VisitPhotoCreate,
    VisitPhotoRead,
    VisitRead,
    VisitUpdate,
)
from app.crud import (
    create_record,
    delete_record,
    delete_visit,
    get_photos_by_visit,
    get_record,
    get_visits_by_child,
    save_record,
)
from app.auth import get_current_user_id
from app.access import require_child_read, require_child_write

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/visits", tags=["visits"])
photo_router = APIRouter(prefix="/visit-photos", tags=["visits"])


async def _get_visit(db: AsyncSession, visit_id: str) -> MedicalVisit:
    visit = await get_record(db, MedicalVisit, visit_id)
    if not visit:
        raise HTTPException(status_code=404, detail="Visit not found")
    return visit


@router.get("", response_model=list[VisitRead])
async def list_visits(
    child_id: str = Query(..., alias="childId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Return a child's visits, most recent first."""
    await require_child_read(db, user_id, child_id)
    return await get_visits_by_child(db, child_id)


@router.post("", response_model=VisitRead)
async def create_visit(
    data: VisitCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_write(db, user_id, data.child_id)
    visit = await create_record(db, MedicalVisit(**data.model_dump()))
    logger.info("Visit %s added for child %s by user %s", visit.id, visit.child_id, user_id)
    return visit


@router.put("/{visit_id}", response_model=VisitRead)
async def update_visit(
    visit_id: str,
    data: VisitUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    visit = await _get_visit(db, visit_id)
    await require_child_write(db, user_id, visit.child_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(visit, field, value)
    return await save_record(db, visit)


@router.delete("/{visit_id}", response_model=SuccessResponse)
async def delete_visit_route(
    visit_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    visit = await _get_visit(db, visit_id)
    await require_child_write(db, user_id, visit.child_id)
    await delete_visit(db, visit)
    logger.info("Visit %s deleted by user %s", visit_id, user_id)
    return SuccessResponse()


@photo_router.get("", response_model=list[VisitPhotoRead])
async def list_visit_photos(
    visit_id: str = Query(..., alias="visitId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    visit = await _get_visit(db, visit_id)
    await require_child_read(db, user_id, visit.child_id)
    return await get_photos_by_visit(db, visit_id)


@photo_router.post("", response_model=VisitPhotoRead)
async def add_visit_photo(
    data: VisitPhotoCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    visit = await _get_visit(db, data.visit_id)
    await require_child_write(db, user_id, visit.child_id)
    return await create_record(
        db, VisitPhoto(visit_id=visit.id, photo_data=data.photo_data)
    )


@photo_router.delete("/{photo_id}", response_model=SuccessResponse)
async def delete_visit_photo(
    photo_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    photo = await get_record(db, VisitPhoto, photo_id)
    if not photo:
        raise HTTPException(status_code=404, detail="Photo not found")
    visit = await _get_visit(db, photo.visit_id)
    await require_child_write(db, user_id, visit.child_id)
    await delete_record(db, photo)
    return SuccessResponse()
