"""Routes for managing child profiles.

Every response carries the caller's resolved ``isShared`` and
``isReadOnly`` flags for the child.
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import ChildCreate, ChildRead, ChildUpdate, SuccessResponse
from app.models import Child
from app.database import get_session
from app.acl import OWNER, Visibility
from app.crud import (
    create_record,
    save_record,
    delete_child,
    list_accessible_children,
)
from app.auth import get_current_user_id
from app.access import require_child_read, require_child_write, require_child_owner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/children", tags=["children"])


def child_read(child: Child, visibility: Visibility) -> ChildRead:
    return ChildRead(
        id=child.id,
        name=child.name,
        birth_date=child.birth_date,
        sex=child.sex,
        avatar_index=child.avatar_index,
        created_at=child.created_at,
        owner_id=child.owner_id,
        is_shared=visibility.is_shared,
        is_read_only=visibility.is_read_only,
    )


@router.get("", response_model=list[ChildRead])
async def list_children(
    user_id_param: str | None = Query(None, alias="userId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """List children owned by or shared with the caller, newest first."""
    if user_id_param and user_id_param != user_id:
        raise HTTPException(status_code=403, detail="Not authorized")
    children = await list_accessible_children(db, user_id)
    return [child_read(child, visibility) for child, visibility in children]


@router.post("", response_model=ChildRead)
async def create_child_route(
    data: ChildCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Create a child owned by the caller."""
    child = await create_record(
        db,
        Child(
            owner_id=user_id,
            name=data.name,
            birth_date=data.birth_date,
            sex=data.sex,
            avatar_index=data.avatar_index,
        ),
    )
    logger.info("Child %s created by user %s", child.id, user_id)
    return child_read(child, OWNER)


@router.get("/{child_id}", response_model=ChildRead)
async def get_child_route(
    child_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    child, visibility = await require_child_read(db, user_id, child_id)
    return child_read(child, visibility)


@router.put("/{child_id}", response_model=ChildRead)
async def update_child_route(
    child_id: str,
    data: ChildUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    child, visibility = await require_child_write(db, user_id, child_id)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(child, field, value)
    updated = await save_record(db, child)
    return child_read(updated, visibility)


@router.delete("/{child_id}", response_model=SuccessResponse)
async def delete_child_route(
    child_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Delete a child and all of its records; only the owner may do this."""
    child = await require_child_owner(db, user_id, child_id)
    await delete_child(db, child)
    logger.info("Child %s deleted by user %s", child_id, user_id)
    return SuccessResponse()
