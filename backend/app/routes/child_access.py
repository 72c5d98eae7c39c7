"""Routes for access grants created by redeeming share codes."""

import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import ChildAccessCreate, ChildAccessRead, SuccessResponse
from app.database import get_session
from app.crud import (
    get_child,
    get_child_access,
    get_grants_for_child,
    get_grants_for_user,
    get_share_code,
    get_share_code_for_child,
    grant_child_access,
    remove_child_access,
)
from app.auth import get_current_user_id, is_admin
from app.access import require_child_owner

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/child-access", tags=["child-access"])


@router.post("", response_model=SuccessResponse)
async def create_child_access(
    data: ChildAccessCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Create or update the caller's grant for a shared child.

    A live share code for the child is required.  The stored grant is
    read-only when either the code or the request asks for it, so a
    client cannot widen the access the owner chose.  Administrators may
    grant directly without a code.
    """
    admin = is_admin(user_id)
    if data.user_id != user_id and not admin:
        raise HTTPException(status_code=403, detail="Not authorized")

    child = await get_child(db, data.child_id)
    if not child:
        raise HTTPException(status_code=404, detail="Share code not found")
    if child.owner_id == data.user_id:
        # owners already have full access
        return SuccessResponse()

    if data.code:
        share = await get_share_code(db, data.code)
        if share and share.child_id != data.child_id:
            share = None
    else:
        share = await get_share_code_for_child(db, child.id, child.owner_id)

    if share:
        is_read_only = share.is_read_only or bool(data.is_read_only)
    elif admin:
        is_read_only = True if data.is_read_only is None else data.is_read_only
    else:
        raise HTTPException(status_code=404, detail="Share code not found")

    await grant_child_access(db, data.child_id, data.user_id, is_read_only)
    logger.info(
        "Access to child %s granted to user %s (read_only=%s)",
        data.child_id,
        data.user_id,
        is_read_only,
    )
    return SuccessResponse()


@router.get("", response_model=list[ChildAccessRead])
async def list_my_access(
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Grants held by the caller on other users' children."""
    return await get_grants_for_user(db, user_id)


@router.get("/child/{child_id}", response_model=list[ChildAccessRead])
async def list_child_access(
    child_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Users a child is shared with; visible to the owner only."""
    await require_child_owner(db, user_id, child_id)
    return await get_grants_for_child(db, child_id)


@router.delete("/{child_id}/{grantee_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_child_access(
    child_id: str,
    grantee_id: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    await require_child_owner(db, user_id, child_id)
    grant = await get_child_access(db, child_id, grantee_id)
    if not grant:
        raise HTTPException(status_code=404, detail="Access not found")
    await remove_child_access(db, child_id, grantee_id)
    logger.info(
        "Access to child %s removed from user %s by owner %s",
        child_id,
        grantee_id,
        user_id,
    )
