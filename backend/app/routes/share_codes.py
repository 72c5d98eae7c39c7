"""Routes for minting, looking up, updating and revoking share codes."""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession
from app.schemas import (
    ChildRead,
    ShareCodeCreate,
    ShareCodeLookup,
    ShareCodeRead,
    ShareCodeUpdate,
    SuccessResponse,
)
from app.models import ShareCode
from app.database import get_session
from app.crud import (
    get_child,
    get_settings,
    get_share_code,
    get_share_code_for_child,
    grant_child_access,
    mint_share_code,
    revoke_share_code,
    set_share_code_read_only,
)
from app.auth import get_current_user_id
from app.access import require_child_owner, require_child_read
from app.routes.children import child_read

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/share-codes", tags=["share-codes"])


def _share_not_found() -> HTTPException:
    return HTTPException(status_code=404, detail="Share code not found")


def _ensure_owner_param(owner_id: str | None, user_id: str) -> None:
    # ownerId is accepted for older clients but must name the caller.
    if owner_id and owner_id != user_id:
        raise HTTPException(status_code=403, detail="Not authorized")


def _share_read(share: ShareCode) -> ShareCodeRead:
    return ShareCodeRead(
        id=str(share.id),
        code=share.code,
        child_id=share.child_id,
        owner_id=share.owner_id,
        is_read_only=share.is_read_only,
        created_at=share.created_at,
    )


@router.post("", response_model=ShareCodeRead)
async def create_share_code(
    data: ShareCodeCreate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Return the caller's code for a child, minting it on first request."""
    _ensure_owner_param(data.owner_id, user_id)
    child = await require_child_owner(db, user_id, data.child_id)
    snapshot = {
        "child_name": data.child_name or child.name,
        "child_birth_date": data.child_birth_date or child.birth_date,
        "child_sex": data.child_sex or child.sex,
        "child_avatar_index": (
            data.child_avatar_index
            if data.child_avatar_index is not None
            else child.avatar_index
        ),
    }
    share = await mint_share_code(db, child.id, user_id, snapshot, data.is_read_only)
    logger.info("Share code issued for child %s by user %s", child.id, user_id)
    return _share_read(share)


@router.get("/child/{child_id}", response_model=ShareCodeRead)
async def get_child_share_code(
    child_id: str,
    owner_id: str | None = Query(None, alias="ownerId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    _ensure_owner_param(owner_id, user_id)
    share = await get_share_code_for_child(db, child_id, user_id)
    if not share:
        raise _share_not_found()
    return _share_read(share)


@router.get("/{code}", response_model=ShareCodeLookup)
async def lookup_share_code(
    code: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Preview the child behind a code before redeeming it."""
    share = await get_share_code(db, code)
    if not share:
        raise _share_not_found()
    return ShareCodeLookup(
        **_share_read(share).model_dump(),
        child_name=share.child_name,
        child_birth_date=share.child_birth_date,
        child_sex=share.child_sex,
        child_avatar_index=share.child_avatar_index,
    )


@router.post("/{code}/redeem", response_model=ChildRead)
async def redeem_share_code(
    code: str,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Grant the caller access to the code's child and return the child.

    Redeeming again is safe: the grant is updated to the code's current
    read-only mode.
    """
    share = await get_share_code(db, code)
    if not share:
        raise _share_not_found()
    if share.owner_id != user_id:
        await grant_child_access(db, share.child_id, user_id, share.is_read_only)
        logger.info(
            "User %s redeemed share code for child %s (read_only=%s)",
            user_id,
            share.child_id,
            share.is_read_only,
        )
    child, visibility = await require_child_read(db, user_id, share.child_id)
    return child_read(child, visibility)


@router.patch("/{child_id}", response_model=ShareCodeRead)
async def update_share_code(
    child_id: str,
    data: ShareCodeUpdate,
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Toggle whether future redemptions grant read-only access."""
    _ensure_owner_param(data.owner_id, user_id)
    share = await set_share_code_read_only(db, child_id, user_id, data.is_read_only)
    if not share:
        raise _share_not_found()
    logger.info(
        "Share code for child %s set read_only=%s by user %s",
        child_id,
        data.is_read_only,
        user_id,
    )
    return _share_read(share)


@router.delete("/{child_id}", response_model=SuccessResponse)
async def delete_share_code(
    child_id: str,
    owner_id: str | None = Query(None, alias="ownerId"),
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Revoke the caller's code for a child; succeeds even if none exists."""
    _ensure_owner_param(owner_id, user_id)
    settings = await get_settings(db)
    child = await get_child(db, child_id)
    remove_access = bool(
        settings.revoke_removes_access and child and child.owner_id == user_id
    )
    await revoke_share_code(db, child_id, user_id, remove_access=remove_access)
    logger.info(
        "Share code for child %s revoked by user %s (access removed: %s)",
        child_id,
        user_id,
        remove_access,
    )
    return SuccessResponse()
