"""Route guards applying child visibility to request handlers.

Reads of a child the caller cannot see answer 404 so the child's
existence is never revealed.  Writes answer 403 when the caller has no
access or only read-only access.
"""

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.acl import Visibility
from app.crud import get_child, resolve_child_visibility
from app.models import Child


def child_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Child not found")


async def require_child_read(
    db: AsyncSession, user_id: str, child_id: str
) -> tuple[Child, Visibility]:
    child = await get_child(db, child_id)
    if not child:
        raise child_not_found()
    visibility = await resolve_child_visibility(db, child, user_id)
    if not visibility.can_read:
        raise child_not_found()
    return child, visibility


async def require_child_write(
    db: AsyncSession, user_id: str, child_id: str
) -> tuple[Child, Visibility]:
    child = await get_child(db, child_id)
    visibility = None
    if child:
        visibility = await resolve_child_visibility(db, child, user_id)
    if visibility is None or not visibility.can_write:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to modify this child",
        )
    return child, visibility


async def require_child_owner(
    db: AsyncSession, user_id: str, child_id: str
) -> Child:
    """Owner-only actions: sharing, revoking and deleting the child."""
    child, visibility = await require_child_read(db, user_id, child_id)
    if not visibility.is_owner:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized"
        )
    return child
