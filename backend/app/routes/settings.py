"""Endpoints for viewing and updating site-wide settings."""

import logging
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_session
from app.auth import get_current_user_id, require_admin
from app.schemas import SettingsRead, SettingsUpdate
from app.crud import get_settings, save_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=SettingsRead)
async def read_settings(
    db: AsyncSession = Depends(get_session),
    user_id: str = Depends(get_current_user_id),
):
    """Retrieve the current configuration values."""
    settings = await get_settings(db)
    return SettingsRead(
        site_name=settings.site_name,
        revoke_removes_access=settings.revoke_removes_access,
        default_share_read_only=settings.default_share_read_only,
    )


@router.put("", response_model=SettingsRead)
async def update_settings(
    data: SettingsUpdate,
    db: AsyncSession = Depends(get_session),
    admin_id: str = Depends(require_admin),
):
    """Update settings; only admins may change configuration."""
    settings = await get_settings(db)
    for field, value in data.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(settings, field, value)
    updated = await save_settings(db, settings)
    logger.info("Settings updated by %s", admin_id)
    return SettingsRead(
        site_name=updated.site_name,
        revoke_removes_access=updated.revoke_removes_access,
        default_share_read_only=updated.default_share_read_only,
    )
