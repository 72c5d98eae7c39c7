"""Pydantic models for application configuration settings."""

from .base import CamelModel


class SettingsRead(CamelModel):
    site_name: str
    revoke_removes_access: bool
    default_share_read_only: bool


class SettingsUpdate(CamelModel):
    site_name: str | None = None
    revoke_removes_access: bool | None = None
    default_share_read_only: bool | None = None
