"""Schemas for share codes and the access grants they produce."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class ShareCodeCreate(CamelModel):
    child_id: str = Field(min_length=1)
    owner_id: Optional[str] = None
    child_name: Optional[str] = None
    child_birth_date: Optional[str] = None
    child_sex: Optional[str] = None
    child_avatar_index: Optional[int] = None
    is_read_only: Optional[bool] = None


class ShareCodeUpdate(CamelModel):
    is_read_only: bool
    owner_id: Optional[str] = None


class ShareCodeRead(CamelModel):
    id: str
    code: str
    child_id: str
    owner_id: str
    is_read_only: bool
    created_at: datetime


class ShareCodeLookup(ShareCodeRead):
    """Share code together with the child snapshot taken at mint time."""

    child_name: str
    child_birth_date: Optional[str] = None
    child_sex: Optional[str] = None
    child_avatar_index: Optional[int] = None


class ChildAccessCreate(CamelModel):
    child_id: str = Field(min_length=1)
    user_id: str = Field(min_length=1)
    is_read_only: Optional[bool] = None
    code: Optional[str] = None


class ChildAccessRead(CamelModel):
    child_id: str
    user_id: str
    is_read_only: bool
    created_at: datetime
