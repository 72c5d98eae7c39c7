from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel

Sex = Literal["male", "female"]


class ChildCreate(CamelModel):
    name: str = Field(min_length=1)
    birth_date: str = Field(min_length=1)
    sex: Sex
    avatar_index: int = 0


class ChildUpdate(CamelModel):
    name: Optional[str] = None
    birth_date: Optional[str] = None
    sex: Optional[Sex] = None
    avatar_index: Optional[int] = None


class ChildRead(CamelModel):
    id: str
    name: str
    birth_date: str
    sex: str
    avatar_index: int
    created_at: datetime
    owner_id: str
    is_shared: bool = False
    is_read_only: bool = False
