from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class DiseaseCreate(CamelModel):
    child_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    date: str = Field(min_length=1)
    notes: Optional[str] = None


class DiseaseUpdate(CamelModel):
    name: Optional[str] = None
    date: Optional[str] = None
    notes: Optional[str] = None


class DiseaseRead(CamelModel):
    id: str
    child_id: str
    name: str
    date: str
    notes: Optional[str] = None
    created_at: datetime
