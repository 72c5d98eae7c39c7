from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class VisitCreate(CamelModel):
    child_id: str = Field(min_length=1)
    doctor_id: Optional[str] = None
    date: str = Field(min_length=1)
    weight: Optional[float] = None
    height: Optional[float] = None
    head_circumference: Optional[float] = None
    notes: Optional[str] = None


class VisitUpdate(CamelModel):
    doctor_id: Optional[str] = None
    date: Optional[str] = None
    weight: Optional[float] = None
    height: Optional[float] = None
    head_circumference: Optional[float] = None
    notes: Optional[str] = None


class VisitRead(CamelModel):
    id: str
    child_id: str
    doctor_id: Optional[str] = None
    date: str
    weight: Optional[float] = None
    height: Optional[float] = None
    head_circumference: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime


class VisitPhotoCreate(CamelModel):
    visit_id: str = Field(min_length=1)
    photo_data: str = Field(min_length=1)


class VisitPhotoRead(CamelModel):
    id: str
    visit_id: str
    photo_data: str
    created_at: datetime
