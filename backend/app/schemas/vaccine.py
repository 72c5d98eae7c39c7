from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class VaccineCreate(CamelModel):
    child_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    recommended_age: str = Field(min_length=1)
    applied_date: Optional[str] = None
    is_applied: bool = False


class VaccineScheduleItem(CamelModel):
    name: str
    recommended_age: str


class VaccineBatchCreate(CamelModel):
    child_id: str = Field(min_length=1)
    vaccines: List[VaccineScheduleItem]


class VaccineUpdate(CamelModel):
    name: Optional[str] = None
    recommended_age: Optional[str] = None
    applied_date: Optional[str] = None
    is_applied: Optional[bool] = None


class VaccineRead(CamelModel):
    id: str
    child_id: str
    name: str
    recommended_age: str
    applied_date: Optional[str] = None
    is_applied: bool
    created_at: datetime


class VaccineWithChild(VaccineRead):
    child_name: Optional[str] = None
