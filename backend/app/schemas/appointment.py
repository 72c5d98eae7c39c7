from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class AppointmentCreate(CamelModel):
    child_id: str = Field(min_length=1)
    doctor_id: Optional[str] = None
    date: str = Field(min_length=1)
    time: str = Field(min_length=1)
    notes: Optional[str] = None


class AppointmentUpdate(CamelModel):
    doctor_id: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    notes: Optional[str] = None


class AppointmentRead(CamelModel):
    id: str
    child_id: str
    doctor_id: Optional[str] = None
    date: str
    time: str
    notes: Optional[str] = None
    created_at: datetime


class AppointmentWithChild(AppointmentRead):
    child_name: Optional[str] = None
