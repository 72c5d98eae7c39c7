"""Schemas for the per-user doctor and hospital address book."""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from .base import CamelModel


class DoctorCreate(CamelModel):
    name: str = Field(min_length=1)
    specialty: str = Field(min_length=1)
    phone: str = ""
    address: str = ""


class DoctorUpdate(CamelModel):
    name: Optional[str] = None
    specialty: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class DoctorRead(CamelModel):
    id: str
    name: str
    specialty: str
    phone: str
    address: str
    created_at: datetime


class HospitalCreate(CamelModel):
    name: str = Field(min_length=1)
    address: str = Field(min_length=1)
    phone: str = ""
    specialties: List[str] = Field(default_factory=list)


class HospitalUpdate(CamelModel):
    name: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    specialties: Optional[List[str]] = None


class HospitalRead(CamelModel):
    id: str
    name: str
    address: str
    phone: str
    specialties: List[str] = Field(default_factory=list)
    created_at: datetime
