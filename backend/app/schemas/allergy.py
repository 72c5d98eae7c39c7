from datetime import datetime
from typing import Literal, Optional

from pydantic import Field

from .base import CamelModel

Severity = Literal["mild", "moderate", "severe"]


class AllergyCreate(CamelModel):
    child_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    severity: Optional[Severity] = None
    notes: Optional[str] = None


class AllergyUpdate(CamelModel):
    name: Optional[str] = None
    severity: Optional[Severity] = None
    notes: Optional[str] = None


class AllergyRead(CamelModel):
    id: str
    child_id: str
    name: str
    severity: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
