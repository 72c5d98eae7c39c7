from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel


class MedicationCreate(CamelModel):
    child_id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    symptom: Optional[str] = None
    dose: str = Field(min_length=1)
    category: str = Field(min_length=1)
    recommended_dose: Optional[str] = None


class MedicationUpdate(CamelModel):
    name: Optional[str] = None
    symptom: Optional[str] = None
    dose: Optional[str] = None
    category: Optional[str] = None
    recommended_dose: Optional[str] = None


class MedicationRead(CamelModel):
    id: str
    child_id: str
    name: str
    symptom: Optional[str] = None
    dose: str
    category: str
    recommended_dose: Optional[str] = None
    created_at: datetime
