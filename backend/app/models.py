"""Database models used by the family health records API.

The models are defined with SQLModel (built on SQLAlchemy and Pydantic)
and represent children, their medical history, the share codes used to
hand a child's record to another user and the access grants those codes
produce.  Comments are kept concise to avoid distracting from the field
definitions.
"""

import os
import uuid
from typing import Optional, List
from datetime import datetime
from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON, Text, UniqueConstraint

REVOKE_REMOVES_ACCESS = os.getenv("REVOKE_REMOVES_ACCESS", "false").lower() == "true"


def new_id() -> str:
    return str(uuid.uuid4())


class Child(SQLModel, table=True):
    """Dependent profile owned by the user who created it."""

    id: str = Field(default_factory=new_id, primary_key=True)
    owner_id: str = Field(index=True)
    name: str
    birth_date: str
    sex: str  # 'male' or 'female'
    avatar_index: int = 0
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ShareCode(SQLModel, table=True):
    """Capability token letting another user link to one child.

    The child fields are a snapshot taken when the code is minted so a
    redeemer can preview the child without a second lookup.
    """

    __tablename__ = "share_code"
    __table_args__ = (UniqueConstraint("child_id", "owner_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    code: str = Field(unique=True, index=True)
    child_id: str = Field(foreign_key="child.id", index=True)
    owner_id: str
    child_name: str
    child_birth_date: Optional[str] = None
    child_sex: Optional[str] = None
    child_avatar_index: Optional[int] = None
    is_read_only: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)


class ChildAccess(SQLModel, table=True):
    """Access granted to a non-owner after redeeming a share code."""

    __tablename__ = "child_access"

    child_id: str = Field(foreign_key="child.id", primary_key=True)
    user_id: str = Field(primary_key=True, index=True)
    is_read_only: bool = True
    created_at: datetime = Field(default_factory=datetime.utcnow)


class MedicalVisit(SQLModel, table=True):
    """Check-up with growth measurements taken at the visit."""

    __tablename__ = "medical_visit"

    id: str = Field(default_factory=new_id, primary_key=True)
    child_id: str = Field(foreign_key="child.id", index=True)
    doctor_id: Optional[str] = None
    date: str
    weight: Optional[float] = None
    height: Optional[float] = None
    head_circumference: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class VisitPhoto(SQLModel, table=True):
    """Base64 encoded image attached to a visit."""

    __tablename__ = "visit_photo"

    id: str = Field(default_factory=new_id, primary_key=True)
    visit_id: str = Field(foreign_key="medical_visit.id", index=True)
    photo_data: str = Field(sa_column=Column(Text, nullable=False))
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Vaccine(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    child_id: str = Field(foreign_key="child.id", index=True)
    name: str
    recommended_age: str
    applied_date: Optional[str] = None
    is_applied: bool = False
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Appointment(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    child_id: str = Field(foreign_key="child.id", index=True)
    doctor_id: Optional[str] = None
    date: str  # YYYY-MM-DD
    time: str  # HH:MM
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Allergy(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    child_id: str = Field(foreign_key="child.id", index=True)
    name: str
    severity: Optional[str] = None  # mild, moderate, severe
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class PastDisease(SQLModel, table=True):
    __tablename__ = "past_disease"

    id: str = Field(default_factory=new_id, primary_key=True)
    child_id: str = Field(foreign_key="child.id", index=True)
    name: str
    date: str
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Medication(SQLModel, table=True):
    id: str = Field(default_factory=new_id, primary_key=True)
    child_id: str = Field(foreign_key="child.id", index=True)
    name: str
    symptom: Optional[str] = None
    dose: str
    category: str
    recommended_dose: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Doctor(SQLModel, table=True):
    """Entry in a user's private doctor address book."""

    id: str = Field(default_factory=new_id, primary_key=True)
    owner_id: str = Field(index=True)
    name: str
    specialty: str
    phone: str = ""
    address: str = ""
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Hospital(SQLModel, table=True):
    """Entry in a user's private hospital address book."""

    id: str = Field(default_factory=new_id, primary_key=True)
    owner_id: str = Field(index=True)
    name: str
    address: str
    phone: str = ""
    specialties: List[str] = Field(sa_column=Column(JSON), default_factory=list)
    created_at: datetime = Field(default_factory=datetime.utcnow)


class Settings(SQLModel, table=True):
    """Singleton table storing site‑wide configuration values."""
    id: Optional[int] = Field(default=1, primary_key=True)
    site_name: str = "Family Health Records"
    revoke_removes_access: bool = REVOKE_REMOVES_ACCESS
    default_share_read_only: bool = True
