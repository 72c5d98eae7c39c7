"""Convenience imports for all schema classes used by the API."""

from .base import CamelModel, SuccessResponse
from .child import ChildCreate, ChildRead, ChildUpdate
from .share import (
    ShareCodeCreate,
    ShareCodeRead,
    ShareCodeLookup,
    ShareCodeUpdate,
    ChildAccessCreate,
    ChildAccessRead,
)
from .visit import (
    VisitCreate,
    VisitRead,
    VisitUpdate,
    VisitPhotoCreate,
    VisitPhotoRead,
)
from .vaccine import (
    VaccineCreate,
    VaccineRead,
    VaccineUpdate,
    VaccineBatchCreate,
    VaccineScheduleItem,
    VaccineWithChild,
)
from .appointment import (
    AppointmentCreate,
    AppointmentRead,
    AppointmentUpdate,
    AppointmentWithChild,
)
from .allergy import AllergyCreate, AllergyRead, AllergyUpdate
from .disease import DiseaseCreate, DiseaseRead, DiseaseUpdate
from .medication import MedicationCreate, MedicationRead, MedicationUpdate
from .directory import (
    DoctorCreate,
    DoctorRead,
    DoctorUpdate,
    HospitalCreate,
    HospitalRead,
    HospitalUpdate,
)
from .settings import SettingsRead, SettingsUpdate

__all__ = [
    "CamelModel",
    "SuccessResponse",
    "ChildCreate",
    "ChildRead",
    "ChildUpdate",
    "ShareCodeCreate",
    "ShareCodeRead",
    "ShareCodeLookup",
    "ShareCodeUpdate",
    "ChildAccessCreate",
    "ChildAccessRead",
    "VisitCreate",
    "VisitRead",
    "VisitUpdate",
    "VisitPhotoCreate",
    "VisitPhotoRead",
    "VaccineCreate",
    "VaccineRead",
    "VaccineUpdate",
    "VaccineBatchCreate",
    "VaccineScheduleItem",
    "VaccineWithChild",
    "AppointmentCreate",
    "AppointmentRead",
    "AppointmentUpdate",
    "AppointmentWithChild",
    "AllergyCreate",
    "AllergyRead",
    "AllergyUpdate",
    "DiseaseCreate",
    "DiseaseRead",
    "DiseaseUpdate",
    "MedicationCreate",
    "MedicationRead",
    "MedicationUpdate",
    "DoctorCreate",
    "DoctorRead",
    "DoctorUpdate",
    "HospitalCreate",
    "HospitalRead",
    "HospitalUpdate",
    "SettingsRead",
    "SettingsUpdate",
]
