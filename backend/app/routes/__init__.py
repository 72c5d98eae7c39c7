"""Aggregate import for all API route modules."""

from . import (
    children,
    share_codes,
    child_access,
    visits,
    vaccines,
    appointments,
    allergies,
    diseases,
    medications,
    doctors,
    hospitals,
    settings,
)

__all__ = [
    "children",
    "share_codes",
    "child_access",
    "visits",
    "vaccines",
    "appointments",
    "allergies",
    "diseases",
    "medications",
    "doctors",
    "hospitals",
    "settings",
]
