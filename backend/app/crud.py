"""Asynchronous CRUD helpers for the application's data models.

Each function in this module encapsulates a specific database operation
using SQLModel and SQLAlchemy.  Centralizing the logic keeps route
handlers light and makes behavior easier to test.

Share codes and access grants rely on the unique constraints declared in
``app.models``.  Inserts that lose to a concurrent writer are skipped
with ``ON CONFLICT`` or undone with a SAVEPOINT, never with a session
rollback, and resolved here by re-reading the winning row.
"""

import logging
from datetime import datetime, date
from typing import Any

from sqlalchemy import and_, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select, delete

from app.models import (
    Child,
    ShareCode,
    ChildAccess,
    MedicalVisit,
    VisitPhoto,
    Vaccine,
    Appointment,
    Allergy,
    PastDisease,
    Medication,
    Doctor,
    Hospital,
    Settings,
)
from app.acl import (
    OWNER,
    NO_ACCESS,
    Visibility,
    generate_share_code,
    normalize_share_code,
    shared_access,
)

logger = logging.getLogger(__name__)

_UPSERT_INSERTS = {"sqlite": sqlite_insert, "postgresql": pg_insert}


async def get_settings(db: AsyncSession) -> Settings:
    """Fetch the singleton settings record, creating it if necessary."""
    result = await db.execute(select(Settings).where(Settings.id == 1))
    settings = result.scalar_one_or_none()
    if not settings:
        settings = Settings()
        db.add(settings)
        await db.commit()
        await db.refresh(settings)
    return settings


async def save_settings(db: AsyncSession, settings: Settings) -> Settings:
    """Persist settings changes and return the refreshed object."""

    db.add(settings)
    await db.commit()
    await db.refresh(settings)
    return settings


# --- generic records ---


async def create_record(db: AsyncSession, record: Any) -> Any:
    """Persist a new row and return it refreshed."""

    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record


async def save_record(db: AsyncSession, record: Any) -> Any:
    """Persist changes to an existing row."""

    db.add(record)
    await db.commit()
    await db.refresh(record)
    return record


async def delete_record(db: AsyncSession, record: Any) -> None:
    await db.delete(record)
    await db.commit()


async def get_record(db: AsyncSession, model: type, record_id: str) -> Any | None:
    """Fetch a row of ``model`` by id or ``None`` if not found."""
    result = await db.execute(select(model).where(model.id == record_id))
    return result.scalar_one_or_none()


# --- children and visibility ---


async def get_child(db: AsyncSession, child_id: str) -> Child | None:
    """Fetch a child by id or ``None`` if not found."""
    result = await db.execute(select(Child).where(Child.id == child_id))
    return result.scalar_one_or_none()


async def resolve_child_visibility(
    db: AsyncSession, child: Child, user_id: str
) -> Visibility:
    """Visibility of an already loaded child for ``user_id``.

    The owner check comes first so an owner is never reported as shared,
    even if a stray grant row exists for them.
    """
    if child.owner_id == user_id:
        return OWNER
    grant = await get_child_access(db, child.id, user_id)
    if grant is None:
        return NO_ACCESS
    return shared_access(grant.is_read_only)


async def resolve_visibility(
    db: AsyncSession, child_id: str, user_id: str
) -> Visibility:
    """Return the owner / shared / no access mode of a user for a child."""
    child = await get_child(db, child_id)
    if child is None:
        return NO_ACCESS
    return await resolve_child_visibility(db, child, user_id)


async def list_accessible_children(
    db: AsyncSession, user_id: str
) -> list[tuple[Child, Visibility]]:
    """Children owned by or shared with ``user_id``, newest first."""
    query = (
        select(Child, ChildAccess.is_read_only)
        .outerjoin(
            ChildAccess,
            and_(ChildAccess.child_id == Child.id, ChildAccess.user_id == user_id),
        )
        .where(or_(Child.owner_id == user_id, ChildAccess.user_id == user_id))
        .order_by(Child.created_at.desc(), Child.id)
    )
    result = await db.execute(query)
    children = []
    for child, is_read_only in result.all():
        if child.owner_id == user_id:
            children.append((child, OWNER))
        else:
            children.append((child, shared_access(bool(is_read_only))))
    return children


async def delete_child(db: AsyncSession, child: Child) -> None:
    """Remove a child together with every record and grant that refers to it."""
    visit_ids = select(MedicalVisit.id).where(MedicalVisit.child_id == child.id)
    await db.execute(delete(VisitPhoto).where(VisitPhoto.visit_id.in_(visit_ids)))
    for model in (
        MedicalVisit,
        Vaccine,
        Appointment,
        Allergy,
        PastDisease,
        Medication,
        ShareCode,
        ChildAccess,
    ):
        await db.execute(delete(model).where(model.child_id == child.id))
    await db.delete(child)
    await db.commit()


# --- share codes ---


async def get_share_code(db: AsyncSession, code: str) -> ShareCode | None:
    """Look up a share code; matching ignores case and surrounding spaces."""
    result = await db.execute(
        select(ShareCode)
        .where(ShareCode.code == normalize_share_code(code))
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_share_code_for_child(
    db: AsyncSession, child_id: str, owner_id: str
) -> ShareCode | None:
    result = await db.execute(
        select(ShareCode)
        .where(ShareCode.child_id == child_id, ShareCode.owner_id == owner_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def mint_share_code(
    db: AsyncSession,
    child_id: str,
    owner_id: str,
    snapshot: dict,
    is_read_only: bool | None = None,
) -> ShareCode:
    """Return the share code for ``(child_id, owner_id)``, creating it once.

    An existing code is returned as is, except that its read-only flag is
    updated when ``is_read_only`` is given and differs.  ``snapshot`` holds
    the ``child_*`` columns copied onto a newly created row.
    """
    while True:
        existing = await get_share_code_for_child(db, child_id, owner_id)
        if existing:
            if is_read_only is not None and existing.is_read_only != is_read_only:
                existing.is_read_only = is_read_only
                existing = await save_record(db, existing)
            return existing

        read_only = is_read_only
        if read_only is None:
            settings = await get_settings(db)
            read_only = settings.default_share_read_only

        code = generate_share_code()
        while await get_share_code(db, code):
            logger.warning("Share code collision for child %s, regenerating", child_id)
            code = generate_share_code()

        values = dict(
            code=code,
            child_id=child_id,
            owner_id=owner_id,
            is_read_only=read_only,
            created_at=datetime.utcnow(),
            **snapshot,
        )
        if not await _insert_share_code(db, values):
            # Either another request minted for this pair or took the code.
            logger.warning(
                "Share code insert for child %s hit a unique constraint, retrying",
                child_id,
            )
            continue
        return await get_share_code(db, code)


async def _insert_share_code(db: AsyncSession, values: dict) -> bool:
    """Insert a share code row; ``False`` when a unique constraint rejects it.

    Only the insert is undone on a conflict, so instances already loaded in
    the session stay usable.
    """
    insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        try:
            async with db.begin_nested():
                db.add(ShareCode(**values))
        except IntegrityError:
            return False
        await db.commit()
        return True
    result = await db.execute(insert(ShareCode).values(**values).on_conflict_do_nothing())
    await db.commit()
    return result.rowcount == 1


async def set_share_code_read_only(
    db: AsyncSession, child_id: str, owner_id: str, is_read_only: bool
) -> ShareCode | None:
    share = await get_share_code_for_child(db, child_id, owner_id)
    if not share:
        return None
    share.is_read_only = is_read_only
    return await save_record(db, share)


async def revoke_share_code(
    db: AsyncSession, child_id: str, owner_id: str, remove_access: bool = False
) -> None:
    """Delete the owner's code for a child; a missing code is not an error.

    Grants created by earlier redemptions survive unless ``remove_access``
    is set, in which case every grant on the child is dropped too.
    """
    await db.execute(
        delete(ShareCode).where(
            ShareCode.child_id == child_id, ShareCode.owner_id == owner_id
        )
    )
    if remove_access:
        await db.execute(delete(ChildAccess).where(ChildAccess.child_id == child_id))
    await db.commit()


# --- access grants ---


async def get_child_access(
    db: AsyncSession, child_id: str, user_id: str
) -> ChildAccess | None:
    result = await db.execute(
        select(ChildAccess)
        .where(ChildAccess.child_id == child_id, ChildAccess.user_id == user_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def grant_child_access(
    db: AsyncSession, child_id: str, user_id: str, is_read_only: bool
) -> ChildAccess:
    """Insert or update the grant for ``(child_id, user_id)``."""
    insert = _UPSERT_INSERTS.get(db.get_bind().dialect.name)
    if insert is None:
        return await _grant_child_access_fallback(db, child_id, user_id, is_read_only)
    stmt = insert(ChildAccess).values(
        child_id=child_id,
        user_id=user_id,
        is_read_only=is_read_only,
        created_at=datetime.utcnow(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=["child_id", "user_id"],
        set_={"is_read_only": stmt.excluded.is_read_only},
    )
    await db.execute(stmt)
    await db.commit()
    return await get_child_access(db, child_id, user_id)


async def _grant_child_access_fallback(
    db: AsyncSession, child_id: str, user_id: str, is_read_only: bool
) -> ChildAccess:
    # Dialects without ON CONFLICT: insert, and on a primary key clash
    # update the row the other writer created.
    while True:
        grant = await get_child_access(db, child_id, user_id)
        if grant:
            grant.is_read_only = is_read_only
            return await save_record(db, grant)
        try:
            async with db.begin_nested():
                db.add(
                    ChildAccess(
                        child_id=child_id, user_id=user_id, is_read_only=is_read_only
                    )
                )
        except IntegrityError:
            continue
        await db.commit()
        return await get_child_access(db, child_id, user_id)


async def get_grants_for_child(db: AsyncSession, child_id: str) -> list[ChildAccess]:
    result = await db.execute(
        select(ChildAccess)
        .where(ChildAccess.child_id == child_id)
        .order_by(ChildAccess.created_at, ChildAccess.user_id)
    )
    return result.scalars().all()


async def get_grants_for_user(db: AsyncSession, user_id: str) -> list[ChildAccess]:
    result = await db.execute(
        select(ChildAccess)
        .where(ChildAccess.user_id == user_id)
        .order_by(ChildAccess.created_at, ChildAccess.child_id)
    )
    return result.scalars().all()


async def remove_child_access(db: AsyncSession, child_id: str, user_id: str) -> None:
    await db.execute(
        delete(ChildAccess).where(
            ChildAccess.child_id == child_id,
            ChildAccess.user_id == user_id,
        )
    )
    await db.commit()


# --- child scoped records ---


async def get_visits_by_child(db: AsyncSession, child_id: str) -> list[MedicalVisit]:
    result = await db.execute(
        select(MedicalVisit)
        .where(MedicalVisit.child_id == child_id)
        .order_by(MedicalVisit.date.desc())
    )
    return result.scalars().all()


async def get_photos_by_visit(db: AsyncSession, visit_id: str) -> list[VisitPhoto]:
    result = await db.execute(
        select(VisitPhoto)
        .where(VisitPhoto.visit_id == visit_id)
        .order_by(VisitPhoto.created_at.desc())
    )
    return result.scalars().all()


async def delete_visit(db: AsyncSession, visit: MedicalVisit) -> None:
    await db.execute(delete(VisitPhoto).where(VisitPhoto.visit_id == visit.id))
    await db.delete(visit)
    await db.commit()


async def get_vaccines_by_child(db: AsyncSession, child_id: str) -> list[Vaccine]:
    result = await db.execute(
        select(Vaccine)
        .where(Vaccine.child_id == child_id)
        .order_by(Vaccine.created_at, Vaccine.id)
    )
    return result.scalars().all()


async def create_vaccines(
    db: AsyncSession, child_id: str, items: list[tuple[str, str]]
) -> list[Vaccine]:
    """Add a batch of not yet applied vaccines from ``(name, age)`` pairs."""
    vaccines = [
        Vaccine(child_id=child_id, name=name, recommended_age=age, is_applied=False)
        for name, age in items
    ]
    db.add_all(vaccines)
    await db.commit()
    for vaccine in vaccines:
        await db.refresh(vaccine)
    return vaccines


async def get_pending_vaccines_for_user(
    db: AsyncSession, user_id: str, limit: int = 5
) -> list[tuple[Vaccine, str]]:
    """Unapplied vaccines across every child the user can see."""
    query = (
        select(Vaccine, Child.name)
        .join(Child, Vaccine.child_id == Child.id)
        .outerjoin(
            ChildAccess,
            and_(ChildAccess.child_id == Child.id, ChildAccess.user_id == user_id),
        )
        .where(or_(Child.owner_id == user_id, ChildAccess.user_id == user_id))
        .where(Vaccine.is_applied == False)  # noqa: E712
        .order_by(Child.name, Vaccine.recommended_age, Vaccine.created_at)
        .limit(limit)
    )
    result = await db.execute(query)
    return result.all()


async def get_appointments_by_child(
    db: AsyncSession, child_id: str
) -> list[Appointment]:
    result = await db.execute(
        select(Appointment)
        .where(Appointment.child_id == child_id)
        .order_by(Appointment.date.desc(), Appointment.time.desc())
    )
    return result.scalars().all()


async def get_upcoming_appointments_for_user(
    db: AsyncSession, user_id: str, today: date | None = None, limit: int = 5
) -> list[tuple[Appointment, str]]:
    """Appointments from ``today`` onwards across every visible child."""
    today = today or date.today()
    query = (
        select(Appointment, Child.name)
        .join(Child, Appointment.child_id == Child.id)
        .outerjoin(
            ChildAccess,
            and_(ChildAccess.child_id == Child.id, ChildAccess.user_id == user_id),
        )
        .where(or_(Child.owner_id == user_id, ChildAccess.user_id == user_id))
        .where(Appointment.date >= today.isoformat())
        .order_by(Appointment.date, Appointment.time)
        .limit(limit)
    )
    result = await db.execute(query)
    return result.all()


async def get_allergies_by_child(db: AsyncSession, child_id: str) -> list[Allergy]:
    result = await db.execute(
        select(Allergy)
        .where(Allergy.child_id == child_id)
        .order_by(Allergy.created_at.desc())
    )
    return result.scalars().all()


async def get_diseases_by_child(db: AsyncSession, child_id: str) -> list[PastDisease]:
    result = await db.execute(
        select(PastDisease)
        .where(PastDisease.child_id == child_id)
        .order_by(PastDisease.date.desc())
    )
    return result.scalars().all()


async def get_medications_by_child(
    db: AsyncSession, child_id: str
) -> list[Medication]:
    result = await db.execute(
        select(Medication)
        .where(Medication.child_id == child_id)
        .order_by(Medication.created_at.desc())
    )
    return result.scalars().all()


# --- address book ---


async def get_doctors_by_owner(db: AsyncSession, owner_id: str) -> list[Doctor]:
    result = await db.execute(
        select(Doctor).where(Doctor.owner_id == owner_id).order_by(Doctor.name)
    )
    return result.scalars().all()


async def get_hospitals_by_owner(db: AsyncSession, owner_id: str) -> list[Hospital]:
    result = await db.execute(
        select(Hospital).where(Hospital.owner_id == owner_id).order_by(Hospital.name)
    )
    return result.scalars().all()
