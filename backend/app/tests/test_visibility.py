"""Store level tests for share code generation, grants and visibility."""

import asyncio
import pathlib
import sys
from datetime import datetime

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel import SQLModel, select

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

import app.crud as crud
from app.acl import (
    NO_ACCESS,
    OWNER,
    SHARE_CODE_ALPHABET,
    SHARE_CODE_LENGTH,
    generate_share_code,
    normalize_share_code,
)
from app.models import Child, ChildAccess, ShareCode


async def _session_factory():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    return async_sessionmaker(engine, expire_on_commit=False)


async def _add_child(session, owner_id, name="Kid", created_at=None) -> Child:
    child = Child(owner_id=owner_id, name=name, birth_date="2021-05-04", sex="male")
    if created_at:
        child.created_at = created_at
    return await crud.create_record(session, child)


def test_generated_codes_use_unambiguous_alphabet():
    assert len(SHARE_CODE_ALPHABET) == 32
    for glyph in "IO01":
        assert glyph not in SHARE_CODE_ALPHABET
    for _ in range(500):
        code = generate_share_code()
        assert len(code) == SHARE_CODE_LENGTH
        assert set(code) <= set(SHARE_CODE_ALPHABET)
    assert normalize_share_code(" abcd2345 ") == "ABCD2345"


def test_codes_are_distinct_across_children():
    async def run():
        Session = await _session_factory()
        async with Session() as session:
            codes = set()
            for i in range(25):
                child = await _add_child(session, "u1", name=f"Kid {i}")
                share = await crud.mint_share_code(
                    session, child.id, "u1", {"child_name": child.name}
                )
                codes.add(share.code)
            assert len(codes) == 25

    asyncio.run(run())


def test_mint_defaults_to_read_only_and_lookup_ignores_case():
    async def run():
        Session = await _session_factory()
        async with Session() as session:
            child = await _add_child(session, "u1")
            share = await crud.mint_share_code(
                session, child.id, "u1", {"child_name": "Kid", "child_sex": "male"}
            )
            assert share.is_read_only is True
            found = await crud.get_share_code(session, share.code.lower())
            assert found.id == share.id
            assert found.child_sex == "male"
            assert await crud.get_share_code(session, "ZZZZZZZZ") is None

    asyncio.run(run())


def test_mint_regenerates_on_code_collision(monkeypatch):
    async def run():
        Session = await _session_factory()
        async with Session() as session:
            first = await _add_child(session, "u1")
            second = await _add_child(session, "u9")
            taken = ShareCode(
                code="AAAAAAAA", child_id=first.id, owner_id="u1", child_name="Kid"
            )
            await crud.create_record(session, taken)

            candidates = iter(["AAAAAAAA", "BBBBBBBB"])
            monkeypatch.setattr(crud, "generate_share_code", lambda: next(candidates))
            share = await crud.mint_share_code(
                session, second.id, "u9", {"child_name": "Kid"}
            )
            assert share.code == "BBBBBBBB"

    asyncio.run(run())


def test_mint_recovers_when_another_writer_wins(monkeypatch):
    async def run():
        Session = await _session_factory()
        async with Session() as session:
            child = await _add_child(session, "u1")
            winner = ShareCode(
                code="CCCCCCCC", child_id=child.id, owner_id="u1", child_name="Kid"
            )
            await crud.create_record(session, winner)

            real_lookup = crud.get_share_code_for_child
            calls = []

            async def racing_lookup(db, child_id, owner_id):
                calls.append(child_id)
                # the first read misses the row committed by the other writer
                if len(calls) == 1:
                    return None
                return await real_lookup(db, child_id, owner_id)

            monkeypatch.setattr(crud, "get_share_code_for_child", racing_lookup)
            share = await crud.mint_share_code(
                session, child.id, "u1", {"child_name": "Kid"}
            )
            assert share.code == "CCCCCCCC"
            assert len(calls) == 2

            result = await session.execute(
                select(ShareCode).where(ShareCode.child_id == child.id)
            )
            assert len(result.scalars().all()) == 1

    asyncio.run(run())


def test_mint_regenerates_when_code_is_taken_after_the_check(monkeypatch):
    async def run():
        Session = await _session_factory()
        async with Session() as session:
            first = await _add_child(session, "u1")
            second = await _add_child(session, "u9")
            taken = ShareCode(
                code="DDDDDDDD", child_id=first.id, owner_id="u1", child_name="Kid"
            )
            await crud.create_record(session, taken)

            candidates = iter(["DDDDDDDD", "EEEEEEEE"])
            monkeypatch.setattr(crud, "generate_share_code", lambda: next(candidates))

            real_lookup = crud.get_share_code
            lookups = []

            async def stale_lookup(db, code):
                lookups.append(code)
                # the other writer commits DDDDDDDD right after this check
                if len(lookups) == 1:
                    return None
                return await real_lookup(db, code)

            monkeypatch.setattr(crud, "get_share_code", stale_lookup)
            share = await crud.mint_share_code(
                session, second.id, "u9", {"child_name": "Kid"}
            )
            assert share.code == "EEEEEEEE"
            assert share.child_id == second.id
            assert lookups[0] == "DDDDDDDD"

            # loaded instances are still usable after the conflict
            assert first.owner_id == "u1"
            result = await session.execute(
                select(ShareCode).where(ShareCode.code == "DDDDDDDD")
            )
            assert result.scalar_one().child_id == first.id

    asyncio.run(run())


def test_grant_is_upserted_per_child_and_user():
    async def run():
        Session = await _session_factory()
        async with Session() as session:
            child = await _add_child(session, "u1")
            grant = await crud.grant_child_access(session, child.id, "u2", True)
            assert grant.is_read_only is True
            grant = await crud.grant_child_access(session, child.id, "u2", False)
            assert grant.is_read_only is False

            grants = await crud.get_grants_for_child(session, child.id)
            assert [(g.user_id, g.is_read_only) for g in grants] == [("u2", False)]

            vis = await crud.resolve_visibility(session, child.id, "u2")
            assert vis.is_shared and vis.can_write

    asyncio.run(run())


def test_owner_with_stray_grant_is_still_owner():
    async def run():
        Session = await _session_factory()
        async with Session() as session:
            child = await _add_child(session, "u1")
            session.add(ChildAccess(child_id=child.id, user_id="u1", is_read_only=True))
            await session.commit()

            assert await crud.resolve_visibility(session, child.id, "u1") == OWNER
            listed = await crud.list_accessible_children(session, "u1")
            assert [(c.id, v) for c, v in listed] == [(child.id, OWNER)]

            assert await crud.resolve_visibility(session, child.id, "u3") == NO_ACCESS
            assert await crud.resolve_visibility(session, "missing", "u1") == NO_ACCESS

    asyncio.run(run())


def test_accessible_children_are_newest_first():
    async def run():
        Session = await _session_factory()
        async with Session() as session:
            older = await _add_child(
                session, "u1", name="Older", created_at=datetime(2024, 1, 1)
            )
            newer = await _add_child(
                session, "u2", name="Newer", created_at=datetime(2024, 6, 1)
            )
            await _add_child(session, "u3", name="Hidden", created_at=datetime(2024, 9, 1))
            await crud.grant_child_access(session, older.id, "u2", True)

            listed = await crud.list_accessible_children(session, "u2")
            assert [c.name for c, _ in listed] == ["Newer", "Older"]
            assert listed[0][1].is_owner
            assert listed[1][1].is_shared and listed[1][1].is_read_only

            assert await crud.list_accessible_children(session, "nobody") == []

    asyncio.run(run())


def test_revoke_keeps_or_drops_grants():
    async def run():
        Session = await _session_factory()
        async with Session() as session:
            kept = await _add_child(session, "u1", name="Kept")
            dropped = await _add_child(session, "u1", name="Dropped")
            for child in (kept, dropped):
                await crud.mint_share_code(session, child.id, "u1", {"child_name": child.name})
                await crud.grant_child_access(session, child.id, "u2", True)

            await crud.revoke_share_code(session, kept.id, "u1")
            await crud.revoke_share_code(session, dropped.id, "u1", remove_access=True)
            # revoking twice is harmless
            await crud.revoke_share_code(session, kept.id, "u1")

            assert await crud.get_share_code_for_child(session, kept.id, "u1") is None
            assert await crud.get_share_code_for_child(session, dropped.id, "u1") is None
            assert (await crud.resolve_visibility(session, kept.id, "u2")).is_shared
            assert await crud.resolve_visibility(session, dropped.id, "u2") == NO_ACCESS

    asyncio.run(run())
