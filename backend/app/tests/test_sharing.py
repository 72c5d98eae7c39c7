"""End-to-end tests for minting, redeeming and revoking share codes."""

import asyncio
import pathlib
import re
import sys

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel import SQLModel, select

sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

import app.crud as crud_module
from app.main import app
from app.database import get_session
from app.models import ChildAccess, ShareCode
from app.auth import create_access_token


async def _setup_test_db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    TestSession = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_session():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session
    return TestSession


def _headers(user_id: str) -> dict:
    token = create_access_token(data={"sub": user_id})
    return {"Authorization": f"Bearer {token}"}


async def _create_child(client, headers, name="Kid") -> str:
    resp = await client.post(
        "/api/children",
        headers=headers,
        json={"name": name, "birthDate": "2022-03-01", "sex": "female", "avatarIndex": 2},
    )
    assert resp.status_code == 200
    return resp.json()["id"]


def test_share_redeem_and_list():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            owner = _headers("u1")
            guest = _headers("u2")
            child_id = await _create_child(client, owner)

            resp = await client.post(
                "/api/share-codes",
                headers=owner,
                json={
                    "childId": child_id,
                    "ownerId": "u1",
                    "childName": "Kid",
                    "isReadOnly": True,
                },
            )
            assert resp.status_code == 200
            share = resp.json()
            code = share["code"]
            assert re.fullmatch(r"[A-HJ-NP-Z2-9]{8}", code)
            assert share["childId"] == child_id
            assert share["ownerId"] == "u1"
            assert share["isReadOnly"] is True
            assert isinstance(share["id"], str)

            # Lookup carries the snapshot and ignores case
            resp = await client.get(f"/api/share-codes/{code.lower()}", headers=guest)
            assert resp.status_code == 200
            body = resp.json()
            assert body["childName"] == "Kid"
            assert body["childBirthDate"] == "2022-03-01"
            assert body["childSex"] == "female"
            assert body["childAvatarIndex"] == 2

            resp = await client.post(
                "/api/child-access",
                headers=guest,
                json={"childId": child_id, "userId": "u2", "isReadOnly": True},
            )
            assert resp.status_code == 200
            assert resp.json() == {"success": True}

            resp = await client.get("/api/children?userId=u2", headers=guest)
            assert resp.status_code == 200
            children = resp.json()
            assert len(children) == 1
            assert children[0]["id"] == child_id
            assert children[0]["isShared"] is True
            assert children[0]["isReadOnly"] is True

            resp = await client.get("/api/children", headers=owner)
            assert resp.json()[0]["isShared"] is False
            assert resp.json()[0]["isReadOnly"] is False

    asyncio.run(run())


def test_mint_is_idempotent_and_updates_mode():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            owner = _headers("u1")
            child_id = await _create_child(client, owner)
            payload = {"childId": child_id, "isReadOnly": True}
            first = (await client.post("/api/share-codes", headers=owner, json=payload)).json()
            second = (await client.post("/api/share-codes", headers=owner, json=payload)).json()
            assert first["code"] == second["code"]
            assert first["id"] == second["id"]

            payload["isReadOnly"] = False
            third = (await client.post("/api/share-codes", headers=owner, json=payload)).json()
            assert third["code"] == first["code"]
            assert third["isReadOnly"] is False

            resp = await client.get(
                f"/api/share-codes/child/{child_id}?ownerId=u1", headers=owner
            )
            assert resp.status_code == 200
            assert resp.json()["code"] == first["code"]

    asyncio.run(run())


def test_reredeem_after_mode_change_updates_single_grant():
    async def run():
        TestSession = await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            owner = _headers("u1")
            guest = _headers("u2")
            child_id = await _create_child(client, owner)
            code = (
                await client.post(
                    "/api/share-codes",
                    headers=owner,
                    json={"childId": child_id, "isReadOnly": True},
                )
            ).json()["code"]

            resp = await client.post(f"/api/share-codes/{code}/redeem", headers=guest)
            assert resp.status_code == 200
            assert resp.json()["isShared"] is True
            assert resp.json()["isReadOnly"] is True

            resp = await client.patch(
                f"/api/share-codes/{child_id}",
                headers=owner,
                json={"ownerId": "u1", "isReadOnly": False},
            )
            assert resp.status_code == 200
            assert resp.json()["code"] == code
            assert resp.json()["isReadOnly"] is False

            resp = await client.post(f"/api/share-codes/{code}/redeem", headers=guest)
            assert resp.json()["isReadOnly"] is False

            async with TestSession() as session:
                result = await session.execute(
                    select(ChildAccess).where(ChildAccess.child_id == child_id)
                )
                grants = result.scalars().all()
            assert len(grants) == 1
            assert grants[0].user_id == "u2"
            assert grants[0].is_read_only is False

            resp = await client.get(f"/api/children/{child_id}", headers=guest)
            assert resp.json()["isReadOnly"] is False

    asyncio.run(run())


def test_revoke_blocks_lookup_but_keeps_existing_access():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            owner = _headers("u1")
            guest = _headers("u2")
            child_id = await _create_child(client, owner)
            code = (
                await client.post(
                    "/api/share-codes", headers=owner, json={"childId": child_id}
                )
            ).json()["code"]
            await client.post(f"/api/share-codes/{code}/redeem", headers=guest)

            resp = await client.delete(
                f"/api/share-codes/{child_id}?ownerId=u1", headers=owner
            )
            assert resp.status_code == 200
            assert resp.json() == {"success": True}
            # revoking again is still a success
            resp = await client.delete(f"/api/share-codes/{child_id}", headers=owner)
            assert resp.json() == {"success": True}

            resp = await client.get(f"/api/share-codes/{code}", headers=guest)
            assert resp.status_code == 404
            resp = await client.get(f"/api/share-codes/{code}", headers=_headers("u3"))
            assert resp.status_code == 404
            resp = await client.post(f"/api/share-codes/{code}/redeem", headers=_headers("u3"))
            assert resp.status_code == 404
            resp = await client.get(
                f"/api/share-codes/child/{child_id}", headers=owner
            )
            assert resp.status_code == 404
            resp = await client.patch(
                f"/api/share-codes/{child_id}", headers=owner, json={"isReadOnly": False}
            )
            assert resp.status_code == 404

            # u2 redeemed before the revocation and keeps access
            resp = await client.get(f"/api/children/{child_id}", headers=guest)
            assert resp.status_code == 200
            assert resp.json()["isShared"] is True

            # a direct grant without a live code is refused
            resp = await client.post(
                "/api/child-access",
                headers=_headers("u3"),
                json={"childId": child_id, "userId": "u3", "isReadOnly": True},
            )
            assert resp.status_code == 404

    asyncio.run(run())


def test_share_code_authorization_and_validation():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            owner = _headers("u1")
            guest = _headers("u2")
            child_id = await _create_child(client, owner)

            resp = await client.post("/api/share-codes", headers=owner, json={})
            assert resp.status_code == 400
            assert "childId" in resp.json()["detail"]

            resp = await client.post(
                "/api/child-access", headers=guest, json={"childId": child_id}
            )
            assert resp.status_code == 400
            assert "userId" in resp.json()["detail"]

            # Unknown child and someone else's child look the same
            resp = await client.post(
                "/api/share-codes", headers=guest, json={"childId": "missing"}
            )
            assert resp.status_code == 404
            resp = await client.post(
                "/api/share-codes", headers=guest, json={"childId": child_id}
            )
            assert resp.status_code == 404

            resp = await client.post(
                "/api/share-codes",
                headers=owner,
                json={"childId": child_id, "ownerId": "someone-else"},
            )
            assert resp.status_code == 403

            code = (
                await client.post(
                    "/api/share-codes",
                    headers=owner,
                    json={"childId": child_id, "isReadOnly": True},
                )
            ).json()["code"]

            # A grantee cannot widen a read-only code
            resp = await client.post(
                "/api/child-access",
                headers=guest,
                json={"childId": child_id, "userId": "u2", "isReadOnly": False, "code": code},
            )
            assert resp.status_code == 200
            resp = await client.get(f"/api/children/{child_id}", headers=guest)
            assert resp.json()["isReadOnly"] is True

            # nor grant access on behalf of another user
            resp = await client.post(
                "/api/child-access",
                headers=guest,
                json={"childId": child_id, "userId": "u3"},
            )
            assert resp.status_code == 403

            # shared users cannot mint codes for someone else's child
            resp = await client.post(
                "/api/share-codes", headers=guest, json={"childId": child_id}
            )
            assert resp.status_code == 403

            resp = await client.get("/api/share-codes/ABCDEFGH")
            assert resp.status_code == 401

    asyncio.run(run())


def test_concurrent_mint_returns_the_winning_code(monkeypatch):
    async def run():
        TestSession = await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            owner = _headers("u1")
            child_id = await _create_child(client, owner)
            async with TestSession() as session:
                session.add(
                    ShareCode(
                        code="CCCCCCCC",
                        child_id=child_id,
                        owner_id="u1",
                        child_name="Kid",
                        is_read_only=True,
                    )
                )
                await session.commit()

            real_lookup = crud_module.get_share_code_for_child
            calls = []

            async def racing_lookup(db, child_id, owner_id):
                calls.append(child_id)
                if len(calls) == 1:
                    return None
                return await real_lookup(db, child_id, owner_id)

            monkeypatch.setattr(crud_module, "get_share_code_for_child", racing_lookup)
            resp = await client.post(
                "/api/share-codes", headers=owner, json={"childId": child_id}
            )
            assert resp.status_code == 200
            assert resp.json()["code"] == "CCCCCCCC"
            assert resp.json()["childId"] == child_id

            async with TestSession() as session:
                result = await session.execute(
                    select(ShareCode).where(ShareCode.child_id == child_id)
                )
                assert len(result.scalars().all()) == 1

    asyncio.run(run())


def test_owner_manages_collaborators():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            owner = _headers("u1")
            guest = _headers("u2")
            child_id = await _create_child(client, owner)
            code = (
                await client.post(
                    "/api/share-codes", headers=owner, json={"childId": child_id}
                )
            ).json()["code"]
            await client.post(f"/api/share-codes/{code}/redeem", headers=guest)

            # the owner redeeming their own code does not create a grant
            resp = await client.post(f"/api/share-codes/{code}/redeem", headers=owner)
            assert resp.status_code == 200
            assert resp.json()["isShared"] is False

            resp = await client.get(f"/api/child-access/child/{child_id}", headers=owner)
            assert resp.status_code == 200
            assert [g["userId"] for g in resp.json()] == ["u2"]

            resp = await client.get(f"/api/child-access/child/{child_id}", headers=guest)
            assert resp.status_code == 403

            resp = await client.get("/api/child-access", headers=guest)
            assert [g["childId"] for g in resp.json()] == [child_id]

            resp = await client.delete(
                f"/api/child-access/{child_id}/u2", headers=owner
            )
            assert resp.status_code == 204
            resp = await client.delete(
                f"/api/child-access/{child_id}/u2", headers=owner
            )
            assert resp.status_code == 404

            resp = await client.get(f"/api/children/{child_id}", headers=guest)
            assert resp.status_code == 404

    asyncio.run(run())
