"""Tests for Branches module."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import DuplicateError, NotFoundError
from src.modules.branches.schemas import BranchCreate
from src.modules.branches.service import BranchService
from tests.factories import create_branch


class TestBranchService:
    """Tests for BranchService."""

    async def test_create_branch(self, db_session: AsyncSession):
        branch = await BranchService(db_session).create_branch(
            BranchCreate(name="Chilonzor", address="Bunyodkor 12")
        )

        assert branch.id is not None
        assert branch.name == "Chilonzor"

    async def test_duplicate_name(self, db_session: AsyncSession):
        service = BranchService(db_session)
        await service.create_branch(BranchCreate(name="Chilonzor"))

        with pytest.raises(DuplicateError):
            await service.create_branch(BranchCreate(name="Chilonzor"))

    async def test_get_unknown_branch(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await BranchService(db_session).get_branch_by_id(999)

    async def test_list_branches_restricted(self, db_session: AsyncSession):
        first = await create_branch(db_session, name="Yunusobod")
        second = await create_branch(db_session, name="Chilonzor")
        await db_session.commit()
        service = BranchService(db_session)

        assert [b.id for b in await service.list_branches()] == [second.id, first.id]
        assert [b.id for b in await service.list_branches({first.id})] == [first.id]


class TestBranchesApi:
    """Tests for the branches endpoints."""

    async def test_create_and_get(self, client: AsyncClient):
        created = await client.post("/api/v1/branches", json={"name": "Chilonzor"})

        assert created.status_code == 201
        branch_id = created.json()["data"]["id"]
        fetched = await client.get(f"/api/v1/branches/{branch_id}")
        assert fetched.json()["data"]["name"] == "Chilonzor"

    async def test_duplicate_returns_409(self, client: AsyncClient):
        await client.post("/api/v1/branches", json={"name": "Chilonzor"})

        response = await client.post("/api/v1/branches", json={"name": "Chilonzor"})

        assert response.status_code == 409

    async def test_restricted_caller(
        self, client: AsyncClient, db_session: AsyncSession, restrict_branches
    ):
        allowed = await create_branch(db_session, name="Yunusobod")
        hidden = await create_branch(db_session, name="Chilonzor")
        await db_session.commit()
        restrict_branches(allowed.id)

        listed = await client.get("/api/v1/branches")
        forbidden = await client.get(f"/api/v1/branches/{hidden.id}")
        create = await client.post("/api/v1/branches", json={"name": "Sergeli"})

        assert [b["id"] for b in listed.json()["data"]] == [allowed.id]
        assert forbidden.status_code == 403
        assert create.status_code == 403
