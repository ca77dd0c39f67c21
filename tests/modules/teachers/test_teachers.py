"""Tests for Teachers module."""

import pytest
from httpx import AsyncClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.exceptions import NotFoundError
from src.modules.teachers.schemas import TeacherCreate, TeacherUpdate
from src.modules.teachers.service import TeacherService
from tests.factories import create_branch, create_teacher


class TestTeacherService:
    """Tests for TeacherService."""

    async def test_create_teacher(self, db_session: AsyncSession):
        branch = await create_branch(db_session)
        await db_session.commit()

        teacher = await TeacherService(db_session).create_teacher(
            TeacherCreate(
                first_name="Jasur",
                last_name="Toshmatov",
                phone_number="+998 90 123-45-67",
                branch_id=branch.id,
            )
        )

        assert teacher.full_name == "Jasur Toshmatov"
        assert teacher.phone_number == "+998901234567"
        assert teacher.branch_name == "Main Branch"

    async def test_create_teacher_unknown_branch(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await TeacherService(db_session).create_teacher(
                TeacherCreate(first_name="Jasur", last_name="Toshmatov", branch_id=999)
            )

    def test_invalid_phone(self):
        with pytest.raises(PydanticValidationError):
            TeacherCreate(first_name="Jasur", last_name="Toshmatov", phone_number="abc", branch_id=1)

    async def test_update_and_list(self, db_session: AsyncSession):
        branch = await create_branch(db_session)
        other = await create_branch(db_session, name="Second Branch")
        teacher = await create_teacher(db_session, branch)
        await create_teacher(db_session, other, first_name="Elsewhere")
        await db_session.commit()
        service = TeacherService(db_session)

        updated = await service.update_teacher(teacher.id, TeacherUpdate(email="dk@example.com"))
        listed = await service.list_teachers(branch.id)

        assert updated.email == "dk@example.com"
        assert updated.first_name == "Dilnoza"
        assert [t.id for t in listed] == [teacher.id]


class TestTeachersApi:
    """Tests for the teachers endpoints."""

    async def test_create_teacher(self, client: AsyncClient, db_session: AsyncSession):
        branch = await create_branch(db_session)
        await db_session.commit()

        response = await client.post(
            "/api/v1/teachers",
            json={"first_name": "Jasur", "last_name": "Toshmatov", "branch_id": branch.id},
        )

        assert response.status_code == 201
        assert response.json()["data"]["full_name"] == "Jasur Toshmatov"
        assert response.json()["data"]["branch_name"] == "Main Branch"

    async def test_teacher_of_other_branch_is_forbidden(
        self, client: AsyncClient, db_session: AsyncSession, restrict_branches
    ):
        branch = await create_branch(db_session)
        other = await create_branch(db_session, name="Second Branch")
        teacher = await create_teacher(db_session, branch)
        await db_session.commit()
        restrict_branches(other.id)

        response = await client.get(f"/api/v1/teachers/{teacher.id}")

        assert response.status_code == 403

    async def test_update_with_null_name_keeps_it(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        branch = await create_branch(db_session)
        teacher = await create_teacher(db_session, branch)
        await db_session.commit()

        response = await client.patch(
            f"/api/v1/teachers/{teacher.id}",
            json={"first_name": None, "email": "dk@example.com"},
        )

        assert response.status_code == 200
        assert response.json()["data"]["first_name"] == "Dilnoza"
        assert response.json()["data"]["email"] == "dk@example.com"
