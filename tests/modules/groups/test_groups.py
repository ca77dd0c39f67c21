"""Tests for Groups module."""

from datetime import time
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.audit import AuditAction, list_audit_entries
from src.core.exceptions import NotFoundError, ValidationError
from src.modules.groups.schemas import GroupCreate, GroupUpdate, Weekday
from src.modules.groups.service import GroupService
from src.modules.students.models import StudentStatus
from tests.factories import create_branch, create_group, create_student, create_teacher


class TestGroupService:
    """Tests for GroupService."""

    async def _setup_test_data(self, db_session: AsyncSession) -> dict:
        branch = await create_branch(db_session)
        other_branch = await create_branch(db_session, name="Second Branch")
        teacher = await create_teacher(db_session, branch)
        foreign_teacher = await create_teacher(db_session, other_branch, first_name="Foreign")
        await db_session.commit()
        return {
            "branch": branch,
            "other_branch": other_branch,
            "teacher": teacher,
            "foreign_teacher": foreign_teacher,
        }

    async def test_create_group(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        service = GroupService(db_session)

        group = await service.create_group(
            GroupCreate(
                name="IELTS Evening",
                price=Decimal("450000"),
                teacher_salary_per_student=Decimal("90000"),
                teacher_id=data["teacher"].id,
                branch_id=data["branch"].id,
                start_time=time(18, 0),
                end_time=time(19, 30),
                days_of_week=[Weekday.MONDAY, Weekday.WEDNESDAY],
            )
        )

        assert group.teacher_name == "Dilnoza Karimova"
        assert group.branch_name == "Main Branch"
        assert group.schedule_days == ["MONDAY", "WEDNESDAY"]
        [response] = await service.to_responses([group])
        assert response.student_count == 0
        assert response.price == Decimal("450000.00")

    async def test_create_group_with_teacher_of_other_branch(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)

        with pytest.raises(ValidationError):
            await GroupService(db_session).create_group(
                GroupCreate(
                    name="Mismatch",
                    price=Decimal("100000"),
                    teacher_id=data["foreign_teacher"].id,
                    branch_id=data["branch"].id,
                )
            )

    async def test_update_group(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        group = await create_group(db_session, data["teacher"])
        await db_session.commit()

        updated = await GroupService(db_session).update_group(
            group.id, GroupUpdate(price=Decimal("350000"), days_of_week=[Weekday.FRIDAY])
        )

        assert updated.price == Decimal("350000.00")
        assert updated.schedule_days == ["FRIDAY"]

    async def test_update_group_rejects_foreign_teacher(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        group = await create_group(db_session, data["teacher"])
        await db_session.commit()

        with pytest.raises(ValidationError):
            await GroupService(db_session).update_group(
                group.id, GroupUpdate(teacher_id=data["foreign_teacher"].id)
            )

    async def test_get_unknown_group(self, db_session: AsyncSession):
        with pytest.raises(NotFoundError):
            await GroupService(db_session).get_group_by_id(999)

    async def test_list_by_branch_and_teacher(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        second_teacher = await create_teacher(db_session, data["branch"], first_name="Second")
        group1 = await create_group(db_session, data["teacher"], name="One")
        group2 = await create_group(db_session, second_teacher, name="Two")
        await create_group(db_session, data["foreign_teacher"], name="Elsewhere")
        await db_session.commit()
        service = GroupService(db_session)

        by_branch = await service.list_groups(data["branch"].id)
        by_teacher = await service.list_groups_by_teacher(data["teacher"].id)

        assert {g.id for g in by_branch} == {group1.id, group2.id}
        assert [g.id for g in by_teacher] == [group1.id]

    async def test_add_and_remove_student(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        group = await create_group(db_session, data["teacher"])
        student = await create_student(db_session, data["branch"])
        await db_session.commit()
        service = GroupService(db_session)

        await service.add_student(group.id, student.id)
        await service.add_student(group.id, student.id)

        assert await service.is_member(group.id, student.id)
        assert await service.get_student_counts([group.id]) == {group.id: 1}

        await service.remove_student(group.id, student.id)

        assert not await service.is_member(group.id, student.id)
        actions = [
            entry.action
            for entry in await list_audit_entries(db_session, entity_type="Group", entity_id=group.id)
        ]
        assert actions == [AuditAction.UNENROLL_STUDENT, AuditAction.ENROLL_STUDENT]

    async def test_add_student_of_other_branch(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        group = await create_group(db_session, data["teacher"])
        outsider = await create_student(db_session, data["other_branch"])
        await db_session.commit()
        service = GroupService(db_session)

        with pytest.raises(ValidationError):
            await service.add_student(group.id, outsider.id)
        assert not await service.is_member(group.id, outsider.id)

    async def test_add_deleted_student(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        group = await create_group(db_session, data["teacher"])
        student = await create_student(db_session, data["branch"], status=StudentStatus.DELETED)
        await db_session.commit()

        with pytest.raises(NotFoundError):
            await GroupService(db_session).add_student(group.id, student.id)

    async def test_rosters(self, db_session: AsyncSession):
        data = await self._setup_test_data(db_session)
        group1 = await create_group(db_session, data["teacher"], name="One")
        group2 = await create_group(db_session, data["teacher"], name="Two")
        s1 = await create_student(db_session, data["branch"], groups=[group1, group2])
        s2 = await create_student(db_session, data["branch"], first_name="B", groups=[group1])
        await db_session.commit()
        service = GroupService(db_session)

        rosters = await service.get_rosters([group1.id, group2.id])
        by_student = await service.get_groups_by_student(data["branch"].id)

        assert rosters == {group1.id: sorted([s1.id, s2.id]), group2.id: [s1.id]}
        assert {g.id for g in by_student[s1.id]} == {group1.id, group2.id}
        assert [g.id for g in by_student[s2.id]] == [group1.id]


class TestGroupsApi:
    """Tests for the groups endpoints."""

    async def test_create_and_enroll(self, client: AsyncClient, db_session: AsyncSession):
        branch = await create_branch(db_session)
        teacher = await create_teacher(db_session, branch)
        student = await create_student(db_session, branch, pay_day=10)
        await db_session.commit()

        response = await client.post(
            "/api/v1/groups",
            json={
                "name": "Kids English",
                "price": "250000",
                "teacher_salary_per_student": "60000",
                "teacher_id": teacher.id,
                "branch_id": branch.id,
                "days_of_week": ["TUESDAY", "THURSDAY"],
            },
        )
        assert response.status_code == 201
        group_id = response.json()["data"]["id"]
        assert response.json()["data"]["days_of_week"] == ["TUESDAY", "THURSDAY"]

        enroll = await client.post(
            f"/api/v1/groups/{group_id}/students", json={"student_id": student.id}
        )
        assert enroll.status_code == 200
        assert enroll.json()["data"]["student_count"] == 1

        roster = await client.get(f"/api/v1/groups/{group_id}/students")
        assert roster.status_code == 200
        [row] = roster.json()["data"]
        assert row["id"] == student.id
        assert row["payment"]["expected_amount"] == "250000.00"

        removed = await client.delete(f"/api/v1/groups/{group_id}/students/{student.id}")
        assert removed.json()["data"]["student_count"] == 0

    async def test_invalid_schedule_returns_422(self, client: AsyncClient, db_session: AsyncSession):
        branch = await create_branch(db_session)
        teacher = await create_teacher(db_session, branch)
        await db_session.commit()

        response = await client.post(
            "/api/v1/groups",
            json={
                "name": "Backwards",
                "price": "100000",
                "teacher_id": teacher.id,
                "branch_id": branch.id,
                "start_time": "18:00:00",
                "end_time": "17:00:00",
            },
        )

        assert response.status_code == 422

    async def test_group_of_other_branch_is_forbidden(
        self, client: AsyncClient, db_session: AsyncSession, restrict_branches
    ):
        branch = await create_branch(db_session)
        other = await create_branch(db_session, name="Second Branch")
        group = await create_group(db_session, await create_teacher(db_session, branch))
        await db_session.commit()
        restrict_branches(other.id)

        response = await client.get(f"/api/v1/groups/{group.id}")

        assert response.status_code == 403

    async def test_update_with_null_required_fields_keeps_them(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        branch = await create_branch(db_session)
        teacher = await create_teacher(db_session, branch)
        group = await create_group(db_session, teacher)
        await db_session.commit()

        response = await client.patch(
            f"/api/v1/groups/{group.id}",
            json={"name": None, "price": None, "teacher_id": None, "description": None},
        )

        assert response.status_code == 200
        body = response.json()["data"]
        assert body["name"] == "English A1"
        assert body["price"] == "300000.00"
        assert body["teacher_id"] == teacher.id
        assert body["description"] is None
