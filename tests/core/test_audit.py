"""Tests for the audit trail."""

from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from tests.factories import create_branch, create_group, create_student, create_teacher


class TestAuditTrailApi:
    """Tests for GET /audit-trail."""

    async def test_enrollment_is_listed_newest_first(
        self, client: AsyncClient, db_session: AsyncSession
    ):
        branch = await create_branch(db_session)
        group = await create_group(db_session, await create_teacher(db_session, branch))
        student = await create_student(db_session, branch)
        await db_session.commit()

        await client.post(f"/api/v1/groups/{group.id}/students", json={"student_id": student.id})
        await client.delete(f"/api/v1/groups/{group.id}/students/{student.id}")

        response = await client.get(
            "/api/v1/audit-trail",
            params={"branch_id": branch.id, "entity_type": "Group", "entity_id": group.id},
        )

        assert response.status_code == 200
        entries = response.json()["data"]
        assert [e["action"] for e in entries] == ["UNENROLL_STUDENT", "ENROLL_STUDENT"]
        assert entries[1]["new_values"] == {"student_id": student.id}

    async def test_filter_by_action(self, client: AsyncClient, db_session: AsyncSession):
        created = await client.post("/api/v1/branches", json={"name": "Chilonzor"})
        branch_id = created.json()["data"]["id"]

        response = await client.get(
            "/api/v1/audit-trail", params={"branch_id": branch_id, "action": "CREATE"}
        )

        assert response.status_code == 200
        [entry] = response.json()["data"]
        assert entry["entity_type"] == "Branch"
        assert entry["new_values"] == {"name": "Chilonzor"}

    async def test_other_branch_is_forbidden(
        self, client: AsyncClient, db_session: AsyncSession, restrict_branches
    ):
        branch = await create_branch(db_session)
        other = await create_branch(db_session, name="Second Branch")
        await db_session.commit()
        restrict_branches(other.id)

        response = await client.get("/api/v1/audit-trail", params={"branch_id": branch.id})

        assert response.status_code == 403
