import pytest
from httpx import AsyncClient
from fastapi import status

from tests.factories import auth_headers, create_task, create_user

@pytest.mark.asyncio
class TestMenuPermissionEndpoints:
    async def test_replace_and_check(self, client: AsyncClient, session):
        admin = await create_user(session, "Ada Admin", role="Admin")
        manager = await create_user(session, "Maya Manager", role="Manager")

        replaced = await client.post(
            "/api/v1/menu-permissions",
            json={"permissions": {"calendar": {"Manager": False}}},
            headers=auth_headers(admin),
        )
        assert replaced.status_code == status.HTTP_200_OK

        check = await client.get("/api/v1/menu-permissions/check", headers=auth_headers(manager))
        assert check.status_code == status.HTTP_200_OK
        assert check.json()["permissions"]["calendar"] is False

        matrix = await client.get("/api/v1/menu-permissions", headers=auth_headers(manager))
        assert matrix.status_code == status.HTTP_403_FORBIDDEN

@pytest.mark.asyncio
class TestTaskReportEndpoints:
    async def test_report_cannot_be_resubmitted(self, client: AsyncClient, session):
        manager = await create_user(session, "Maya Manager", role="Manager")
        dev = await create_user(session, "Dev One", role="Backend Developer", manager=manager)
        task = await create_task(session, manager, [dev])

        first = await client.post(
            f"/api/v1/tasks/{task.id}/reports",
            json={"report_text": "Finished", "working_links": ["https://git.example.com/pr/7"]},
            headers=auth_headers(dev),
        )
        second = await client.post(
            f"/api/v1/tasks/{task.id}/reports",
            json={"report_text": "Finished again"},
            headers=auth_headers(dev),
        )
        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_409_CONFLICT

        reports = await client.get(f"/api/v1/tasks/{task.id}/reports", headers=auth_headers(manager))
        assert [r["report_text"] for r in reports.json()] == ["Finished"]

    async def test_blank_report_is_rejected(self, client: AsyncClient, session):
        manager = await create_user(session, "Maya Manager", role="Manager")
        dev = await create_user(session, "Dev One", role="Backend Developer")
        task = await create_task(session, manager, [dev])

        response = await client.post(
            f"/api/v1/tasks/{task.id}/reports",
            json={"report_text": "   "},
            headers=auth_headers(dev),
        )
        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

@pytest.mark.asyncio
class TestWorkLogEndpoints:
    async def test_field_and_log_flow(self, client: AsyncClient, session):
        admin = await create_user(session, "Ada Admin", role="Admin")
        dev = await create_user(session, "Dev One", role="Backend Developer")

        field = await client.post(
            "/api/v1/work-logs/fields",
            json={
                "role": "Backend Developer",
                "field_key": "status",
                "field_label": "Status",
                "field_type": "select",
                "field_options": ["done", "blocked"],
                "is_required": True,
            },
            headers=auth_headers(admin),
        )
        assert field.status_code == status.HTTP_200_OK

        bad = await client.post(
            "/api/v1/work-logs",
            json={"log_date": "2024-05-15", "field_data": {"status": "maybe"}},
            headers=auth_headers(dev),
        )
        good = await client.post(
            "/api/v1/work-logs",
            json={"log_date": "2024-05-15", "field_data": {"status": "done"}, "notes": "All green"},
            headers=auth_headers(dev),
        )
        assert bad.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert good.status_code == status.HTTP_200_OK

        logs = await client.get("/api/v1/work-logs", headers=auth_headers(dev))
        assert [log["field_data"] for log in logs.json()] == [{"status": "done"}]

@pytest.mark.asyncio
class TestEmployeeRatingEndpoints:
    async def test_rate_then_rank(self, client: AsyncClient, session):
        manager = await create_user(session, "Maya Manager", role="Manager")
        dev = await create_user(session, "Dev One", role="Backend Developer", manager=manager)
        scores = {
            "workplace_behaviour": 5,
            "discipline": 5,
            "innovations": 4,
            "punctuality": 5,
            "critical_task_delivery": 4,
        }

        out_of_range = await client.post(
            "/api/v1/employee-ratings",
            json={"employee_id": dev.id, **scores, "discipline": 6},
            headers=auth_headers(manager),
        )
        assert out_of_range.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

        created = await client.post(
            "/api/v1/employee-ratings",
            json={"employee_id": dev.id, **scores, "rating_period": "2024-05"},
            headers=auth_headers(manager),
        )
        assert created.status_code == status.HTTP_200_OK
        assert created.json()["average_score"] == 4.6

        ranked = await client.get("/api/v1/top-employees", headers=auth_headers(manager))
        assert ranked.status_code == status.HTTP_200_OK
        assert [(e["name"], e["ratings"]["overall_average"]) for e in ranked.json()] == [("Dev One", 4.6)]

        refused = await client.get("/api/v1/top-employees", headers=auth_headers(dev))
        assert refused.status_code == status.HTTP_403_FORBIDDEN
