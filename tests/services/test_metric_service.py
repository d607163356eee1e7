from datetime import date

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from hrms.core.exceptions import Forbidden, NotFoundError
from hrms.models import KPIMetric, KRIMetric
from hrms.models.shared.enums import AttendanceStatus, KPIStatus, PeriodType, RiskLevel, TaskStatus
from hrms.schemas.performance.metric_schema import CalculationRequest, KRIMetricQuery, MetricQuery
from hrms.services.performance.kpi_service import KPIService
from hrms.services.performance.kri_service import KRIService
from hrms.services.performance import metric_store
from tests.factories import (
    create_kpi,
    create_kri,
    create_task,
    create_user,
    mark_attendance,
    principal,
    rate_task,
    utc,
)

TODAY = date(2024, 5, 15)  # Wednesday

@pytest.fixture
async def team(session):
    manager = await create_user(session, "Maya Manager", role="Manager", department="Engineering")
    dev = await create_user(session, "Dev One", role="Backend Developer", department="Engineering", manager=manager)
    other = await create_user(session, "Sam Sales", role="Employee", department="Sales")
    admin = await create_user(session, "Ada Admin", role="Admin")
    return {"manager": manager, "dev": dev, "other": other, "admin": admin}

@pytest.fixture
async def dev_tasks(session, team):
    manager, dev = team["manager"], team["dev"]
    # Created this week: two completed (one late), one pending
    await create_task(session, manager, [dev], TaskStatus.COMPLETED, created_at=utc(2024, 5, 13),
                      deadline=utc(2024, 5, 16), completed_at=utc(2024, 5, 15))
    await create_task(session, manager, [dev], TaskStatus.COMPLETED, created_at=utc(2024, 5, 13),
                      deadline=utc(2024, 5, 14), completed_at=utc(2024, 5, 15, 18))
    pending = await create_task(session, manager, [dev], TaskStatus.PENDING, created_at=utc(2024, 5, 14))
    # Last month, outside the period
    await create_task(session, manager, [dev], TaskStatus.COMPLETED, created_at=utc(2024, 4, 1),
                      completed_at=utc(2024, 4, 2))
    # Someone else's work
    await create_task(session, manager, [team["other"]], TaskStatus.PENDING, created_at=utc(2024, 5, 14))
    return pending

@pytest.mark.asyncio
class TestKPICalculation:
    async def test_user_scope_weekly(self, session, team, dev_tasks):
        completion = await create_kpi(session, "TASK_COMPLETION", "task_completion_rate", target=90)
        ontime = await create_kpi(session, "ONTIME_DELIVERY", "ontime_delivery", target=50)
        await create_kpi(session, "TASKS_COMPLETED", "tasks_completed")

        service = KPIService(session)
        request = CalculationRequest(user_id=team["dev"].id, period_type="weekly")
        result = await service.calculate(principal(team["manager"]), request, today=TODAY)

        assert result["success"] is True
        assert result["period"] == {"type": "weekly", "start": date(2024, 5, 13), "end": date(2024, 5, 19)}
        by_code = {item["kpi_code"]: item for item in result["metrics"]}
        assert by_code["TASK_COMPLETION"]["calculated_value"] == 66.67
        assert by_code["TASK_COMPLETION"]["status"] == KPIStatus.BELOW_TARGET
        assert by_code["ONTIME_DELIVERY"]["calculated_value"] == 50.0
        assert by_code["ONTIME_DELIVERY"]["status"] == KPIStatus.ON_TARGET
        assert by_code["TASKS_COMPLETED"]["calculated_value"] == 2.0
        assert by_code["TASKS_COMPLETED"]["target_value"] is None
        assert completion.id != ontime.id

    async def test_department_and_organisation_scope(self, session, team, dev_tasks):
        await create_kpi(session, "TASK_COMPLETION", "task_completion_rate", target=90)
        service = KPIService(session)

        engineering = await service.calculate(
            principal(team["admin"]),
            CalculationRequest(department="Engineering", period_type="weekly"),
            today=TODAY,
        )
        organisation = await service.calculate(
            principal(team["admin"]),
            CalculationRequest(period_type="weekly"),
            today=TODAY,
        )

        assert engineering["metrics"][0]["calculated_value"] == 66.67
        # 2 completed out of 4 tasks created this week
        assert organisation["metrics"][0]["calculated_value"] == 50.0

    async def test_rating_and_attendance(self, session, team, dev_tasks):
        dev = team["dev"]
        await create_kpi(session, "AVG_TASK_RATING", "avg_task_rating", target=4)
        await create_kpi(session, "ATTENDANCE_RATE", "attendance_rate", target=95)

        await rate_task(session, dev_tasks, dev, team["manager"], 4, utc(2024, 5, 14))
        await rate_task(session, dev_tasks, dev, team["manager"], 5, utc(2024, 5, 15))
        await rate_task(session, dev_tasks, dev, team["manager"], 1, utc(2024, 4, 15))
        for day, status in [
            (13, AttendanceStatus.PRESENT),
            (14, AttendanceStatus.PRESENT),
            (15, AttendanceStatus.HALF_DAY),
            (16, AttendanceStatus.ABSENT),
            (17, AttendanceStatus.PRESENT),
        ]:
            await mark_attendance(session, dev, date(2024, 5, day), status)

        result = await KPIService(session).calculate(
            principal(team["manager"]),
            CalculationRequest(user_id=dev.id, period_type="weekly"),
            today=TODAY,
        )
        by_code = {item["kpi_code"]: item for item in result["metrics"]}
        assert by_code["AVG_TASK_RATING"]["calculated_value"] == 4.5
        assert by_code["AVG_TASK_RATING"]["status"] == KPIStatus.ABOVE_TARGET
        assert by_code["ATTENDANCE_RATE"]["calculated_value"] == 80.0
        assert by_code["ATTENDANCE_RATE"]["status"] == KPIStatus.BELOW_TARGET

    async def test_recalculation_keeps_one_row(self, session, team, dev_tasks):
        definition = await create_kpi(session, "TASK_COMPLETION", "task_completion_rate", target=90)
        service = KPIService(session)
        request = CalculationRequest(user_id=team["dev"].id, period_type="weekly")

        await service.calculate(principal(team["manager"]), request, today=TODAY)
        dev_tasks.status = TaskStatus.COMPLETED
        dev_tasks.completed_at = utc(2024, 5, 15)
        await session.commit()
        second = await service.calculate(principal(team["manager"]), request, today=TODAY)

        rows = (await session.scalars(select(KPIMetric).where(KPIMetric.kpi_id == definition.id))).all()
        assert len(rows) == 1
        assert float(rows[0].calculated_value) == 100.0
        assert second["metrics"][0]["calculated_value"] == 100.0

    async def test_organisation_rows_do_not_collide_with_user_rows(self, session, team, dev_tasks):
        await create_kpi(session, "TASK_COMPLETION", "task_completion_rate", target=90)
        service = KPIService(session)
        for _ in range(2):
            await service.calculate(principal(team["admin"]), CalculationRequest(period_type="weekly"), today=TODAY)
            await service.calculate(
                principal(team["admin"]),
                CalculationRequest(user_id=team["dev"].id, period_type="weekly"),
                today=TODAY,
            )

        count = await session.scalar(select(func.count(KPIMetric.id)))
        assert count == 2

    async def test_database_rejects_duplicate_organisation_rows(self, session):
        definition = await create_kpi(session, "TASK_COMPLETION", "task_completion_rate", target=90)
        for _ in range(2):
            session.add(KPIMetric(
                kpi_id=definition.id,
                user_id=None,
                department=None,
                period_type=PeriodType.DAILY,
                period_start=TODAY,
                period_end=TODAY,
                calculated_value=50,
                status=KPIStatus.BELOW_TARGET,
            ))
        with pytest.raises(IntegrityError):
            await session.commit()

    async def test_key_taken_during_run_is_updated_on_retry(self, session, team, dev_tasks, monkeypatch):
        await create_kpi(session, "TASK_COMPLETION", "task_completion_rate", target=90)
        admin = principal(team["admin"])
        service = KPIService(session)
        request = CalculationRequest(period_type="weekly")
        await service.calculate(admin, request, today=TODAY)

        # The first lookup misses the stored row, like a run that selected before another committed
        real_conditions = metric_store.key_conditions
        stale_lookups = []

        def stale_key_conditions(model, key):
            if not stale_lookups:
                stale_lookups.append(key)
                return [model.id == -1]
            return real_conditions(model, key)

        monkeypatch.setattr(metric_store, "key_conditions", stale_key_conditions)
        result = await service.calculate(admin, request, today=TODAY)

        assert len(stale_lookups) == 1
        assert result["metrics"][0]["calculated_value"] == 50.0
        assert await session.scalar(select(func.count(KPIMetric.id))) == 1

    async def test_requires_calculation_role(self, session, team):
        await create_kpi(session, "TASK_COMPLETION", "task_completion_rate", target=90)
        with pytest.raises(Forbidden):
            await KPIService(session).calculate(principal(team["dev"]), CalculationRequest(), today=TODAY)

    async def test_inactive_or_missing_definitions(self, session, team):
        inactive = await create_kpi(session, "OLD", "tasks_completed", is_active=False)
        service = KPIService(session)
        with pytest.raises(NotFoundError):
            await service.calculate(principal(team["admin"]), CalculationRequest(definition_id=inactive.id), today=TODAY)
        with pytest.raises(NotFoundError):
            await service.calculate(principal(team["admin"]), CalculationRequest(), today=TODAY)

@pytest.mark.asyncio
class TestKRICalculation:
    async def test_overdue_and_at_risk(self, session, team):
        manager, dev = team["manager"], team["dev"]
        await create_task(session, manager, [dev], TaskStatus.PENDING, deadline=utc(2024, 5, 10))
        await create_task(session, manager, [dev], TaskStatus.IN_PROGRESS, deadline=utc(2024, 5, 17))
        await create_task(session, manager, [dev], TaskStatus.PENDING, deadline=utc(2024, 5, 18))
        await create_task(session, manager, [dev], TaskStatus.COMPLETED, deadline=utc(2024, 5, 1),
                          completed_at=utc(2024, 5, 2))
        await create_task(session, manager, [dev], TaskStatus.CANCELLED, deadline=utc(2024, 5, 1))
        await create_kri(session, "OVERDUE_TASKS", "overdue_tasks", warning=1, critical=3)
        await create_kri(session, "TASKS_AT_RISK", "tasks_at_risk", warning=3, critical=6)

        result = await KRIService(session).calculate(
            principal(manager),
            CalculationRequest(user_id=dev.id),
            today=TODAY,
        )
        by_code = {item["kri_code"]: item for item in result["metrics"]}
        assert by_code["OVERDUE_TASKS"]["calculated_value"] == 1.0
        assert by_code["OVERDUE_TASKS"]["risk_level"] == RiskLevel.HIGH
        assert by_code["TASKS_AT_RISK"]["calculated_value"] == 1.0
        assert by_code["TASKS_AT_RISK"]["risk_level"] == RiskLevel.LOW

    async def test_low_performance(self, session, team, dev_tasks):
        await create_kri(session, "LOW_PERFORMANCE", "low_performance", warning=30, critical=50)
        result = await KRIService(session).calculate(
            principal(team["admin"]),
            CalculationRequest(user_id=team["dev"].id, period_type="weekly"),
            today=TODAY,
        )
        metric = result["metrics"][0]
        assert metric["calculated_value"] == 33.33
        assert metric["risk_level"] == RiskLevel.HIGH

@pytest.mark.asyncio
class TestMetricListing:
    async def _calculate_for(self, session, team):
        await create_kpi(session, "TASK_COMPLETION", "task_completion_rate", target=90)
        service = KPIService(session)
        for user in (team["dev"], team["other"]):
            await service.calculate(
                principal(team["admin"]),
                CalculationRequest(user_id=user.id, period_type="weekly"),
                today=TODAY,
            )
        return service

    async def test_viewer_sees_any_user(self, session, team):
        service = await self._calculate_for(session, team)
        metrics = await service.list_metrics(principal(team["manager"]), MetricQuery())
        assert {m["user_id"] for m in metrics} == {team["dev"].id, team["other"].id}

        only_dev = await service.list_metrics(principal(team["manager"]), MetricQuery(user_id=team["dev"].id))
        assert [m["user_name"] for m in only_dev] == ["Dev One"]
        assert only_dev[0]["period_type"] == PeriodType.WEEKLY

    async def test_non_viewer_is_limited_to_self(self, session, team):
        service = await self._calculate_for(session, team)
        own = await service.list_metrics(principal(team["dev"]), MetricQuery(department="Sales"))
        assert {m["user_id"] for m in own} == {team["dev"].id}

        with pytest.raises(Forbidden):
            await service.list_metrics(principal(team["dev"]), MetricQuery(user_id=team["other"].id))

    async def test_kri_risk_filter(self, session, team, dev_tasks):
        await create_kri(session, "LOW_PERFORMANCE", "low_performance", warning=30, critical=50)
        service = KRIService(session)
        await service.calculate(
            principal(team["admin"]),
            CalculationRequest(user_id=team["dev"].id, period_type="weekly"),
            today=TODAY,
        )

        high = await service.list_metrics(principal(team["admin"]), KRIMetricQuery(risk_level=RiskLevel.HIGH))
        low = await service.list_metrics(principal(team["admin"]), KRIMetricQuery(risk_level=RiskLevel.LOW))
        assert len(high) == 1
        assert low == []
        assert await session.scalar(select(func.count(KRIMetric.id))) == 1
