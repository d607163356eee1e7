import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Tuple

from sqlalchemy import and_, case, distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.core.config import settings
from hrms.core.exceptions import StorageError
from hrms.models.auth.user import User
from hrms.models.hr.attendance import Attendance
from hrms.models.shared.enums import AttendanceStatus, TaskStatus
from hrms.models.task.task import Task
from hrms.models.task.task_assignment import TaskAssignment
from hrms.models.task.task_rating import TaskRating
from hrms.services.performance.periods import Period

logger = logging.getLogger(__name__)

OPEN_EXCLUDED_STATUSES = (TaskStatus.COMPLETED, TaskStatus.CANCELLED)
PRESENT_STATUSES = (AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY)


@dataclass(frozen=True)
class MetricScope:
    """User scope wins over department; neither means organisation-wide"""

    user_id: Optional[int] = None
    department: Optional[str] = None

    def __post_init__(self):
        department = self.department.strip() if self.department else None
        object.__setattr__(self, "department", department or None)
        if self.user_id is not None:
            object.__setattr__(self, "department", None)

    @property
    def label(self) -> str:
        if self.user_id is not None:
            return f"user:{self.user_id}"
        if self.department:
            return f"department:{self.department}"
        return "organisation"


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


class MetricAggregates:
    """Aggregate queries over tasks, ratings and attendance for one scope and period"""

    def __init__(self, session: AsyncSession, scope: MetricScope, period: Period, today: Optional[date] = None):
        self.session = session
        self.scope = scope
        self.period = period
        self.today = today or date.today()

    # region Scope helpers
    def _scope_tasks(self, stmt):
        if self.scope.user_id is not None:
            return stmt.join(TaskAssignment, TaskAssignment.task_id == Task.id).where(
                TaskAssignment.user_id == self.scope.user_id
            )
        if self.scope.department:
            return (
                stmt.join(TaskAssignment, TaskAssignment.task_id == Task.id)
                .join(User, User.id == TaskAssignment.user_id)
                .where(User.department == self.scope.department)
            )
        return stmt

    def _scope_user_column(self, stmt, user_column):
        if self.scope.user_id is not None:
            return stmt.where(user_column == self.scope.user_id)
        if self.scope.department:
            return stmt.join(User, User.id == user_column).where(User.department == self.scope.department)
        return stmt

    async def _first_row(self, stmt) -> Tuple:
        try:
            result = await self.session.execute(stmt)
            return result.one()
        except SQLAlchemyError as e:
            logger.error(f"Aggregate query failed for {self.scope.label}: {str(e)}")
            raise StorageError()
    # endregion

    async def task_counts(self) -> Tuple[int, int]:
        """(completed, total) among tasks created in the period"""
        stmt = select(
            func.count(distinct(case((Task.status == TaskStatus.COMPLETED, Task.id)))),
            func.count(distinct(Task.id)),
        ).select_from(Task)
        stmt = self._scope_tasks(stmt).where(
            Task.is_deleted == False,
            Task.created_at >= self.period.start_at,
            Task.created_at < self.period.end_before,
        )
        completed, total = await self._first_row(stmt)
        return completed or 0, total or 0

    async def ontime_counts(self) -> Tuple[int, int]:
        """(on time, completed with a deadline) among tasks completed in the period"""
        has_deadline = Task.deadline.isnot(None)
        on_time = and_(has_deadline, func.date(Task.completed_at) <= func.date(Task.deadline))
        stmt = select(
            func.count(distinct(case((on_time, Task.id)))),
            func.count(distinct(case((has_deadline, Task.id)))),
        ).select_from(Task)
        stmt = self._scope_tasks(stmt).where(
            Task.is_deleted == False,
            Task.status == TaskStatus.COMPLETED,
            Task.completed_at >= self.period.start_at,
            Task.completed_at < self.period.end_before,
        )
        ontime, total = await self._first_row(stmt)
        return ontime or 0, total or 0

    async def tasks_completed(self) -> int:
        stmt = select(func.count(distinct(Task.id))).select_from(Task)
        stmt = self._scope_tasks(stmt).where(
            Task.is_deleted == False,
            Task.status == TaskStatus.COMPLETED,
            Task.completed_at >= self.period.start_at,
            Task.completed_at < self.period.end_before,
        )
        (count,) = await self._first_row(stmt)
        return count or 0

    async def average_rating(self) -> Optional[float]:
        stmt = select(func.avg(TaskRating.rating)).select_from(TaskRating)
        stmt = self._scope_user_column(stmt, TaskRating.user_id).where(
            TaskRating.created_at >= self.period.start_at,
            TaskRating.created_at < self.period.end_before,
        )
        (avg,) = await self._first_row(stmt)
        return float(avg) if avg is not None else None

    async def attendance_counts(self) -> Tuple[int, int]:
        """(present days, recorded days) counted per user-day"""
        stmt = select(
            func.count(case((Attendance.status.in_(PRESENT_STATUSES), Attendance.id))),
            func.count(Attendance.id),
        ).select_from(Attendance)
        stmt = self._scope_user_column(stmt, Attendance.user_id).where(
            Attendance.date >= self.period.start,
            Attendance.date <= self.period.end,
        )
        present, total = await self._first_row(stmt)
        return present or 0, total or 0

    async def overdue_tasks(self) -> int:
        """Open tasks whose deadline day is before today; not period bound"""
        stmt = select(func.count(distinct(Task.id))).select_from(Task)
        stmt = self._scope_tasks(stmt).where(
            Task.is_deleted == False,
            Task.deadline.isnot(None),
            Task.deadline < _start_of(self.today),
            Task.status.notin_(OPEN_EXCLUDED_STATUSES),
        )
        (count,) = await self._first_row(stmt)
        return count or 0

    async def tasks_at_risk(self) -> int:
        """Open tasks due between today and the end of the risk window; not period bound"""
        window_end = _start_of(self.today + timedelta(days=settings.TASK_RISK_WINDOW_DAYS + 1))
        stmt = select(func.count(distinct(Task.id))).select_from(Task)
        stmt = self._scope_tasks(stmt).where(
            Task.is_deleted == False,
            Task.deadline.isnot(None),
            Task.deadline >= _start_of(self.today),
            Task.deadline < window_end,
            Task.status.notin_(OPEN_EXCLUDED_STATUSES),
        )
        (count,) = await self._first_row(stmt)
        return count or 0
