import logging
from typing import Any, Dict, List
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.principal import Principal
from hrms.auth.roles import FULL_ACCESS_ROLES, has_permission
from hrms.core.exceptions import ConflictError, Forbidden, NotFoundError, StorageError
from hrms.core.logging import log_user_action
from hrms.models.auth.activity_log import ActivityLog
from hrms.models.auth.user import User
from hrms.models.task.task import Task
from hrms.models.task.task_assignment import TaskAssignment
from hrms.models.task.task_report import TaskReport
from hrms.schemas.task.task_report_schema import TaskReportCreate

logger = logging.getLogger(__name__)

class TaskReportService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_task(self, task_id: int) -> Task:
        try:
            result = await self.session.execute(
                select(Task).where(Task.id == task_id, Task.is_deleted == False)
            )
            task = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting task {task_id}: {str(e)}")
            raise StorageError()
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        return task

    async def _is_assignee(self, task_id: int, user_id: int) -> bool:
        try:
            result = await self.session.execute(
                select(TaskAssignment.id).where(
                    TaskAssignment.task_id == task_id,
                    TaskAssignment.user_id == user_id,
                )
            )
            return result.first() is not None
        except SQLAlchemyError as e:
            logger.error(f"Error checking assignment of task {task_id}: {str(e)}")
            raise StorageError()

    async def submit_report(self, principal: Principal, task_id: int, data: TaskReportCreate) -> Dict[str, Any]:
        """File the caller's completion report; one per assignee, never replaced"""
        await self._get_task(task_id)
        if not await self._is_assignee(task_id, principal.id):
            logger.warning(f"Access denied: user {principal.id} is not assigned to task {task_id}")
            raise Forbidden("Only assignees can submit a report for this task")

        try:
            existing = await self.session.execute(
                select(TaskReport.id).where(TaskReport.task_id == task_id, TaskReport.user_id == principal.id)
            )
            if existing.first() is not None:
                raise ConflictError("Report already submitted. Cannot modify or resubmit.")

            report = TaskReport(
                task_id=task_id,
                user_id=principal.id,
                report_text=data.report_text,
                working_links=data.working_links,
                completion_files=data.completion_files,
            )
            self.session.add(report)
            self.session.add(ActivityLog(
                user_id=principal.id,
                action="submit_report",
                module="tasks",
                details=f"Submitted report for task ID: {task_id}",
            ))
            await self.session.commit()
            await self.session.refresh(report)
        except ConflictError:
            raise
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError("Report already submitted. Cannot modify or resubmit.")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error submitting report for task {task_id}: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "submit_report", "task", task_id)
        return {
            "id": report.id,
            "task_id": report.task_id,
            "user_id": report.user_id,
            "report_text": report.report_text,
            "working_links": report.working_links,
            "completion_files": report.completion_files,
            "created_at": report.created_at,
        }

    async def get_reports(self, principal: Principal, task_id: int) -> List[Dict[str, Any]]:
        """Reports of a task for its creator, its assignees and full-access roles"""
        task = await self._get_task(task_id)
        can_read = (
            has_permission(principal.role, FULL_ACCESS_ROLES)
            or task.created_by == principal.id
            or await self._is_assignee(task_id, principal.id)
        )
        if not can_read:
            logger.warning(f"Access denied: user {principal.id} on reports of task {task_id}")
            raise Forbidden("Not allowed to view reports of this task")

        try:
            result = await self.session.execute(
                select(TaskReport, User.name)
                .join(User, User.id == TaskReport.user_id)
                .where(TaskReport.task_id == task_id)
                .order_by(TaskReport.created_at, TaskReport.id)
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing reports of task {task_id}: {str(e)}")
            raise StorageError()

        return [
            {
                "id": report.id,
                "task_id": report.task_id,
                "user_id": report.user_id,
                "user_name": user_name,
                "report_text": report.report_text,
                "working_links": report.working_links,
                "completion_files": report.completion_files,
                "created_at": report.created_at,
            }
            for report, user_name in rows
        ]
