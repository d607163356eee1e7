import logging
from typing import Any, Dict, List, Optional
from sqlalchemy import case, distinct, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from hrms.auth.permissions import EMPLOYEE_RATINGS_POLICY, RolePolicy, TieredAccessPolicy, enforce, require_policy
from hrms.auth.principal import Principal
from hrms.auth.roles import METRIC_VIEWER_ROLES, Role
from hrms.core.exceptions import NotFoundError, StorageError, ValidationError
from hrms.core.logging import log_user_action
from hrms.models.auth.user import User
from hrms.models.hr.employee_rating import EmployeeRating
from hrms.models.shared.enums import TaskStatus
from hrms.models.task.task import Task
from hrms.models.task.task_assignment import TaskAssignment
from hrms.schemas.hr.employee_rating_schema import EmployeeRatingCreate
from hrms.services.auth.user_service import UserService
from hrms.services.performance.formulas import completion_rate, round2

logger = logging.getLogger(__name__)

RATING_CRITERIA = (
    "workplace_behaviour",
    "discipline",
    "innovations",
    "punctuality",
    "critical_task_delivery",
)

# Super Admin, Admin, HR and Manager rate and rank; a Manager only their direct reports
RATING_SUBMIT_POLICY = RolePolicy(allowed_roles=METRIC_VIEWER_ROLES, name="employee rating")
TOP_EMPLOYEES_POLICY = RolePolicy(allowed_roles=METRIC_VIEWER_ROLES, name="top employees")
TOP_EMPLOYEES_TIERS = TieredAccessPolicy(ownership_field="id")

def average_score(rating: EmployeeRating) -> Optional[float]:
    """Mean of the criteria that were scored"""
    scores = [getattr(rating, name) for name in RATING_CRITERIA]
    scores = [s for s in scores if s is not None]
    if not scores:
        return None
    return round2(sum(scores) / len(scores))

def _optional_round(value) -> Optional[float]:
    return round2(value) if value is not None else None

class EmployeeRatingService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_service = UserService(session)

    # region Ratings
    def _rating_select(self):
        employee = aliased(User)
        rater = aliased(User)
        stmt = (
            select(EmployeeRating, employee.name, employee.department, rater.name)
            .join(employee, employee.id == EmployeeRating.employee_id)
            .join(rater, rater.id == EmployeeRating.rated_by)
            .where(EmployeeRating.is_deleted == False)
        )
        return stmt, employee

    async def _fetch_ratings(self, stmt) -> List[Dict[str, Any]]:
        try:
            result = await self.session.execute(
                stmt.order_by(EmployeeRating.created_at.desc(), EmployeeRating.id.desc())
            )
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing employee ratings: {str(e)}")
            raise StorageError()

        items = []
        for rating, employee_name, department, rater_name in rows:
            item = {name: getattr(rating, name) for name in RATING_CRITERIA}
            item.update({
                "id": rating.id,
                "employee_id": rating.employee_id,
                "employee_name": employee_name,
                "employee_department": department,
                "rated_by": rating.rated_by,
                "rated_by_name": rater_name,
                "average_score": average_score(rating),
                "comments": rating.comments,
                "rating_period": rating.rating_period,
                "created_at": rating.created_at,
            })
            items.append(item)
        return items

    async def list_ratings(
        self,
        principal: Principal,
        employee_id: Optional[int] = None,
        period: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Ratings visible to principal: all, direct reports' or own"""
        stmt, employee = self._rating_select()
        stmt = EMPLOYEE_RATINGS_POLICY.filter(stmt, principal, EmployeeRating, employee)

        if employee_id is not None:
            stmt = stmt.where(EmployeeRating.employee_id == employee_id)
        if period:
            stmt = stmt.where(EmployeeRating.rating_period == period)
        return await self._fetch_ratings(stmt)

    async def submit_rating(self, principal: Principal, data: EmployeeRatingCreate) -> Dict[str, Any]:
        """Record one rating of all five criteria for an employee"""
        require_policy(principal, RATING_SUBMIT_POLICY)
        if data.employee_id == principal.id:
            raise ValidationError("You cannot rate yourself")

        employee = await self.user_service.get_user(data.employee_id)
        if employee is None or employee.role == Role.SUPER_ADMIN.value:
            raise NotFoundError(f"Employee {data.employee_id} not found")
        enforce(
            EMPLOYEE_RATINGS_POLICY.check_subject(principal, employee),
            "You can only rate employees in your team",
        )

        try:
            rating = EmployeeRating(rated_by=principal.id, **data.dict())
            self.session.add(rating)
            await self.session.commit()
            await self.session.refresh(rating)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error saving rating of employee {data.employee_id}: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "create", "employee rating", rating.id)
        stmt, _ = self._rating_select()
        items = await self._fetch_ratings(stmt.where(EmployeeRating.id == rating.id))
        return items[0]
    # endregion

    # region Top Employees
    async def top_employees(
        self,
        principal: Principal,
        limit: int = 10,
        department: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """
        Rank employees by completed tasks, then overall rating, then number of
        ratings. Employees without ratings rank after rated ones with the
        same completed count.
        """
        require_policy(principal, TOP_EMPLOYEES_POLICY)

        # Aggregated separately so assignments and ratings do not multiply each other
        task_stats = (
            select(
                TaskAssignment.user_id.label("user_id"),
                func.count(distinct(case((Task.status == TaskStatus.COMPLETED, Task.id)))).label("completed"),
                func.count(distinct(Task.id)).label("assigned"),
            )
            .join(Task, Task.id == TaskAssignment.task_id)
            .where(Task.is_deleted == False)
            .group_by(TaskAssignment.user_id)
            .subquery()
        )
        criteria_columns = [getattr(EmployeeRating, name) for name in RATING_CRITERIA]
        rating_stats = (
            select(
                EmployeeRating.employee_id.label("employee_id"),
                *[func.avg(column).label(column.key) for column in criteria_columns],
                func.avg(sum(criteria_columns) / 5.0).label("overall"),
                func.count(EmployeeRating.id).label("total_ratings"),
            )
            .where(EmployeeRating.is_deleted == False)
            .group_by(EmployeeRating.employee_id)
            .subquery()
        )

        completed = func.coalesce(task_stats.c.completed, 0)
        total_ratings = func.coalesce(rating_stats.c.total_ratings, 0)
        stmt = (
            select(
                User,
                completed,
                func.coalesce(task_stats.c.assigned, 0),
                *[rating_stats.c[name] for name in RATING_CRITERIA],
                rating_stats.c.overall,
                total_ratings,
            )
            .outerjoin(task_stats, task_stats.c.user_id == User.id)
            .outerjoin(rating_stats, rating_stats.c.employee_id == User.id)
            .where(
                User.role != Role.SUPER_ADMIN.value,
                User.is_active == True,
                User.is_deleted == False,
            )
        )
        stmt = TOP_EMPLOYEES_TIERS.filter(stmt, principal, User, User)
        if department:
            stmt = stmt.where(User.department == department)
        stmt = stmt.order_by(
            completed.desc(),
            rating_stats.c.overall.is_(None),
            rating_stats.c.overall.desc(),
            total_ratings.desc(),
            User.id,
        ).limit(limit)

        try:
            result = await self.session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error ranking top employees: {str(e)}")
            raise StorageError()

        items = []
        for user, tasks_completed, assigned, *averages, overall, rating_count in rows:
            ratings = {name: _optional_round(avg) for name, avg in zip(RATING_CRITERIA, averages)}
            ratings["overall_average"] = _optional_round(overall)
            ratings["total_ratings"] = rating_count
            items.append({
                "id": user.id,
                "name": user.name,
                "email": user.email,
                "role": user.role,
                "department": user.department,
                "designation": user.designation,
                "tasks_completed": tasks_completed,
                "total_tasks_assigned": assigned,
                "task_completion_rate": completion_rate(tasks_completed, assigned),
                "ratings": ratings,
            })
        return items
    # endregion
