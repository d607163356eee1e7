"""Row builders shared by the service and API tests."""

from datetime import date, datetime, timezone
from typing import Optional

from hrms.auth.principal import Principal
from hrms.core.security import create_access_token, get_password_hash
from hrms.models import (
    Attendance,
    KPIDefinition,
    KRADefinition,
    KRIDefinition,
    Task,
    TaskAssignment,
    TaskRating,
    User,
)
from hrms.models.shared.enums import AttendanceStatus, TaskStatus

DEFAULT_PASSWORD = "Secret123!"

def utc(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)

async def create_user(
    session,
    name: str,
    role: str = "Employee",
    department: Optional[str] = None,
    manager: Optional[User] = None,
    password: str = DEFAULT_PASSWORD,
) -> User:
    user = User(
        email=f"{name.lower().replace(' ', '.')}@company.com",
        name=name,
        hashed_password=get_password_hash(password),
        role=role,
        department=department,
        manager_id=manager.id if manager else None,
        is_active=True,
    )
    session.add(user)
    await session.commit()
    await session.refresh(user)
    return user

def principal(user: User) -> Principal:
    return Principal.from_user(user)

def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}

async def create_task(
    session,
    creator: User,
    assignees=(),
    status: TaskStatus = TaskStatus.PENDING,
    created_at: Optional[datetime] = None,
    deadline: Optional[datetime] = None,
    completed_at: Optional[datetime] = None,
    title: str = "Task",
) -> Task:
    task = Task(
        title=title,
        created_by=creator.id,
        status=status,
        deadline=deadline,
        completed_at=completed_at,
    )
    if created_at is not None:
        task.created_at = created_at
    session.add(task)
    await session.flush()
    for user in assignees:
        session.add(TaskAssignment(task_id=task.id, user_id=user.id, assigned_by=creator.id))
    await session.commit()
    await session.refresh(task)
    return task

async def rate_task(session, task: Task, user: User, rater: User, rating: int, created_at: datetime):
    row = TaskRating(task_id=task.id, user_id=user.id, rated_by=rater.id, rating=rating, created_at=created_at)
    session.add(row)
    await session.commit()
    return row

async def mark_attendance(session, user: User, day: date, status: AttendanceStatus):
    row = Attendance(user_id=user.id, date=day, status=status)
    session.add(row)
    await session.commit()
    return row

async def create_kpi(session, code: str, calculation_type: str, target=None, is_active: bool = True) -> KPIDefinition:
    definition = KPIDefinition(
        code=code,
        name=code.replace("_", " ").title(),
        metric_type="percentage",
        calculation_formula={"type": calculation_type},
        target_value=target,
        is_active=is_active,
    )
    session.add(definition)
    await session.commit()
    await session.refresh(definition)
    return definition

async def create_kri(session, code: str, calculation_type: str, warning=None, critical=None) -> KRIDefinition:
    definition = KRIDefinition(
        code=code,
        name=code.replace("_", " ").title(),
        metric_type="count",
        calculation_formula={"type": calculation_type},
        threshold_warning=warning,
        threshold_critical=critical,
        is_active=True,
    )
    session.add(definition)
    await session.commit()
    await session.refresh(definition)
    return definition

async def create_kra(session, user: User, kra_number: int, weight, name: Optional[str] = None) -> KRADefinition:
    definition = KRADefinition(
        user_id=user.id,
        role=user.role,
        kra_number=kra_number,
        kra_name=name or f"KRA {kra_number}",
        weight_percentage=weight,
        is_active=True,
    )
    session.add(definition)
    await session.commit()
    await session.refresh(definition)
    return definition
