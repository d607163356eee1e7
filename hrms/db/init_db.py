"""
Create tables and seed the Super Admin and default KPI/KRI definitions (async, idempotent).
Run:  python -m hrms.db.init_db
"""

import asyncio
import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.roles import Role
from hrms.core.config import settings
from hrms.core.database import async_session_maker, engine
from hrms.core.logging_config import setup_logging
from hrms.core.security import get_password_hash
from hrms.db.base import Base
from hrms.models import KPIDefinition, KRIDefinition, User

logger = logging.getLogger(__name__)

# ----------------------------------------------------------------------
# SEED DATA
# ----------------------------------------------------------------------

KPI_SEED = [
    {"code": "TASK_COMPLETION", "name": "Task Completion Rate", "metric_type": "percentage",
     "calculation_formula": {"type": "task_completion_rate"}, "target_value": 90,
     "description": "Share of tasks created in the period that are completed"},
    {"code": "ONTIME_DELIVERY", "name": "On-time Delivery", "metric_type": "percentage",
     "calculation_formula": {"type": "ontime_delivery"}, "target_value": 85,
     "description": "Completed tasks finished on or before their deadline"},
    {"code": "AVG_TASK_RATING", "name": "Average Task Rating", "metric_type": "rating",
     "calculation_formula": {"type": "avg_task_rating"}, "target_value": 4,
     "description": "Mean task rating received in the period"},
    {"code": "TASKS_COMPLETED", "name": "Tasks Completed", "metric_type": "count",
     "calculation_formula": {"type": "tasks_completed"}, "target_value": None,
     "description": "Number of tasks completed in the period"},
    {"code": "ATTENDANCE_RATE", "name": "Attendance Rate", "metric_type": "percentage",
     "calculation_formula": {"type": "attendance_rate"}, "target_value": 95,
     "description": "Present or half days over recorded days"},
]

KRI_SEED = [
    {"code": "OVERDUE_TASKS", "name": "Overdue Tasks", "metric_type": "count",
     "calculation_formula": {"type": "overdue_tasks"}, "threshold_warning": 3, "threshold_critical": 5,
     "description": "Open tasks past their deadline"},
    {"code": "TASKS_AT_RISK", "name": "Tasks at Risk", "metric_type": "count",
     "calculation_formula": {"type": "tasks_at_risk"}, "threshold_warning": 3, "threshold_critical": 6,
     "description": "Open tasks due within the risk window"},
    {"code": "LOW_PERFORMANCE", "name": "Low Performance", "metric_type": "percentage",
     "calculation_formula": {"type": "low_performance"}, "threshold_warning": 30, "threshold_critical": 50,
     "description": "100 minus task completion rate"},
    {"code": "HIGH_ABSENTEEISM", "name": "High Absenteeism", "metric_type": "percentage",
     "calculation_formula": {"type": "high_absenteeism"}, "threshold_warning": 10, "threshold_critical": 20,
     "description": "100 minus attendance rate"},
]

# ----------------------------------------------------------------------
# ASYNC HELPERS (idempotent upserts)
# ----------------------------------------------------------------------

async def get_or_create_definition(db: AsyncSession, model, data: dict):
    result = await db.execute(select(model).where(model.code == data["code"]))
    obj = result.scalar_one_or_none()
    if obj:
        return obj
    obj = model(**data, is_active=True)
    db.add(obj)
    await db.flush()
    return obj

async def ensure_super_admin(db: AsyncSession):
    result = await db.execute(select(User).where(User.email == settings.SUPER_ADMIN_EMAIL))
    admin = result.scalar_one_or_none()
    if admin:
        return admin
    if not settings.SUPER_ADMIN_PASSWORD:
        logger.warning("SUPER_ADMIN_PASSWORD is not set, skipping Super Admin seed")
        return None
    admin = User(
        email=settings.SUPER_ADMIN_EMAIL,
        name="Super Admin",
        hashed_password=get_password_hash(settings.SUPER_ADMIN_PASSWORD),
        role=Role.SUPER_ADMIN.value,
        is_active=True,
    )
    db.add(admin)
    await db.flush()
    return admin

# ----------------------------------------------------------------------
# MAIN ASYNC SEED LOGIC
# ----------------------------------------------------------------------

async def seed(db: AsyncSession):
    admin = await ensure_super_admin(db)
    for data in KPI_SEED:
        await get_or_create_definition(db, KPIDefinition, data)
    for data in KRI_SEED:
        await get_or_create_definition(db, KRIDefinition, data)
    await db.commit()
    logger.info(
        f"Seed ready: super admin {'present' if admin else 'skipped'}, "
        f"{len(KPI_SEED)} KPI and {len(KRI_SEED)} KRI definitions"
    )

async def create_tables(bind=engine):
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

# ----------------------------------------------------------------------
# ASYNC ENTRY POINT
# ----------------------------------------------------------------------

async def main():
    await create_tables()
    async with async_session_maker() as db:
        try:
            await seed(db)
        except Exception as ex:
            await db.rollback()
            logger.error(f"Seed failed: {ex}")
            raise

if __name__ == "__main__":
    setup_logging()
    asyncio.run(main())
