from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.dependencies import get_current_principal
from hrms.auth.principal import Principal
from hrms.core.database import get_async_session
from hrms.schemas.task.task_report_schema import TaskReportCreate, TaskReportResponse
from hrms.services.task.task_report_service import TaskReportService

router = APIRouter()

@router.post("/{task_id}/reports", response_model=TaskReportResponse)
async def submit_task_report(
    task_id: int,
    report: TaskReportCreate,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """File the caller's completion report for a task"""
    service = TaskReportService(session)
    return await service.submit_report(principal, task_id, report)

@router.get("/{task_id}/reports", response_model=List[TaskReportResponse])
async def get_task_reports(
    task_id: int,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = TaskReportService(session)
    return await service.get_reports(principal, task_id)
