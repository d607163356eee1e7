from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.dependencies import get_current_principal
from hrms.auth.principal import Principal
from hrms.core.database import get_async_session
from hrms.schemas.hr.work_log_schema import WorkLogFieldResponse, WorkLogFieldUpsert, WorkLogResponse, WorkLogSave
from hrms.services.worklog.work_log_service import WorkLogService

router = APIRouter()

# region Field Definitions
@router.get("/fields", response_model=List[WorkLogFieldResponse])
async def get_work_log_fields(
    role: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = WorkLogService(session)
    return await service.list_fields(role=role)

@router.post("/fields", response_model=WorkLogFieldResponse)
async def upsert_work_log_field(
    field: WorkLogFieldUpsert,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Create or update the field of a role"""
    service = WorkLogService(session)
    return await service.upsert_field(principal, field)

@router.delete("/fields/{field_id}")
async def deactivate_work_log_field(
    field_id: int,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = WorkLogService(session)
    result = await service.deactivate_field(principal, field_id)
    return {"message": "Work log field deactivated", "success": result}
# endregion

@router.get("", response_model=List[WorkLogResponse])
async def get_work_logs(
    user_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    role: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Work logs visible to the caller, newest first"""
    service = WorkLogService(session)
    return await service.list_logs(principal, user_id=user_id, start_date=start_date, end_date=end_date, role=role)

@router.post("")
async def save_work_log(
    log: WorkLogSave,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Create or update the log of a user for a date"""
    service = WorkLogService(session)
    return await service.save_log(principal, log)
