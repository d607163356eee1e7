from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.dependencies import get_current_principal
from hrms.auth.principal import Principal
from hrms.core.database import get_async_session
from hrms.schemas.hr.employee_rating_schema import TopEmployeeResponse
from hrms.services.hr.employee_rating_service import EmployeeRatingService

router = APIRouter()

@router.get("", response_model=List[TopEmployeeResponse])
async def get_top_employees(
    limit: int = Query(10, ge=1, le=100),
    department: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Employees ranked by completed tasks and ratings"""
    service = EmployeeRatingService(session)
    return await service.top_employees(principal, limit=limit, department=department)
