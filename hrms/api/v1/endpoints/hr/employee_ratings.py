from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.dependencies import get_current_principal
from hrms.auth.principal import Principal
from hrms.core.database import get_async_session
from hrms.schemas.hr.employee_rating_schema import EmployeeRatingCreate, EmployeeRatingResponse
from hrms.services.hr.employee_rating_service import EmployeeRatingService

router = APIRouter()

@router.get("", response_model=List[EmployeeRatingResponse])
async def get_employee_ratings(
    employee_id: Optional[int] = Query(None),
    period: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Employee ratings visible to the caller"""
    service = EmployeeRatingService(session)
    return await service.list_ratings(principal, employee_id=employee_id, period=period)

@router.post("", response_model=EmployeeRatingResponse)
async def submit_employee_rating(
    rating: EmployeeRatingCreate,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Rate an employee on all five criteria"""
    service = EmployeeRatingService(session)
    return await service.submit_rating(principal, rating)
