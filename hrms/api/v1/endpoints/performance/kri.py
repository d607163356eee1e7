from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.dependencies import get_current_principal
from hrms.auth.principal import Principal
from hrms.core.database import get_async_session
from hrms.models.shared.enums import PeriodType, RiskLevel
from hrms.schemas.performance.kri_schema import (
    KRICalculationResponse,
    KRIDefinitionCreate,
    KRIDefinitionResponse,
    KRIDefinitionUpdate,
    KRIMetricResponse,
)
from hrms.schemas.performance.metric_schema import CalculationRequest, KRIMetricQuery
from hrms.services.performance.kri_service import KRIService

router = APIRouter()

@router.get("/definitions", response_model=List[KRIDefinitionResponse])
async def get_kri_definitions(
    active_only: bool = Query(True),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """List KRI definitions"""
    service = KRIService(session)
    return await service.list_definitions(active_only=active_only)

@router.post("/definitions", response_model=KRIDefinitionResponse)
async def create_kri_definition(
    definition: KRIDefinitionCreate,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KRIService(session)
    return await service.create_definition(principal, definition)

@router.put("/definitions/{definition_id}", response_model=KRIDefinitionResponse)
async def update_kri_definition(
    definition_id: int,
    definition: KRIDefinitionUpdate,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KRIService(session)
    return await service.update_definition(principal, definition_id, definition)

@router.delete("/definitions/{definition_id}")
async def deactivate_kri_definition(
    definition_id: int,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KRIService(session)
    result = await service.deactivate_definition(principal, definition_id)
    return {"message": "KRI definition deactivated", "success": result}

@router.post("/calculate", response_model=KRICalculationResponse)
async def calculate_kris(
    request: CalculationRequest,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Calculate and store KRI metrics for a user, a department or the organisation"""
    service = KRIService(session)
    return await service.calculate(principal, request)

@router.get("/metrics", response_model=List[KRIMetricResponse])
async def get_kri_metrics(
    user_id: Optional[int] = Query(None),
    department: Optional[str] = Query(None),
    kri_id: Optional[int] = Query(None),
    period_type: Optional[PeriodType] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    risk_level: Optional[RiskLevel] = Query(None),
    limit: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Stored KRI metrics, newest period first"""
    service = KRIService(session)
    query = KRIMetricQuery(
        user_id=user_id,
        department=department,
        definition_id=kri_id,
        period_type=period_type,
        start_date=start_date,
        end_date=end_date,
        risk_level=risk_level,
        limit=limit,
    )
    return await service.list_metrics(principal, query)
