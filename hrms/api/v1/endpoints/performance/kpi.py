from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.dependencies import get_current_principal
from hrms.auth.principal import Principal
from hrms.core.database import get_async_session
from hrms.models.shared.enums import PeriodType
from hrms.schemas.performance.kpi_schema import (
    KPICalculationResponse,
    KPIDefinitionCreate,
    KPIDefinitionResponse,
    KPIDefinitionUpdate,
    KPIMetricResponse,
)
from hrms.schemas.performance.metric_schema import CalculationRequest, MetricQuery
from hrms.services.performance.kpi_service import KPIService

router = APIRouter()

@router.get("/definitions", response_model=List[KPIDefinitionResponse])
async def get_kpi_definitions(
    active_only: bool = Query(True),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """List KPI definitions"""
    service = KPIService(session)
    return await service.list_definitions(active_only=active_only)

@router.post("/definitions", response_model=KPIDefinitionResponse)
async def create_kpi_definition(
    definition: KPIDefinitionCreate,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KPIService(session)
    return await service.create_definition(principal, definition)

@router.put("/definitions/{definition_id}", response_model=KPIDefinitionResponse)
async def update_kpi_definition(
    definition_id: int,
    definition: KPIDefinitionUpdate,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KPIService(session)
    return await service.update_definition(principal, definition_id, definition)

@router.delete("/definitions/{definition_id}")
async def deactivate_kpi_definition(
    definition_id: int,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KPIService(session)
    result = await service.deactivate_definition(principal, definition_id)
    return {"message": "KPI definition deactivated", "success": result}

@router.post("/calculate", response_model=KPICalculationResponse)
async def calculate_kpis(
    request: CalculationRequest,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Calculate and store KPI metrics for a user, a department or the organisation"""
    service = KPIService(session)
    return await service.calculate(principal, request)

@router.get("/metrics", response_model=List[KPIMetricResponse])
async def get_kpi_metrics(
    user_id: Optional[int] = Query(None),
    department: Optional[str] = Query(None),
    kpi_id: Optional[int] = Query(None),
    period_type: Optional[PeriodType] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    limit: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Stored KPI metrics, newest period first"""
    service = KPIService(session)
    query = MetricQuery(
        user_id=user_id,
        department=department,
        definition_id=kpi_id,
        period_type=period_type,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
    )
    return await service.list_metrics(principal, query)
