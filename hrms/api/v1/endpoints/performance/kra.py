from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.dependencies import get_current_principal, require_roles
from hrms.auth.principal import Principal
from hrms.auth.roles import FULL_ACCESS_ROLES
from hrms.core.database import get_async_session
from hrms.models.shared.enums import KRAPeriodType
from hrms.schemas.performance.kra_schema import (
    KRADefinitionCreate,
    KRADefinitionResponse,
    KRADefinitionUpdate,
    KRAScoreResponse,
    KRASubmissionResponse,
    KRASubmitRequest,
    KRASubmitResponse,
    KRAWeightSummary,
)
from hrms.services.performance.kra_service import KRAService

router = APIRouter()

# region KRA Definitions
@router.get("/definitions", response_model=List[KRADefinitionResponse])
async def get_kra_definitions(
    user_id: Optional[int] = Query(None),
    role: Optional[str] = Query(None),
    active_only: bool = Query(True),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """List KRA definitions"""
    service = KRAService(session)
    return await service.list_definitions(user_id=user_id, role=role, active_only=active_only)

@router.get("/definitions/weights", response_model=List[KRAWeightSummary])
async def get_kra_weights(
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(require_roles(*FULL_ACCESS_ROLES, name="KRA weight report"))
):
    """Active KRA weight total per user"""
    service = KRAService(session)
    return await service.weight_report()

@router.post("/definitions", response_model=KRADefinitionResponse)
async def create_kra_definition(
    definition: KRADefinitionCreate,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KRAService(session)
    return await service.create_definition(principal, definition)

@router.put("/definitions/{kra_id}", response_model=KRADefinitionResponse)
async def update_kra_definition(
    kra_id: int,
    definition: KRADefinitionUpdate,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KRAService(session)
    return await service.update_definition(principal, kra_id, definition)

@router.delete("/definitions/{kra_id}")
async def deactivate_kra_definition(
    kra_id: int,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KRAService(session)
    result = await service.deactivate_definition(principal, kra_id)
    return {"message": "KRA definition deactivated", "success": result}
# endregion

# region KRA Submissions
@router.get("/submissions", response_model=List[KRASubmissionResponse])
async def get_kra_submissions(
    user_id: Optional[int] = Query(None),
    period_type: Optional[KRAPeriodType] = Query(None),
    period_month: Optional[int] = Query(None, ge=1, le=12),
    period_quarter: Optional[int] = Query(None, ge=1, le=4),
    period_year: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KRAService(session)
    return await service.list_submissions(
        principal,
        user_id=user_id,
        period_type=period_type,
        period_month=period_month,
        period_quarter=period_quarter,
        period_year=period_year,
    )

@router.post("/submissions", response_model=KRASubmitResponse)
async def submit_kra_ratings(
    request: KRASubmitRequest,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Rate KRAs of a user for a period and rebuild the period score"""
    service = KRAService(session)
    return await service.submit(principal, request)
# endregion

@router.get("/scores", response_model=List[KRAScoreResponse])
async def get_kra_scores(
    user_id: Optional[int] = Query(None),
    period_type: Optional[KRAPeriodType] = Query(None),
    period_year: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    service = KRAService(session)
    return await service.list_scores(
        principal,
        user_id=user_id,
        period_type=period_type,
        period_year=period_year,
        limit=limit,
    )
