from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.dependencies import get_current_principal
from hrms.auth.principal import Principal
from hrms.core.database import get_async_session
from hrms.schemas.auth.menu_permission_schema import MenuPermissionCheck, MenuPermissionMatrix, MenuPermissionUpdate
from hrms.services.auth.menu_permission_service import MenuPermissionService

router = APIRouter()

@router.get("", response_model=MenuPermissionMatrix)
async def get_menu_permissions(
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Effective menu visibility for every role"""
    service = MenuPermissionService(session)
    return await service.get_matrix(principal)

@router.post("")
async def replace_menu_permissions(
    body: MenuPermissionUpdate,
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Replace all stored menu overrides"""
    service = MenuPermissionService(session)
    return await service.replace(principal, body.permissions)

@router.get("/check", response_model=MenuPermissionCheck)
async def check_menu_permissions(
    role: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_async_session),
    principal: Principal = Depends(get_current_principal)
):
    """Menu visibility for one role, the caller's own by default"""
    service = MenuPermissionService(session)
    return await service.check(principal, role)
