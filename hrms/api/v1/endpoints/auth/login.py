import logging
from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.api.dependencies import get_current_principal
from hrms.auth.principal import Principal
from hrms.core.config import settings
from hrms.core.database import get_async_session
from hrms.core.exceptions import Unauthorized
from hrms.schemas.auth.login_schema import LoginRequest, LoginResponse, PrincipalResponse
from hrms.services.auth.auth_service import AuthService

router = APIRouter()
logger = logging.getLogger(__name__)

def _principal_response(principal: Principal) -> PrincipalResponse:
    return PrincipalResponse(
        id=principal.id,
        email=principal.email,
        role=principal.role_name,
        category=principal.category.value if principal.category else None,
        department=principal.department,
        designation=principal.designation,
        manager_id=principal.manager_id,
    )

@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: LoginRequest,
    response: Response,
    session: AsyncSession = Depends(get_async_session)
):
    """Exchange email and password for an access token"""
    auth_service = AuthService(session)
    user = await auth_service.authenticate_user(credentials.email, credentials.password)
    if not user:
        raise Unauthorized("Invalid email or password")

    token = auth_service.create_token(user)
    response.set_cookie(
        key=settings.TOKEN_COOKIE,
        value=token["access_token"],
        max_age=token["expires_in"],
        httponly=True,
        samesite="lax",
        secure=settings.ENVIRONMENT == "production",
    )
    return {**token, "user": _principal_response(Principal.from_user(user))}

@router.post("/logout")
async def logout(response: Response):
    response.delete_cookie(settings.TOKEN_COOKIE)
    return {"success": True}

@router.get("/me", response_model=PrincipalResponse)
async def me(principal: Principal = Depends(get_current_principal)):
    """Current authenticated principal"""
    return _principal_response(principal)
