from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from hrms.core.config import settings
from hrms.core.database import get_async_session
from hrms.core.exceptions import Unauthorized
from hrms.auth.jwt_handler import decode_access_token
from hrms.auth.permissions import RolePolicy, require_policy
from hrms.auth.principal import Principal
from hrms.services.auth.user_service import UserService
import logging

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)

def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    # Authorization header first, cookie as fallback
    if credentials and credentials.credentials:
        return credentials.credentials.strip()
    return request.cookies.get(settings.TOKEN_COOKIE)

async def get_current_principal(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    session: AsyncSession = Depends(get_async_session)
) -> Principal:
    """Resolve the authenticated principal for this request"""
    payload = decode_access_token(_extract_token(request, credentials))
    if payload is None:
        raise Unauthorized("Invalid authentication credentials")

    user_service = UserService(session)
    user = await user_service.get_user(int(payload["sub"]))
    if user is None:
        raise Unauthorized("User not found or inactive")

    principal = Principal.from_user(user)
    request.state.principal = principal
    return principal

def require_roles(*roles, name: str = "operation"):
    """
    Dependency to require one of the given roles for an endpoint

    Examples:
        require_roles(Role.ADMIN, Role.HR)
    """
    policy = RolePolicy(allowed_roles=frozenset(roles), name=name)

    async def role_dependency(
        principal: Principal = Depends(get_current_principal)
    ) -> Principal:
        require_policy(principal, policy)
        return principal

    return role_dependency
