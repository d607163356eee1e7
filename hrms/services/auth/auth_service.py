import logging
from typing import Optional, Dict, Any
from datetime import datetime, timedelta, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from hrms.core.config import settings
from hrms.core.exceptions import StorageError
from hrms.core.logging import log_user_action
from hrms.core.security import verify_password, create_access_token
from hrms.models.auth.user import User
from hrms.services.auth.user_service import UserService

logger = logging.getLogger(__name__)

class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_service = UserService(session)

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """Authenticate user with email and password"""
        user = await self.user_service.get_user_by_email(email)
        if not user:
            logger.info(f"Failed login for {email}: user not found")
            return None

        if not verify_password(password, user.hashed_password):
            logger.info(f"Failed login for {email}: wrong password")
            return None

        try:
            user.last_login = datetime.now(timezone.utc)
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error recording login for {email}: {str(e)}")
            raise StorageError()

        log_user_action(user.id, "login", "auth")
        return user

    def create_token(self, user: User) -> Dict[str, Any]:
        """Create access token for user"""
        expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        access_token = create_access_token(
            data={
                "sub": str(user.id),
                "email": user.email,
                "role": user.role,
            },
            expires_delta=expires,
        )
        return {
            "access_token": access_token,
            "token_type": "bearer",
            "expires_in": int(expires.total_seconds()),
        }
