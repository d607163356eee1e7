import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy import select
from hrms.core.exceptions import StorageError
from hrms.models.auth.user import User

logger = logging.getLogger(__name__)

class UserService:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_user(self, user_id: int) -> Optional[User]:
        """Get active user by ID"""
        try:
            result = await self.session.execute(
                select(User).where(
                    User.id == user_id,
                    User.is_active == True,
                    User.is_deleted == False
                )
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting user {user_id}: {str(e)}")
            raise StorageError()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get active user by email"""
        try:
            result = await self.session.execute(
                select(User).where(
                    User.email == email,
                    User.is_active == True,
                    User.is_deleted == False
                )
            )
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting user by email: {str(e)}")
            raise StorageError()
