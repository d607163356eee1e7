import logging
from datetime import date
from typing import Any, Dict, List, Optional
from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.permissions import EMPLOYEE_RECORDS_POLICY, RolePolicy, enforce, require_policy
from hrms.auth.principal import Principal
from hrms.auth.roles import ADMIN_ROLES, parse_role
from hrms.core.exceptions import NotFoundError, StorageError, ValidationError
from hrms.core.logging import log_user_action
from hrms.models.auth.user import User
from hrms.models.hr.work_log import WorkLog, WorkLogField
from hrms.schemas.hr.work_log_schema import WorkLogFieldUpsert, WorkLogSave
from hrms.services.auth.user_service import UserService
from hrms.services.worklog.field_validation import validate_field_data

logger = logging.getLogger(__name__)

FIELD_ADMIN_POLICY = RolePolicy(allowed_roles=ADMIN_ROLES, name="work log fields")
WORK_LOG_LIST_LIMIT = 500

def _log_item(log: WorkLog, user_name: Optional[str]) -> Dict[str, Any]:
    return {
        "id": log.id,
        "user_id": log.user_id,
        "user_name": user_name,
        "log_date": log.log_date,
        "role": log.role,
        "field_data": log.field_data or {},
        "notes": log.notes,
        "created_at": log.created_at,
        "updated_at": log.updated_at,
    }

class WorkLogService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_service = UserService(session)

    # region Field Definitions
    async def list_fields(self, role: Optional[str] = None, active_only: bool = True) -> List[WorkLogField]:
        conditions = [WorkLogField.is_deleted == False]
        if active_only:
            conditions.append(WorkLogField.is_active == True)
        if role:
            conditions.append(WorkLogField.role == role)

        try:
            result = await self.session.scalars(
                select(WorkLogField)
                .where(*conditions)
                .order_by(WorkLogField.role, WorkLogField.display_order, WorkLogField.id)
            )
            return list(result.all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing work log fields: {str(e)}")
            raise StorageError()

    async def upsert_field(self, principal: Principal, data: WorkLogFieldUpsert) -> WorkLogField:
        """Create the field for (role, field_key) or overwrite the existing one"""
        require_policy(principal, FIELD_ADMIN_POLICY)
        role = parse_role(data.role)
        if role is None:
            raise ValidationError(f"Unknown role: {data.role}")

        payload = data.dict()
        payload["role"] = role.value
        try:
            result = await self.session.execute(
                select(WorkLogField).where(
                    WorkLogField.role == role.value,
                    WorkLogField.field_key == data.field_key,
                )
            )
            field = result.scalar_one_or_none()
            if field is None:
                field = WorkLogField(**payload)
                self.session.add(field)
            else:
                for name, value in payload.items():
                    setattr(field, name, value)
                field.is_deleted = False
            await self.session.commit()
            await self.session.refresh(field)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error saving work log field {data.field_key}: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "upsert", "work log field", field.id)
        return field

    async def deactivate_field(self, principal: Principal, field_id: int) -> bool:
        require_policy(principal, FIELD_ADMIN_POLICY)
        try:
            result = await self.session.execute(
                select(WorkLogField).where(WorkLogField.id == field_id, WorkLogField.is_deleted == False)
            )
            field = result.scalar_one_or_none()
            if field is None:
                raise NotFoundError(f"Work log field {field_id} not found")
            field.is_active = False
            await self.session.commit()
        except HTTPException:
            raise
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error deactivating work log field {field_id}: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "deactivate", "work log field", field_id)
        return True
    # endregion

    # region Work Logs
    async def _load_subject(self, principal: Principal, user_id: Optional[int]) -> User:
        subject_id = user_id if user_id is not None else principal.id
        subject = await self.user_service.get_user(subject_id)
        if subject is None:
            raise NotFoundError(f"User {subject_id} not found")
        enforce(EMPLOYEE_RECORDS_POLICY.check_subject(principal, subject), "Not allowed to access work logs of this user")
        return subject

    async def save_log(self, principal: Principal, data: WorkLogSave) -> Dict[str, Any]:
        """Create or update the one log of a user for a date"""
        subject = await self._load_subject(principal, data.user_id)
        subject_id = subject.id
        fields = await self.list_fields(role=subject.role)
        field_data = validate_field_data(fields, data.field_data)

        try:
            result = await self.session.execute(
                select(WorkLog).where(WorkLog.user_id == subject.id, WorkLog.log_date == data.log_date)
            )
            log = result.scalar_one_or_none()
            created = log is None
            if created:
                log = WorkLog(user_id=subject.id, log_date=data.log_date)
                self.session.add(log)
            log.role = subject.role
            log.field_data = field_data
            log.notes = data.notes
            await self.session.commit()
            await self.session.refresh(log)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error saving work log of user {subject_id} for {data.log_date}: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "create" if created else "update", "work log", log.id)
        return {"created": created, "log": _log_item(log, subject.name)}

    async def list_logs(
        self,
        principal: Principal,
        user_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        role: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        stmt = select(WorkLog, User.name).join(User, User.id == WorkLog.user_id)
        if user_id is not None:
            await self._load_subject(principal, user_id)
            stmt = stmt.where(WorkLog.user_id == user_id)
        else:
            stmt = EMPLOYEE_RECORDS_POLICY.filter(stmt, principal, WorkLog, User)

        if start_date:
            stmt = stmt.where(WorkLog.log_date >= start_date)
        if end_date:
            stmt = stmt.where(WorkLog.log_date <= end_date)
        if role:
            stmt = stmt.where(WorkLog.role == role)

        stmt = stmt.order_by(WorkLog.log_date.desc(), WorkLog.id.desc()).limit(WORK_LOG_LIST_LIMIT)
        try:
            result = await self.session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing work logs: {str(e)}")
            raise StorageError()

        return [_log_item(log, user_name) for log, user_name in rows]
    # endregion
