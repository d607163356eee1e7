"""
Shared definition CRUD, calculation run and metric listing for KPIs and KRIs.

Subclasses bind the definition/metric models and say how one definition is
evaluated and stored.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.permissions import RolePolicy, require_policy
from hrms.auth.principal import Principal
from hrms.auth.roles import ADMIN_ROLES, CALCULATION_ROLES, METRIC_VIEWER_ROLES, has_permission
from hrms.core.config import settings
from hrms.core.exceptions import ConflictError, Forbidden, NotFoundError, StorageError
from hrms.core.logging import log_user_action
from hrms.models.auth.user import User
from hrms.services.performance.aggregates import MetricAggregates, MetricScope
from hrms.services.performance.metric_store import STORE_ATTEMPTS, upsert_metric
from hrms.services.performance.periods import Period, resolve_period

logger = logging.getLogger(__name__)


def clamp_limit(limit: Optional[int]) -> int:
    if limit is None:
        return settings.METRIC_QUERY_LIMIT_DEFAULT
    return max(1, min(int(limit), settings.METRIC_QUERY_LIMIT_MAX))


class MetricService:
    kind = "metric"
    definition_model = None
    metric_model = None
    definition_fk = None

    def __init__(self, session: AsyncSession):
        self.session = session
        self.admin_policy = RolePolicy(allowed_roles=ADMIN_ROLES, name=f"{self.kind} definitions")
        self.calculation_policy = RolePolicy(allowed_roles=CALCULATION_ROLES, name=f"{self.kind} calculation")

    # region Hooks
    def parse_formula(self, raw):
        raise NotImplementedError

    async def evaluate(self, definition, aggregates: MetricAggregates) -> Dict[str, Any]:
        """Column values of the metric row for one definition"""
        raise NotImplementedError

    def result_item(self, definition, row) -> Dict[str, Any]:
        raise NotImplementedError

    def metric_item(self, row, definition, user_name: Optional[str]) -> Dict[str, Any]:
        raise NotImplementedError

    def extra_filters(self, query) -> list:
        return []
    # endregion

    # region Definitions
    async def list_definitions(self, active_only: bool = True) -> List[Any]:
        model = self.definition_model
        stmt = select(model).where(model.is_deleted == False)
        if active_only:
            stmt = stmt.where(model.is_active == True)
        try:
            result = await self.session.scalars(stmt.order_by(model.code))
            return list(result.all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing {self.kind} definitions: {str(e)}")
            raise StorageError()

    async def get_definition(self, definition_id: int):
        model = self.definition_model
        try:
            result = await self.session.execute(
                select(model).where(model.id == definition_id, model.is_deleted == False)
            )
            definition = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting {self.kind} definition {definition_id}: {str(e)}")
            raise StorageError()
        if definition is None:
            raise NotFoundError(f"{self.kind} definition {definition_id} not found")
        return definition

    async def create_definition(self, principal: Principal, data):
        require_policy(principal, self.admin_policy)
        payload = data.dict()
        self.parse_formula(payload["calculation_formula"])

        model = self.definition_model
        try:
            existing = await self.session.execute(select(model.id).where(model.code == payload["code"]))
            if existing.first() is not None:
                raise ConflictError(f"{self.kind} definition with code {payload['code']} already exists")

            definition = model(**payload, is_active=True)
            self.session.add(definition)
            await self.session.commit()
            await self.session.refresh(definition)
        except HTTPException:
            raise
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError(f"{self.kind} definition with code {payload['code']} already exists")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating {self.kind} definition: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "create", f"{self.kind} definition", definition.id)
        return definition

    async def update_definition(self, principal: Principal, definition_id: int, data):
        require_policy(principal, self.admin_policy)
        definition = await self.get_definition(definition_id)

        update_data = data.dict(exclude_unset=True)
        if update_data.get("calculation_formula") is not None:
            self.parse_formula(update_data["calculation_formula"])

        try:
            for field, value in update_data.items():
                setattr(definition, field, value)
            await self.session.commit()
            await self.session.refresh(definition)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error updating {self.kind} definition {definition_id}: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "update", f"{self.kind} definition", definition_id)
        return definition

    async def deactivate_definition(self, principal: Principal, definition_id: int) -> bool:
        """Soft switch-off; stored metrics stay queryable"""
        require_policy(principal, self.admin_policy)
        definition = await self.get_definition(definition_id)
        try:
            definition.is_active = False
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error deactivating {self.kind} definition {definition_id}: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "deactivate", f"{self.kind} definition", definition_id)
        return True
    # endregion

    # region Calculation
    async def _definitions_for(self, definition_id: Optional[int]) -> List[Any]:
        if definition_id is not None:
            definition = await self.get_definition(definition_id)
            if not definition.is_active:
                raise NotFoundError(f"{self.kind} definition {definition_id} is not active")
            return [definition]
        definitions = await self.list_definitions(active_only=True)
        if not definitions:
            raise NotFoundError(f"No active {self.kind} definitions")
        return definitions

    async def calculate(self, principal: Principal, request, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Compute and store metrics for the requested scope and period.

        Every upsert of a run commits together; any failure leaves the
        stored metrics untouched.
        """
        require_policy(principal, self.calculation_policy)

        period = resolve_period(request.period_type, request.period_start, request.period_end, today=today)
        scope = MetricScope(user_id=request.user_id, department=request.department)
        aggregates = MetricAggregates(self.session, scope, period, today=today)

        for attempt in range(1, STORE_ATTEMPTS + 1):
            # Rollback expires loaded definitions, so every attempt reloads them
            definitions = await self._definitions_for(request.definition_id)
            results = []
            try:
                for definition in definitions:
                    values = await self.evaluate(definition, aggregates)
                    row = await self._store(definition, scope, period, values)
                    results.append(self.result_item(definition, row))
                await self.session.commit()
                break
            except HTTPException:
                await self.session.rollback()
                raise
            except IntegrityError as e:
                # A concurrent run inserted one of our keys first; the next attempt updates it
                await self.session.rollback()
                if attempt == STORE_ATTEMPTS:
                    logger.error(f"Error storing {self.kind} metrics for {scope.label}: {str(e)}")
                    raise StorageError()
                logger.warning(f"{self.kind} metric key taken concurrently for {scope.label}, retrying")
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error(f"Error storing {self.kind} metrics for {scope.label}: {str(e)}")
                raise StorageError()

        logger.info(
            f"{self.kind} calculation by user {principal.id}: {len(results)} metric(s) "
            f"for {scope.label}, {period.type.value} {period.start}..{period.end}"
        )
        return {"success": True, "metrics": results, "period": period.as_dict()}

    async def _store(self, definition, scope: MetricScope, period: Period, values: Dict[str, Any]):
        key = {
            self.definition_fk: definition.id,
            "user_id": scope.user_id,
            "department": scope.department,
            "period_type": period.type,
            "period_start": period.start,
            "period_end": period.end,
        }
        return await upsert_metric(self.session, self.metric_model, key, values)
    # endregion

    # region Listing
    async def list_metrics(self, principal: Principal, query) -> List[Dict[str, Any]]:
        """
        Stored metrics, newest period first.

        Metric viewers may ask for any user or department; everyone else only
        ever sees rows about themselves.
        """
        user_id = query.user_id
        department = query.department
        if not has_permission(principal.role, METRIC_VIEWER_ROLES):
            if user_id is not None and user_id != principal.id:
                logger.warning(f"Access denied: user {principal.id} asked for {self.kind} metrics of user {user_id}")
                raise Forbidden(f"Not allowed to view {self.kind} metrics of other users")
            user_id = principal.id
            department = None

        metric = self.metric_model
        definition = self.definition_model
        stmt = (
            select(metric, definition, User.name)
            .join(definition, getattr(metric, self.definition_fk) == definition.id)
            .outerjoin(User, User.id == metric.user_id)
        )
        conditions = []
        if user_id is not None:
            conditions.append(metric.user_id == user_id)
        if department:
            conditions.append(metric.department == department)
        if query.definition_id is not None:
            conditions.append(getattr(metric, self.definition_fk) == query.definition_id)
        if query.period_type is not None:
            conditions.append(metric.period_type == query.period_type)
        if query.start_date is not None:
            conditions.append(metric.period_start >= query.start_date)
        if query.end_date is not None:
            conditions.append(metric.period_end <= query.end_date)
        conditions.extend(self.extra_filters(query))

        stmt = (
            stmt.where(*conditions)
            .order_by(metric.period_start.desc(), metric.calculated_at.desc(), metric.id.desc())
            .limit(clamp_limit(query.limit))
        )
        try:
            result = await self.session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing {self.kind} metrics: {str(e)}")
            raise StorageError()

        return [self.metric_item(row, defn, user_name) for row, defn, user_name in rows]
    # endregion
