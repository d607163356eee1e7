import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.permissions import EMPLOYEE_RECORDS_POLICY, RolePolicy, enforce, require_policy
from hrms.auth.principal import Principal
from hrms.auth.roles import ADMIN_ROLES
from hrms.core.config import settings
from hrms.core.exceptions import ConflictError, NotFoundError, StorageError, ValidationError
from hrms.core.logging import log_user_action
from hrms.models.auth.user import User
from hrms.models.performance.kra import KRADefinition, KRAScore, KRASubmission
from hrms.models.shared.enums import KRAPeriodType, SubmissionStatus
from hrms.services.auth.user_service import UserService
from hrms.services.performance.formulas import round2
from hrms.services.performance.kra_scoring import WeightedRating, compute_kra_score
from hrms.services.performance.metric_store import STORE_ATTEMPTS, key_conditions

logger = logging.getLogger(__name__)

FULL_WEIGHT = Decimal("100")


def period_key(
    period_type: KRAPeriodType,
    period_month: Optional[int] = None,
    period_quarter: Optional[int] = None,
    period_year: Optional[int] = None,
    today: Optional[date] = None,
) -> Dict[str, Any]:
    """Natural period key of a submission; the unused part is always NULL"""
    try:
        period_type = KRAPeriodType(period_type)
    except ValueError:
        raise ValidationError(f"Invalid period_type: {period_type}")

    year = period_year or (today or date.today()).year
    if year < 1:
        raise ValidationError("period_year must be positive")

    if period_type == KRAPeriodType.MONTHLY:
        if period_month is None or not 1 <= period_month <= 12:
            raise ValidationError("period_month (1-12) is required for monthly period")
        return {"period_type": period_type, "period_month": period_month, "period_quarter": None, "period_year": year}

    if period_quarter is None or not 1 <= period_quarter <= 4:
        raise ValidationError("period_quarter (1-4) is required for quarterly period")
    return {"period_type": period_type, "period_month": None, "period_quarter": period_quarter, "period_year": year}


def _score_item(score: KRAScore, user_name: Optional[str]) -> Dict[str, Any]:
    return {
        "id": score.id,
        "user_id": score.user_id,
        "user_name": user_name,
        "period_type": score.period_type,
        "period_month": score.period_month,
        "period_quarter": score.period_quarter,
        "period_year": score.period_year,
        "total_score": float(score.total_score),
        "performance_category": score.performance_category,
        "updated_at": score.updated_at,
    }


class KRAService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_service = UserService(session)
        self.admin_policy = RolePolicy(allowed_roles=ADMIN_ROLES, name="KRA definitions")

    # region KRA Definitions
    async def list_definitions(
        self,
        user_id: Optional[int] = None,
        role: Optional[str] = None,
        active_only: bool = True,
    ) -> List[KRADefinition]:
        conditions = [KRADefinition.is_deleted == False]
        if active_only:
            conditions.append(KRADefinition.is_active == True)
        if user_id is not None:
            conditions.append(KRADefinition.user_id == user_id)
        if role:
            conditions.append(KRADefinition.role == role)

        try:
            result = await self.session.scalars(
                select(KRADefinition)
                .where(*conditions)
                .order_by(KRADefinition.user_id, KRADefinition.kra_number)
            )
            return list(result.all())
        except SQLAlchemyError as e:
            logger.error(f"Error listing KRA definitions: {str(e)}")
            raise StorageError()

    async def get_definition(self, kra_id: int) -> KRADefinition:
        try:
            result = await self.session.execute(
                select(KRADefinition).where(KRADefinition.id == kra_id, KRADefinition.is_deleted == False)
            )
            definition = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error getting KRA definition {kra_id}: {str(e)}")
            raise StorageError()
        if definition is None:
            raise NotFoundError(f"KRA definition {kra_id} not found")
        return definition

    async def _check_weight(self, user_id: int, weight, exclude_id: Optional[int] = None) -> None:
        """Active weights of one user may not exceed 100"""
        stmt = select(func.coalesce(func.sum(KRADefinition.weight_percentage), 0)).where(
            KRADefinition.user_id == user_id,
            KRADefinition.is_active == True,
            KRADefinition.is_deleted == False,
        )
        if exclude_id is not None:
            stmt = stmt.where(KRADefinition.id != exclude_id)
        try:
            current = await self.session.scalar(stmt)
        except SQLAlchemyError as e:
            logger.error(f"Error summing KRA weights of user {user_id}: {str(e)}")
            raise StorageError()

        total = Decimal(str(current or 0)) + Decimal(str(weight))
        if total > FULL_WEIGHT:
            raise ValidationError(
                f"KRA weights of user {user_id} would total {round2(total)}%, the maximum is 100%"
            )

    async def create_definition(self, principal: Principal, data) -> KRADefinition:
        require_policy(principal, self.admin_policy)
        if await self.user_service.get_user(data.user_id) is None:
            raise NotFoundError(f"User {data.user_id} not found")
        await self._check_weight(data.user_id, data.weight_percentage)

        try:
            existing = await self.session.execute(
                select(KRADefinition.id).where(
                    KRADefinition.user_id == data.user_id,
                    KRADefinition.kra_number == data.kra_number,
                )
            )
            if existing.first() is not None:
                raise ConflictError(f"KRA {data.kra_number} already exists for user {data.user_id}")

            definition = KRADefinition(**data.dict(), is_active=True)
            self.session.add(definition)
            await self.session.commit()
            await self.session.refresh(definition)
        except HTTPException:
            raise
        except IntegrityError:
            await self.session.rollback()
            raise ConflictError(f"KRA {data.kra_number} already exists for user {data.user_id}")
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating KRA definition: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "create", "KRA definition", definition.id)
        return definition

    async def update_definition(self, principal: Principal, kra_id: int, data) -> KRADefinition:
        require_policy(principal, self.admin_policy)
        definition = await self.get_definition(kra_id)
        update_data = data.dict(exclude_unset=True)

        becomes_active = update_data.get("is_active", definition.is_active)
        if becomes_active:
            weight = update_data.get("weight_percentage") or definition.weight_percentage
            await self._check_weight(definition.user_id, weight, exclude_id=definition.id)

        try:
            for field, value in update_data.items():
                setattr(definition, field, value)
            await self.session.commit()
            await self.session.refresh(definition)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error updating KRA definition {kra_id}: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "update", "KRA definition", kra_id)
        return definition

    async def deactivate_definition(self, principal: Principal, kra_id: int) -> bool:
        require_policy(principal, self.admin_policy)
        definition = await self.get_definition(kra_id)
        try:
            definition.is_active = False
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error deactivating KRA definition {kra_id}: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "deactivate", "KRA definition", kra_id)
        return True

    async def weight_report(self) -> List[Dict[str, Any]]:
        """Active weight total per user; complete means exactly 100"""
        stmt = (
            select(
                KRADefinition.user_id,
                User.name,
                func.count(KRADefinition.id),
                func.sum(KRADefinition.weight_percentage),
            )
            .join(User, User.id == KRADefinition.user_id)
            .where(KRADefinition.is_active == True, KRADefinition.is_deleted == False)
            .group_by(KRADefinition.user_id, User.name)
            .order_by(User.name)
        )
        try:
            result = await self.session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error building KRA weight report: {str(e)}")
            raise StorageError()

        report = []
        for user_id, user_name, kra_count, total in rows:
            total_weight = round2(total)
            report.append({
                "user_id": user_id,
                "user_name": user_name,
                "kra_count": kra_count,
                "total_weight": total_weight,
                "is_complete": total_weight == 100.0,
            })
        return report
    # endregion

    # region KRA Submissions
    async def _load_subject(self, principal: Principal, user_id: Optional[int]) -> User:
        subject_id = user_id if user_id is not None else principal.id
        subject = await self.user_service.get_user(subject_id)
        if subject is None:
            raise NotFoundError(f"User {subject_id} not found")
        enforce(EMPLOYEE_RECORDS_POLICY.check_subject(principal, subject), "Not allowed to access KRA records of this user")
        return subject

    async def _active_kras(self, user_id: int, kra_ids: List[int]) -> Dict[int, KRADefinition]:
        try:
            result = await self.session.scalars(
                select(KRADefinition).where(
                    KRADefinition.id.in_(kra_ids),
                    KRADefinition.user_id == user_id,
                    KRADefinition.is_active == True,
                    KRADefinition.is_deleted == False,
                )
            )
            return {kra.id: kra for kra in result.all()}
        except SQLAlchemyError as e:
            logger.error(f"Error loading KRAs of user {user_id}: {str(e)}")
            raise StorageError()

    async def _upsert_submission(self, user_id: int, key: Dict[str, Any], item, submitted_by: int) -> KRASubmission:
        submission_key = {"user_id": user_id, "kra_id": item.kra_id, **key}
        result = await self.session.execute(
            select(KRASubmission).where(*key_conditions(KRASubmission, submission_key))
        )
        submission = result.scalars().first()
        if submission is None:
            submission = KRASubmission(**submission_key)
            self.session.add(submission)
        submission.rating = item.rating
        submission.comments = item.comments
        submission.submitted_by = submitted_by
        submission.status = SubmissionStatus.SUBMITTED
        return submission

    async def _recompute_score(self, user_id: int, key: Dict[str, Any]) -> Optional[KRAScore]:
        """Rebuild the period score from every submitted rating; None when nothing is submitted"""
        submission_key = {"user_id": user_id, **key}
        result = await self.session.execute(
            select(KRASubmission.rating, KRADefinition.weight_percentage)
            .join(KRADefinition, KRADefinition.id == KRASubmission.kra_id)
            .where(
                *key_conditions(KRASubmission, submission_key),
                KRASubmission.status == SubmissionStatus.SUBMITTED,
            )
        )
        computed = compute_kra_score(
            WeightedRating(rating=rating, weight_percentage=weight) for rating, weight in result.all()
        )
        if computed is None:
            return None

        existing = await self.session.execute(
            select(KRAScore).where(*key_conditions(KRAScore, submission_key))
        )
        score = existing.scalars().first()
        if score is None:
            score = KRAScore(**submission_key)
            self.session.add(score)
        score.total_score = computed.total_score
        score.performance_category = computed.category
        await self.session.flush()
        return score

    async def submit(self, principal: Principal, request, today: Optional[date] = None) -> Dict[str, Any]:
        """
        Store a set of KRA ratings for one user and period, then rebuild the
        period score. Ratings and score commit together or not at all.
        """
        subject = await self._load_subject(principal, request.user_id)
        subject_id = subject.id
        key = period_key(
            request.period_type,
            request.period_month,
            request.period_quarter,
            request.period_year,
            today=today,
        )

        kra_ids = [item.kra_id for item in request.ratings]
        if len(set(kra_ids)) != len(kra_ids):
            raise ValidationError("Each KRA may be rated only once per submission")
        for item in request.ratings:
            if not 1 <= item.rating <= 5:
                raise ValidationError(f"Rating for KRA {item.kra_id} must be between 1 and 5")

        kras = await self._active_kras(subject.id, kra_ids)
        missing = [kra_id for kra_id in kra_ids if kra_id not in kras]
        if missing:
            raise NotFoundError(f"Active KRA(s) {missing} not found for user {subject.id}")

        subject_name = subject.name
        for attempt in range(1, STORE_ATTEMPTS + 1):
            try:
                for item in request.ratings:
                    await self._upsert_submission(subject_id, key, item, principal.id)
                await self.session.flush()
                score = await self._recompute_score(subject_id, key)
                await self.session.commit()
                if score is not None:
                    await self.session.refresh(score)
                break
            except HTTPException:
                await self.session.rollback()
                raise
            except IntegrityError as e:
                # A concurrent submission stored the same period first; the next attempt updates it
                await self.session.rollback()
                if attempt == STORE_ATTEMPTS:
                    logger.error(f"Error submitting KRA ratings for user {subject_id}: {str(e)}")
                    raise StorageError()
                logger.warning(f"KRA period of user {subject_id} written concurrently, retrying")
            except SQLAlchemyError as e:
                await self.session.rollback()
                logger.error(f"Error submitting KRA ratings for user {subject_id}: {str(e)}")
                raise StorageError()

        log_user_action(principal.id, "submit", "KRA ratings", subject_id)
        if score is not None:
            logger.info(
                f"KRA score for user {subject_id} ({key['period_type'].value} {key['period_year']}): "
                f"{score.total_score} {score.performance_category.value}"
            )
        return {
            "success": True,
            "user_id": subject_id,
            "submissions": [
                {"kra_id": item.kra_id, "rating": item.rating, "comments": item.comments}
                for item in request.ratings
            ],
            "score": _score_item(score, subject_name) if score is not None else None,
        }

    async def list_submissions(
        self,
        principal: Principal,
        user_id: Optional[int] = None,
        period_type: Optional[KRAPeriodType] = None,
        period_month: Optional[int] = None,
        period_quarter: Optional[int] = None,
        period_year: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        stmt = (
            select(KRASubmission, KRADefinition, User.name)
            .join(KRADefinition, KRADefinition.id == KRASubmission.kra_id)
            .join(User, User.id == KRASubmission.user_id)
        )
        if user_id is not None:
            await self._load_subject(principal, user_id)
            stmt = stmt.where(KRASubmission.user_id == user_id)
        else:
            stmt = EMPLOYEE_RECORDS_POLICY.filter(stmt, principal, KRASubmission, User)

        if period_type is not None:
            stmt = stmt.where(KRASubmission.period_type == period_type)
        if period_month is not None:
            stmt = stmt.where(KRASubmission.period_month == period_month)
        if period_quarter is not None:
            stmt = stmt.where(KRASubmission.period_quarter == period_quarter)
        if period_year is not None:
            stmt = stmt.where(KRASubmission.period_year == period_year)

        stmt = stmt.order_by(
            KRASubmission.period_year.desc(),
            KRASubmission.period_month.desc(),
            KRASubmission.period_quarter.desc(),
            User.name,
            KRADefinition.kra_number,
        )
        try:
            result = await self.session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing KRA submissions: {str(e)}")
            raise StorageError()

        return [
            {
                "id": submission.id,
                "user_id": submission.user_id,
                "user_name": user_name,
                "kra_id": submission.kra_id,
                "kra_number": kra.kra_number,
                "kra_name": kra.kra_name,
                "weight_percentage": float(kra.weight_percentage),
                "period_type": submission.period_type,
                "period_month": submission.period_month,
                "period_quarter": submission.period_quarter,
                "period_year": submission.period_year,
                "rating": submission.rating,
                "submitted_by": submission.submitted_by,
                "comments": submission.comments,
                "status": submission.status,
                "created_at": submission.created_at,
                "updated_at": submission.updated_at,
            }
            for submission, kra, user_name in rows
        ]
    # endregion

    # region KRA Scores
    async def list_scores(
        self,
        principal: Principal,
        user_id: Optional[int] = None,
        period_type: Optional[KRAPeriodType] = None,
        period_year: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        if limit is None:
            limit = settings.KRA_SCORE_LIMIT_DEFAULT
        limit = max(1, min(int(limit), settings.METRIC_QUERY_LIMIT_MAX))

        stmt = select(KRAScore, User.name).join(User, User.id == KRAScore.user_id)
        if user_id is not None:
            await self._load_subject(principal, user_id)
            stmt = stmt.where(KRAScore.user_id == user_id)
        else:
            stmt = EMPLOYEE_RECORDS_POLICY.filter(stmt, principal, KRAScore, User)

        if period_type is not None:
            stmt = stmt.where(KRAScore.period_type == period_type)
        if period_year is not None:
            stmt = stmt.where(KRAScore.period_year == period_year)

        stmt = stmt.order_by(
            User.name,
            KRAScore.period_year.desc(),
            KRAScore.period_month.desc(),
            KRAScore.period_quarter.desc(),
        ).limit(limit)
        try:
            result = await self.session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error listing KRA scores: {str(e)}")
            raise StorageError()

        return [_score_item(score, user_name) for score, user_name in rows]
    # endregion
