import calendar
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional, Union
from hrms.core.exceptions import ValidationError
from hrms.models.shared.enums import PeriodType


@dataclass(frozen=True)
class Period:
    start: date
    end: date
    type: PeriodType

    @property
    def start_at(self) -> datetime:
        """First instant of the period (UTC)"""
        return datetime.combine(self.start, time.min, tzinfo=timezone.utc)

    @property
    def end_before(self) -> datetime:
        """First instant after the period, so the whole end day is included"""
        return datetime.combine(self.end + timedelta(days=1), time.min, tzinfo=timezone.utc)

    def as_dict(self) -> dict:
        return {"type": self.type.value, "start": self.start, "end": self.end}


def week_start(day: date) -> date:
    """ISO Monday of the week containing day; Sunday belongs to the preceding Monday"""
    return day - timedelta(days=(day.isoweekday() + 6) % 7)


def _coerce_date(value: Union[str, date, None], field_name: str) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: expected YYYY-MM-DD")


def resolve_period(
    period_type: Union[str, PeriodType] = PeriodType.DAILY,
    start: Union[str, date, None] = None,
    end: Union[str, date, None] = None,
    today: Optional[date] = None,
) -> Period:
    """
    Period boundaries for a metric calculation.

    Explicit start and end win. Otherwise: daily is today only, weekly is
    Monday..Sunday of the current ISO week, monthly is the calendar month.
    """
    try:
        period_type = PeriodType(period_type)
    except ValueError:
        raise ValidationError(f"Invalid period_type: {period_type}")

    start_date = _coerce_date(start, "period_start")
    end_date = _coerce_date(end, "period_end")

    if start_date and end_date:
        if start_date > end_date:
            raise ValidationError("period_start must be on or before period_end")
        return Period(start=start_date, end=end_date, type=period_type)

    today = today or date.today()

    if period_type == PeriodType.DAILY:
        return Period(start=today, end=today, type=period_type)

    if period_type == PeriodType.WEEKLY:
        monday = week_start(today)
        return Period(start=monday, end=monday + timedelta(days=6), type=period_type)

    last_day = calendar.monthrange(today.year, today.month)[1]
    return Period(
        start=today.replace(day=1),
        end=today.replace(day=last_day),
        type=period_type,
    )
