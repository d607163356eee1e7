from typing import Optional
from datetime import date
from pydantic import BaseModel, validator
from hrms.models.shared.enums import PeriodType, RiskLevel

class CalculationRequest(BaseModel):
    """Shared body of the KPI and KRI calculate endpoints"""
    definition_id: Optional[int] = None
    user_id: Optional[int] = None
    department: Optional[str] = None
    period_type: PeriodType = PeriodType.DAILY
    period_start: Optional[date] = None
    period_end: Optional[date] = None

    @validator("department")
    def blank_department_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

class PeriodInfo(BaseModel):
    type: PeriodType
    start: date
    end: date

class MetricQuery(BaseModel):
    user_id: Optional[int] = None
    department: Optional[str] = None
    definition_id: Optional[int] = None
    period_type: Optional[PeriodType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    limit: Optional[int] = None

class KRIMetricQuery(MetricQuery):
    risk_level: Optional[RiskLevel] = None
