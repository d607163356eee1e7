from typing import Any, Dict, List, Optional
from datetime import date, datetime
from pydantic import BaseModel, validator
from hrms.models.shared.enums import KRICalculationType, PeriodType, RiskLevel
from hrms.schemas.performance.metric_schema import PeriodInfo

def _check_kri_formula(v):
    if v is None:
        return v
    if not isinstance(v, dict) or "type" not in v:
        raise ValueError("calculation_formula must be an object with a 'type'")
    try:
        KRICalculationType(v["type"])
    except ValueError:
        raise ValueError(f"Unknown KRI calculation type: {v['type']}")
    return v

class KRIDefinitionBase(BaseModel):
    code: str
    name: str
    description: Optional[str] = None
    metric_type: str = "count"
    calculation_formula: Dict[str, Any]
    threshold_warning: Optional[float] = None
    threshold_critical: Optional[float] = None

    @validator("calculation_formula")
    def validate_formula(cls, v):
        return _check_kri_formula(v)

class KRIDefinitionCreate(KRIDefinitionBase):
    pass

class KRIDefinitionUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    metric_type: Optional[str] = None
    calculation_formula: Optional[Dict[str, Any]] = None
    threshold_warning: Optional[float] = None
    threshold_critical: Optional[float] = None
    is_active: Optional[bool] = None

    @validator("calculation_formula")
    def validate_formula(cls, v):
        return _check_kri_formula(v)

class KRIDefinitionResponse(KRIDefinitionBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class KRICalculatedMetric(BaseModel):
    kri_id: int
    kri_code: str
    kri_name: str
    calculated_value: float
    risk_level: RiskLevel
    threshold_warning: Optional[float] = None
    threshold_critical: Optional[float] = None

class KRICalculationResponse(BaseModel):
    success: bool = True
    metrics: List[KRICalculatedMetric]
    period: PeriodInfo

class KRIMetricResponse(BaseModel):
    id: int
    kri_id: int
    kri_code: Optional[str] = None
    kri_name: Optional[str] = None
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    department: Optional[str] = None
    period_type: PeriodType
    period_start: date
    period_end: date
    calculated_value: float
    risk_level: RiskLevel
    threshold_warning: Optional[float] = None
    threshold_critical: Optional[float] = None
    calculated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
