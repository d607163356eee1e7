from typing import Any, Dict, List, Optional
from datetime import date, datetime
from pydantic import BaseModel, validator
from hrms.models.shared.enums import KPICalculationType, KPIStatus, PeriodType
from hrms.schemas.performance.metric_schema import PeriodInfo

def _check_kpi_formula(v):
    if v is None:
        return v
    if not isinstance(v, dict) or "type" not in v:
        raise ValueError("calculation_formula must be an object with a 'type'")
    try:
        KPICalculationType(v["type"])
    except ValueError:
        raise ValueError(f"Unknown KPI calculation type: {v['type']}")
    return v

class KPIDefinitionBase(BaseModel):
    code: str
    name: str
    description: Optional[str] = None
    metric_type: str = "percentage"
    calculation_formula: Dict[str, Any]
    target_value: Optional[float] = None

    @validator("calculation_formula")
    def validate_formula(cls, v):
        return _check_kpi_formula(v)

class KPIDefinitionCreate(KPIDefinitionBase):
    pass

class KPIDefinitionUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    metric_type: Optional[str] = None
    calculation_formula: Optional[Dict[str, Any]] = None
    target_value: Optional[float] = None
    is_active: Optional[bool] = None

    @validator("calculation_formula")
    def validate_formula(cls, v):
        return _check_kpi_formula(v)

class KPIDefinitionResponse(KPIDefinitionBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class KPICalculatedMetric(BaseModel):
    kpi_id: int
    kpi_code: str
    kpi_name: str
    calculated_value: float
    target_value: Optional[float] = None
    status: KPIStatus

class KPICalculationResponse(BaseModel):
    success: bool = True
    metrics: List[KPICalculatedMetric]
    period: PeriodInfo

class KPIMetricResponse(BaseModel):
    id: int
    kpi_id: int
    kpi_code: Optional[str] = None
    kpi_name: Optional[str] = None
    user_id: Optional[int] = None
    user_name: Optional[str] = None
    department: Optional[str] = None
    period_type: PeriodType
    period_start: date
    period_end: date
    calculated_value: float
    target_value: Optional[float] = None
    status: KPIStatus
    calculated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
