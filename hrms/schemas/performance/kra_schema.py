from typing import Dict, List, Optional
from datetime import datetime
from pydantic import BaseModel, validator
from hrms.models.shared.enums import KRAPeriodType, PerformanceCategory, SubmissionStatus

RATING_KEYS = {"1", "2", "3", "4", "5"}

def _check_rating_labels(v):
    if v is None:
        return v
    normalized = {str(k): str(label) for k, label in v.items()}
    unknown = set(normalized) - RATING_KEYS
    if unknown:
        raise ValueError(f"rating_labels keys must be 1-5, got {sorted(unknown)}")
    return normalized

def _check_weight(v):
    if v is not None and (v <= 0 or v > 100):
        raise ValueError("weight_percentage must be greater than 0 and at most 100")
    return v

# KRA Definition schemas
class KRADefinitionBase(BaseModel):
    user_id: int
    role: Optional[str] = None
    kra_number: int
    kra_name: str
    description: Optional[str] = None
    weight_percentage: float
    kpi_1: Optional[str] = None
    kpi_2: Optional[str] = None
    rating_labels: Optional[Dict[str, str]] = None

    @validator("kra_number")
    def validate_kra_number(cls, v):
        if v < 1:
            raise ValueError("kra_number must be positive")
        return v

    @validator("weight_percentage")
    def validate_weight(cls, v):
        return _check_weight(v)

    @validator("rating_labels", pre=True)
    def validate_rating_labels(cls, v):
        return _check_rating_labels(v)

class KRADefinitionCreate(KRADefinitionBase):
    pass

class KRADefinitionUpdate(BaseModel):
    kra_name: Optional[str] = None
    description: Optional[str] = None
    weight_percentage: Optional[float] = None
    kpi_1: Optional[str] = None
    kpi_2: Optional[str] = None
    rating_labels: Optional[Dict[str, str]] = None
    is_active: Optional[bool] = None

    @validator("weight_percentage")
    def validate_weight(cls, v):
        return _check_weight(v)

    @validator("rating_labels", pre=True)
    def validate_rating_labels(cls, v):
        return _check_rating_labels(v)

class KRADefinitionResponse(KRADefinitionBase):
    id: int
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

class KRAWeightSummary(BaseModel):
    user_id: int
    user_name: Optional[str] = None
    kra_count: int
    total_weight: float
    is_complete: bool

# Submission schemas
class KRARatingItem(BaseModel):
    kra_id: int
    rating: int
    comments: Optional[str] = None

class KRASubmitRequest(BaseModel):
    user_id: Optional[int] = None
    period_type: KRAPeriodType = KRAPeriodType.MONTHLY
    period_month: Optional[int] = None
    period_quarter: Optional[int] = None
    period_year: Optional[int] = None
    ratings: List[KRARatingItem]

    @validator("ratings")
    def validate_ratings(cls, v):
        if not v:
            raise ValueError("At least one rating is required")
        return v

class KRASubmissionResponse(BaseModel):
    id: int
    user_id: int
    user_name: Optional[str] = None
    kra_id: int
    kra_number: Optional[int] = None
    kra_name: Optional[str] = None
    weight_percentage: Optional[float] = None
    period_type: KRAPeriodType
    period_month: Optional[int] = None
    period_quarter: Optional[int] = None
    period_year: int
    rating: int
    submitted_by: int
    comments: Optional[str] = None
    status: SubmissionStatus
    updated_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

class KRAScoreResponse(BaseModel):
    id: int
    user_id: int
    user_name: Optional[str] = None
    period_type: KRAPeriodType
    period_month: Optional[int] = None
    period_quarter: Optional[int] = None
    period_year: int
    total_score: float
    performance_category: PerformanceCategory
    updated_at: Optional[datetime] = None

class KRASubmitResponse(BaseModel):
    success: bool = True
    user_id: int
    submissions: List[KRARatingItem]
    score: Optional[KRAScoreResponse] = None
