from typing import Any, Dict, List, Optional
from datetime import date, datetime
from pydantic import BaseModel, validator
from hrms.models.shared.enums import FieldType

# Field definition schemas
class WorkLogFieldBase(BaseModel):
    role: str
    field_key: str
    field_label: str
    field_type: FieldType
    field_options: Optional[List[str]] = None
    is_required: bool = False
    display_order: int = 0
    is_active: bool = True

    @validator("field_key")
    def validate_field_key(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("field_key is required")
        return v

    @validator("field_options")
    def validate_field_options(cls, v, values):
        if values.get("field_type") == FieldType.SELECT and not v:
            raise ValueError("select fields need at least one option")
        return v

class WorkLogFieldUpsert(WorkLogFieldBase):
    pass

class WorkLogFieldResponse(WorkLogFieldBase):
    id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True

# Work log schemas
class WorkLogSave(BaseModel):
    user_id: Optional[int] = None
    log_date: date
    field_data: Dict[str, Any]
    notes: Optional[str] = None

class WorkLogResponse(BaseModel):
    id: int
    user_id: int
    user_name: Optional[str] = None
    log_date: date
    role: str
    field_data: Dict[str, Any]
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
