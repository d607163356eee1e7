from typing import Optional
from datetime import datetime
from pydantic import BaseModel, validator

class EmployeeRatingCreate(BaseModel):
    employee_id: int
    workplace_behaviour: int
    discipline: int
    innovations: int
    punctuality: int
    critical_task_delivery: int
    comments: Optional[str] = None
    rating_period: Optional[str] = None

    @validator("workplace_behaviour", "discipline", "innovations", "punctuality", "critical_task_delivery")
    def validate_score(cls, v):
        if v < 1 or v > 5:
            raise ValueError("Rating must be an integer between 1 and 5")
        return v

    @validator("rating_period")
    def validate_period(cls, v):
        if v is None:
            return v
        return v.strip() or None

class EmployeeRatingResponse(BaseModel):
    id: int
    employee_id: int
    employee_name: Optional[str] = None
    employee_department: Optional[str] = None
    rated_by: int
    rated_by_name: Optional[str] = None
    workplace_behaviour: Optional[int] = None
    discipline: Optional[int] = None
    innovations: Optional[int] = None
    punctuality: Optional[int] = None
    critical_task_delivery: Optional[int] = None
    average_score: Optional[float] = None
    comments: Optional[str] = None
    rating_period: Optional[str] = None
    created_at: Optional[datetime] = None

# Top employees
class RatingAverages(BaseModel):
    workplace_behaviour: Optional[float] = None
    discipline: Optional[float] = None
    innovations: Optional[float] = None
    punctuality: Optional[float] = None
    critical_task_delivery: Optional[float] = None
    overall_average: Optional[float] = None
    total_ratings: int = 0

class TopEmployeeResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str
    department: Optional[str] = None
    designation: Optional[str] = None
    tasks_completed: int
    total_tasks_assigned: int
    task_completion_rate: float
    ratings: RatingAverages
