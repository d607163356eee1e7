from enum import Enum


def enum_values(enum_cls):
    """Persist enum values (not member names) in SQLEnum columns"""
    return [member.value for member in enum_cls]


# Task related enums
class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"

class AttendanceStatus(str, Enum):
    PRESENT = "present"
    ABSENT = "absent"
    HALF_DAY = "half_day"
    LEAVE = "leave"

# Performance enums
class PeriodType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

class KRAPeriodType(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"

class KPIStatus(str, Enum):
    BELOW_TARGET = "below_target"
    ON_TARGET = "on_target"
    ABOVE_TARGET = "above_target"

class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def severity(self) -> int:
        return _RISK_SEVERITY[self]

_RISK_SEVERITY = {
    RiskLevel.LOW: 0,
    RiskLevel.MEDIUM: 1,
    RiskLevel.HIGH: 2,
    RiskLevel.CRITICAL: 3,
}

class PerformanceCategory(str, Enum):
    OUTSTANDING = "Outstanding"
    VERY_GOOD = "Very Good"
    GOOD = "Good"
    NEEDS_IMPROVEMENT = "Needs Improvement"
    POOR = "Poor"

class SubmissionStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"

class KPICalculationType(str, Enum):
    TASK_COMPLETION_RATE = "task_completion_rate"
    ONTIME_DELIVERY = "ontime_delivery"
    AVG_TASK_RATING = "avg_task_rating"
    TASKS_COMPLETED = "tasks_completed"
    ATTENDANCE_RATE = "attendance_rate"

class KRICalculationType(str, Enum):
    OVERDUE_TASKS = "overdue_tasks"
    TASKS_AT_RISK = "tasks_at_risk"
    LOW_PERFORMANCE = "low_performance"
    HIGH_ABSENTEEISM = "high_absenteeism"

# Work log custom fields
class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    SELECT = "select"
    DATE = "date"
