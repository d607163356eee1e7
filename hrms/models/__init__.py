from hrms.models.auth.user import User
from hrms.models.auth.activity_log import ActivityLog
from hrms.models.auth.menu_permission import MenuPermission
from hrms.models.hr.attendance import Attendance
from hrms.models.hr.employee_rating import EmployeeRating
from hrms.models.hr.work_log import WorkLog, WorkLogField
from hrms.models.task.task import Task
from hrms.models.task.task_assignment import TaskAssignment
from hrms.models.task.task_rating import TaskRating
from hrms.models.task.task_report import TaskReport
from hrms.models.performance.kpi import KPIDefinition, KPIMetric
from hrms.models.performance.kri import KRIDefinition, KRIMetric
from hrms.models.performance.kra import KRADefinition, KRASubmission, KRAScore


__all__ = [
    "User",
    "ActivityLog",
    "MenuPermission",
    "Attendance",
    "EmployeeRating",
    "WorkLog",
    "WorkLogField",
    "Task",
    "TaskAssignment",
    "TaskRating",
    "TaskReport",
    "KPIDefinition",
    "KPIMetric",
    "KRIDefinition",
    "KRIMetric",
    "KRADefinition",
    "KRASubmission",
    "KRAScore",
]
