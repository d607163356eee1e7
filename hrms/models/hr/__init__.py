from .attendance import Attendance
from .employee_rating import EmployeeRating
from .work_log import WorkLog, WorkLogField

__all__ = ["Attendance", "EmployeeRating", "WorkLog", "WorkLogField"]
