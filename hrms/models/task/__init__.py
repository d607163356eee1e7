from .task import Task
from .task_assignment import TaskAssignment
from .task_rating import TaskRating
from .task_report import TaskReport

__all__ = ["Task", "TaskAssignment", "TaskRating", "TaskReport"]
