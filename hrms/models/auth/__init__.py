# hrms/models/auth/__init__.py

from .user import User
from .activity_log import ActivityLog
from .menu_permission import MenuPermission

__all__ = [
    "User",
    "ActivityLog",
    "MenuPermission",
]
