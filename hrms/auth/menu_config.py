# hrms/auth/menu_config.py
"""
Default sidebar menu visibility.

The map is versioned so a stored override set can be traced back to the
defaults it was edited against. Items grant access by exact role, by role
category, or to everyone.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from hrms.auth.roles import Role, RoleCategory, roles_in_category

EVERYONE = "all"


@dataclass(frozen=True)
class MenuItem:
    key: str
    name: str
    category: str
    roles: frozenset = field(default_factory=frozenset)
    role_categories: frozenset = field(default_factory=frozenset)
    everyone: bool = False

    def allows(self, role: Optional[Role]) -> bool:
        if role is None:
            return False
        return self.everyone or role in self.roles


@dataclass(frozen=True)
class MenuPermissionConfig:
    version: str
    items: Dict[str, MenuItem]

    def default_for(self, role: Optional[Role]) -> Dict[str, bool]:
        return {key: item.allows(role) for key, item in self.items.items()}


def _item(key, name, category, roles=(), role_categories=()):
    """Category grants expand to their member roles here, so allows() is a set lookup"""
    everyone = EVERYONE in roles
    granted = {Role(r) for r in roles if r != EVERYONE}
    for role_cat in role_categories:
        granted |= roles_in_category(role_cat)
    return key, MenuItem(
        key=key,
        name=name,
        category=category,
        roles=frozenset(granted),
        role_categories=frozenset(role_categories),
        everyone=everyone,
    )


_ADMINS = ("Super Admin", "Admin")
_HR_ADMINS = ("Super Admin", "Admin", "HR")
_VIEWERS = ("Super Admin", "Admin", "Manager", "HR")

DEFAULT_MENU_CONFIG = MenuPermissionConfig(
    version="2024.11",
    items=dict([
        _item("dashboard", "Dashboard", "My Workspace", roles=(EVERYONE,)),
        _item("profile", "Profile", "My Workspace", roles=(EVERYONE,)),
        _item("attendanceFiles", "Attendance Files", "HR", roles=_HR_ADMINS),
        _item("employeeDocuments", "Employee Documents", "HR", roles=_HR_ADMINS),
        _item("leaves", "Leaves", "HR", roles=(EVERYONE,)),
        _item("employees", "Employees", "HR", roles=_HR_ADMINS),
        _item("tasks", "Tasks", "My Workspace", roles=("Super Admin", "Admin", "Manager")),
        _item(
            "myTasks", "My Tasks", "My Workspace",
            roles=("Design & Content Team",),
            role_categories=(RoleCategory.DEVELOPER, RoleCategory.OPERATIONS),
        ),
        _item("team", "Team", "HR", roles=("Super Admin", "Admin", "Manager")),
        _item("kra", "Key Result Areas", "Performance & Goals", roles=(EVERYONE,)),
        _item("manageKra", "Manage KRA", "Performance & Goals", roles=_ADMINS),
        _item("kraScores", "KRA Scores", "Performance & Goals", roles=_HR_ADMINS),
        _item("workLogs", "Daily Work Logs", "My Workspace", roles=(EVERYONE,)),
        _item("youtube", "YouTube", "Content Management", roles=("Super Admin", "Admin", "Design & Content Team")),
        _item("instagram", "Instagram", "Content Management", roles=("Super Admin", "Admin", "Design & Content Team")),
        _item("notifications", "Notifications", "My Workspace", roles=(EVERYONE,)),
        _item("calendar", "Calendar", "My Workspace", roles=(EVERYONE,)),
        _item("menuPermissions", "Menu Permissions Management", "Administration", roles=("Super Admin",)),
        _item("topEmployees", "Top Employees", "Performance & Goals", roles=_VIEWERS),
        _item("employeeRatings", "Employee Ratings", "Performance & Goals", roles=_VIEWERS),
        _item("payslips", "Payslips", "HR", roles=_VIEWERS),
        _item("birthdayManagement", "Birthday Management", "HR", roles=_HR_ADMINS),
    ]),
)
