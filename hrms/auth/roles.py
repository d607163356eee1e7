# hrms/auth/roles.py
"""
Static role catalog.

Every role maps to exactly one RoleCategory. Code that needs to know whether a
role is, say, a developer role asks for its category instead of matching on
the role name.
"""

from enum import Enum
from typing import Iterable, Optional, Union


class Role(str, Enum):
    SUPER_ADMIN = "Super Admin"
    ADMIN = "Admin"
    HR = "HR"
    MANAGER = "Manager"
    LOGISTICS = "Logistics"
    DIGITAL_MARKETING = "Digital Marketing"
    DESIGN_CONTENT = "Design & Content Team"
    BACKEND_DEVELOPER = "Backend Developer"
    FRONTEND_DEVELOPER = "Frontend Developer"
    AI_ML_DEVELOPER = "AI/ML Developer"
    APP_DEVELOPER = "App Developer"
    OPERATIONS_MANAGER = "Operations Manager"
    OPERATIONS_EXECUTIVE = "Operations Executive"
    OPERATION_SPECIALIST = "Operation Specialist"
    OPERATIONS_INTERN = "Operations Intern"
    EMPLOYEE = "Employee"
    INTERN = "Intern"


class RoleCategory(str, Enum):
    ADMINISTRATION = "Administration"
    HR = "HR"
    MANAGEMENT = "Management"
    DEVELOPER = "Developer"
    OPERATIONS = "Operations"
    MARKETING = "Marketing"
    DESIGN = "Design"
    LOGISTICS = "Logistics"
    GENERAL = "General"


ROLE_CATEGORIES = {
    Role.SUPER_ADMIN: RoleCategory.ADMINISTRATION,
    Role.ADMIN: RoleCategory.ADMINISTRATION,
    Role.HR: RoleCategory.HR,
    Role.MANAGER: RoleCategory.MANAGEMENT,
    Role.LOGISTICS: RoleCategory.LOGISTICS,
    Role.DIGITAL_MARKETING: RoleCategory.MARKETING,
    Role.DESIGN_CONTENT: RoleCategory.DESIGN,
    Role.BACKEND_DEVELOPER: RoleCategory.DEVELOPER,
    Role.FRONTEND_DEVELOPER: RoleCategory.DEVELOPER,
    Role.AI_ML_DEVELOPER: RoleCategory.DEVELOPER,
    Role.APP_DEVELOPER: RoleCategory.DEVELOPER,
    Role.OPERATIONS_MANAGER: RoleCategory.OPERATIONS,
    Role.OPERATIONS_EXECUTIVE: RoleCategory.OPERATIONS,
    Role.OPERATION_SPECIALIST: RoleCategory.OPERATIONS,
    Role.OPERATIONS_INTERN: RoleCategory.OPERATIONS,
    Role.EMPLOYEE: RoleCategory.GENERAL,
    Role.INTERN: RoleCategory.GENERAL,
}

# Named allow-lists
ADMIN_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN})
FULL_ACCESS_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.HR})
METRIC_VIEWER_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.HR, Role.MANAGER})
CALCULATION_ROLES = frozenset({Role.SUPER_ADMIN, Role.ADMIN, Role.MANAGER})

# Super Admin passes every guarded check unless a policy opts out
IMPLIED_SUPERSET = frozenset({Role.SUPER_ADMIN})


def parse_role(value: Union[str, Role, None]) -> Optional[Role]:
    """Resolve a stored role string, None for unknown or empty values"""
    if value is None:
        return None
    if isinstance(value, Role):
        return value
    try:
        return Role(value.strip())
    except ValueError:
        return None


def role_category(role: Union[str, Role, None]) -> Optional[RoleCategory]:
    parsed = parse_role(role)
    if parsed is None:
        return None
    return ROLE_CATEGORIES[parsed]


def roles_in_category(category: RoleCategory) -> frozenset:
    return frozenset(role for role, cat in ROLE_CATEGORIES.items() if cat == category)


def has_permission(role: Union[str, Role, None], allowed_roles: Iterable[Union[str, Role]]) -> bool:
    """
    Plain membership test of role in allowed_roles.

    No implicit wildcard: Super Admin only passes when listed. Callers that
    want the superset behaviour go through check_access.
    """
    parsed = parse_role(role)
    if parsed is None:
        return False
    allowed = {parse_role(r) for r in allowed_roles}
    return parsed in allowed
