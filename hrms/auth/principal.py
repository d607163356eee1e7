from dataclasses import dataclass
from typing import Optional
from hrms.auth.roles import Role, RoleCategory, parse_role, role_category


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, resolved once per request and never mutated"""

    id: int
    email: str
    role: Optional[Role]
    department: Optional[str] = None
    designation: Optional[str] = None
    manager_id: Optional[int] = None
    category: Optional[RoleCategory] = None

    @classmethod
    def from_user(cls, user) -> "Principal":
        role = parse_role(user.role)
        return cls(
            id=user.id,
            email=user.email,
            role=role,
            department=user.department,
            designation=user.designation,
            manager_id=user.manager_id,
            category=role_category(role),
        )

    @property
    def role_name(self) -> Optional[str]:
        return self.role.value if self.role else None
