# hrms/auth/permissions.py
"""
Role-based access checks.

Two building blocks are used across the services:

* ``RolePolicy`` + ``check_access``: allow-list of roles, optional ownership
  rule, uniform Super Admin superset.
* ``TieredAccessPolicy``: the full / team / self filter used by every listing
  of per-employee records (work logs, ratings, KRA submissions, metrics).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from hrms.auth.principal import Principal
from hrms.auth.roles import (
    FULL_ACCESS_ROLES,
    IMPLIED_SUPERSET,
    Role,
    parse_role,
)
from hrms.core.exceptions import Forbidden, Unauthorized

logger = logging.getLogger(__name__)


class AccessDecision(str, Enum):
    ALLOWED = "allowed"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"


def _role_set(roles: Iterable) -> frozenset:
    parsed = {parse_role(r) for r in roles}
    parsed.discard(None)
    return frozenset(parsed)


@dataclass(frozen=True)
class RolePolicy:
    """
    Allow-list policy.

    ``implied_superset`` defaults to Super Admin. A policy that must exclude
    Super Admin passes ``implied_superset=frozenset()`` explicitly.
    """

    allowed_roles: frozenset
    implied_superset: frozenset = field(default=IMPLIED_SUPERSET)
    allow_owner: bool = False
    name: str = "operation"

    def __post_init__(self):
        object.__setattr__(self, "allowed_roles", _role_set(self.allowed_roles))
        object.__setattr__(self, "implied_superset", _role_set(self.implied_superset))


def check_access(
    principal: Optional[Principal],
    policy: RolePolicy,
    owner_id: Optional[int] = None,
) -> AccessDecision:
    """Evaluate policy for principal; owner_id is the resource subject when ownership applies"""
    if principal is None:
        return AccessDecision.UNAUTHORIZED

    role = principal.role
    if role is not None and (role in policy.allowed_roles or role in policy.implied_superset):
        return AccessDecision.ALLOWED

    if policy.allow_owner and owner_id is not None and owner_id == principal.id:
        return AccessDecision.ALLOWED

    logger.warning(
        f"Access denied: user {principal.id} ({principal.role_name}) on {policy.name}"
    )
    return AccessDecision.FORBIDDEN


def enforce(decision: AccessDecision, detail: Optional[str] = None) -> None:
    """Turn a negative decision into the matching HTTP error"""
    if decision == AccessDecision.UNAUTHORIZED:
        raise Unauthorized()
    if decision == AccessDecision.FORBIDDEN:
        raise Forbidden(detail or "Forbidden")


def require_policy(principal: Optional[Principal], policy: RolePolicy, owner_id: Optional[int] = None) -> None:
    enforce(check_access(principal, policy, owner_id))


class AccessTier(str, Enum):
    FULL = "full"
    TEAM = "team"
    SELF = "self"


class TieredAccessPolicy:
    """
    Three-tier record visibility.

    full access for ``full_access_roles``; team access for a principal whose
    role is exactly ``scoped_role`` (direct reports via ``manager_id``); self
    access for everyone else via ``ownership_field``.
    """

    def __init__(
        self,
        full_access_roles: Iterable = FULL_ACCESS_ROLES,
        scoped_role: Role = Role.MANAGER,
        ownership_field: str = "user_id",
        implied_superset: Iterable = IMPLIED_SUPERSET,
    ):
        self.full_access_roles = _role_set(full_access_roles) | _role_set(implied_superset)
        self.scoped_role = scoped_role
        self.ownership_field = ownership_field

    def tier_for(self, principal: Principal) -> AccessTier:
        if principal.role in self.full_access_roles:
            return AccessTier.FULL
        if principal.role == self.scoped_role:
            return AccessTier.TEAM
        return AccessTier.SELF

    def filter(self, stmt, principal: Principal, owner_model, subject_model):
        """
        Restrict a select to the records principal may see.

        ``subject_model`` is the joined users entity (or alias) that owns
        each row; the caller is responsible for the join.
        """
        tier = self.tier_for(principal)
        if tier == AccessTier.FULL:
            return stmt
        if tier == AccessTier.TEAM:
            return stmt.where(subject_model.manager_id == principal.id)
        return stmt.where(getattr(owner_model, self.ownership_field) == principal.id)

    def check_subject(self, principal: Optional[Principal], subject) -> AccessDecision:
        """Decide access to records of one subject user (needs ``id`` and ``manager_id``)"""
        if principal is None:
            return AccessDecision.UNAUTHORIZED
        tier = self.tier_for(principal)
        if tier == AccessTier.FULL or subject.id == principal.id:
            return AccessDecision.ALLOWED
        if tier == AccessTier.TEAM and subject.manager_id == principal.id:
            return AccessDecision.ALLOWED
        logger.warning(
            f"Access denied: user {principal.id} ({principal.role_name}) on records of user {subject.id}"
        )
        return AccessDecision.FORBIDDEN


# Shared policy instances
EMPLOYEE_RECORDS_POLICY = TieredAccessPolicy()
EMPLOYEE_RATINGS_POLICY = TieredAccessPolicy(ownership_field="employee_id")
