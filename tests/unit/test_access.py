import pytest
from sqlalchemy import select

from hrms.auth.permissions import (
    AccessDecision,
    AccessTier,
    EMPLOYEE_RECORDS_POLICY,
    RolePolicy,
    TieredAccessPolicy,
    check_access,
    enforce,
)
from hrms.auth.principal import Principal
from hrms.auth.roles import (
    CALCULATION_ROLES,
    FULL_ACCESS_ROLES,
    Role,
    RoleCategory,
    has_permission,
    parse_role,
    role_category,
    roles_in_category,
)
from hrms.core.exceptions import Forbidden, Unauthorized
from hrms.models.auth.user import User
from hrms.models.hr.work_log import WorkLog

def make_principal(role, user_id=1, manager_id=None):
    parsed = parse_role(role)
    return Principal(
        id=user_id,
        email=f"user{user_id}@company.com",
        role=parsed,
        manager_id=manager_id,
        category=role_category(parsed),
    )

class Subject:
    def __init__(self, id, manager_id=None):
        self.id = id
        self.manager_id = manager_id

class TestRoles:
    def test_every_role_has_a_category(self):
        for role in Role:
            assert role_category(role) is not None

    def test_parse_role_trims_and_rejects_unknown(self):
        assert parse_role(" Manager ") == Role.MANAGER
        assert parse_role("Chief Wizard") is None
        assert parse_role(None) is None

    def test_developer_category(self):
        developers = roles_in_category(RoleCategory.DEVELOPER)
        assert Role.BACKEND_DEVELOPER in developers
        assert Role.AI_ML_DEVELOPER in developers
        assert Role.MANAGER not in developers

    def test_has_permission_is_plain_membership(self):
        assert has_permission("HR", FULL_ACCESS_ROLES)
        assert not has_permission("Employee", FULL_ACCESS_ROLES)
        # No implicit wildcard
        assert not has_permission(Role.SUPER_ADMIN, {Role.HR})
        assert not has_permission("Nobody", FULL_ACCESS_ROLES)

class TestCheckAccess:
    @pytest.mark.parametrize("role", sorted(r.value for r in CALCULATION_ROLES))
    def test_allowed_roles_pass(self, role):
        policy = RolePolicy(allowed_roles=CALCULATION_ROLES)
        assert check_access(make_principal(role), policy) == AccessDecision.ALLOWED

    @pytest.mark.parametrize("role", sorted(r.value for r in set(Role) - CALCULATION_ROLES))
    def test_other_roles_are_forbidden(self, role):
        policy = RolePolicy(allowed_roles=CALCULATION_ROLES)
        assert check_access(make_principal(role), policy) == AccessDecision.FORBIDDEN

    def test_missing_principal_is_unauthorized(self):
        policy = RolePolicy(allowed_roles={Role.HR})
        assert check_access(None, policy) == AccessDecision.UNAUTHORIZED

    def test_super_admin_is_implied(self):
        policy = RolePolicy(allowed_roles={Role.HR})
        assert check_access(make_principal("Super Admin"), policy) == AccessDecision.ALLOWED

    def test_policy_can_opt_out_of_superset(self):
        policy = RolePolicy(allowed_roles={Role.HR}, implied_superset=frozenset())
        assert check_access(make_principal("Super Admin"), policy) == AccessDecision.FORBIDDEN

    def test_owner_passes_when_allowed(self):
        policy = RolePolicy(allowed_roles={Role.HR}, allow_owner=True)
        employee = make_principal("Employee", user_id=7)
        assert check_access(employee, policy, owner_id=7) == AccessDecision.ALLOWED
        assert check_access(employee, policy, owner_id=8) == AccessDecision.FORBIDDEN

    def test_unknown_role_is_forbidden(self):
        policy = RolePolicy(allowed_roles=FULL_ACCESS_ROLES)
        assert check_access(make_principal("Chief Wizard"), policy) == AccessDecision.FORBIDDEN

    def test_enforce_raises_matching_errors(self):
        enforce(AccessDecision.ALLOWED)
        with pytest.raises(Unauthorized):
            enforce(AccessDecision.UNAUTHORIZED)
        with pytest.raises(Forbidden):
            enforce(AccessDecision.FORBIDDEN, "nope")

class TestTieredAccess:
    def test_tiers(self):
        policy = TieredAccessPolicy()
        assert policy.tier_for(make_principal("HR")) == AccessTier.FULL
        assert policy.tier_for(make_principal("Super Admin")) == AccessTier.FULL
        assert policy.tier_for(make_principal("Manager")) == AccessTier.TEAM
        assert policy.tier_for(make_principal("Operations Manager")) == AccessTier.SELF
        assert policy.tier_for(make_principal("Employee")) == AccessTier.SELF

    def test_check_subject(self):
        manager = make_principal("Manager", user_id=10)
        employee = make_principal("Employee", user_id=20, manager_id=10)

        assert EMPLOYEE_RECORDS_POLICY.check_subject(manager, Subject(20, manager_id=10)) == AccessDecision.ALLOWED
        assert EMPLOYEE_RECORDS_POLICY.check_subject(manager, Subject(10)) == AccessDecision.ALLOWED
        assert EMPLOYEE_RECORDS_POLICY.check_subject(manager, Subject(30, manager_id=99)) == AccessDecision.FORBIDDEN
        assert EMPLOYEE_RECORDS_POLICY.check_subject(employee, Subject(20)) == AccessDecision.ALLOWED
        assert EMPLOYEE_RECORDS_POLICY.check_subject(employee, Subject(21, manager_id=10)) == AccessDecision.FORBIDDEN
        assert EMPLOYEE_RECORDS_POLICY.check_subject(None, Subject(20)) == AccessDecision.UNAUTHORIZED

    def test_filter_adds_expected_condition(self):
        stmt = select(WorkLog).join(User, User.id == WorkLog.user_id)

        full = EMPLOYEE_RECORDS_POLICY.filter(stmt, make_principal("Admin"), WorkLog, User)
        team = EMPLOYEE_RECORDS_POLICY.filter(stmt, make_principal("Manager", user_id=5), WorkLog, User)
        own = EMPLOYEE_RECORDS_POLICY.filter(stmt, make_principal("Intern", user_id=6), WorkLog, User)

        assert full.whereclause is None
        assert "users.manager_id" in str(team.whereclause)
        assert "daily_work_logs.user_id" in str(own.whereclause)
