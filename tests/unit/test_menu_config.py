from hrms.auth.menu_config import DEFAULT_MENU_CONFIG
from hrms.auth.roles import Role, RoleCategory, roles_in_category

class TestDefaultMenuConfig:
    def test_everyone_items(self):
        for role in Role:
            defaults = DEFAULT_MENU_CONFIG.default_for(role)
            assert defaults["dashboard"] is True
            assert defaults["workLogs"] is True

    def test_my_tasks_by_category(self):
        assert DEFAULT_MENU_CONFIG.default_for(Role.FRONTEND_DEVELOPER)["myTasks"] is True
        assert DEFAULT_MENU_CONFIG.default_for(Role.OPERATIONS_INTERN)["myTasks"] is True
        assert DEFAULT_MENU_CONFIG.default_for(Role.DESIGN_CONTENT)["myTasks"] is True
        assert DEFAULT_MENU_CONFIG.default_for(Role.HR)["myTasks"] is False

    def test_category_grants_list_member_roles(self):
        my_tasks = DEFAULT_MENU_CONFIG.items["myTasks"]
        assert roles_in_category(RoleCategory.DEVELOPER) <= my_tasks.roles
        assert roles_in_category(RoleCategory.OPERATIONS) <= my_tasks.roles
        assert Role.DESIGN_CONTENT in my_tasks.roles
        assert Role.MANAGER not in my_tasks.roles

    def test_admin_only_items(self):
        assert DEFAULT_MENU_CONFIG.default_for(Role.ADMIN)["manageKra"] is True
        assert DEFAULT_MENU_CONFIG.default_for(Role.MANAGER)["manageKra"] is False
        assert DEFAULT_MENU_CONFIG.default_for(Role.ADMIN)["menuPermissions"] is False

    def test_unknown_role_sees_nothing(self):
        assert not any(DEFAULT_MENU_CONFIG.default_for(None).values())
