import logging
from typing import Any, Dict, Optional
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hrms.auth.menu_config import DEFAULT_MENU_CONFIG, MenuPermissionConfig
from hrms.auth.permissions import RolePolicy, require_policy
from hrms.auth.principal import Principal
from hrms.auth.roles import ADMIN_ROLES, Role, parse_role
from hrms.core.exceptions import StorageError, ValidationError
from hrms.core.logging import log_user_action
from hrms.models.auth.activity_log import ActivityLog
from hrms.models.auth.menu_permission import MenuPermission

logger = logging.getLogger(__name__)

MENU_ADMIN_POLICY = RolePolicy(allowed_roles=ADMIN_ROLES, name="menu permissions")

class MenuPermissionService:
    """Role visibility of sidebar items: stored overrides on top of a versioned default map"""

    def __init__(self, session: AsyncSession, config: MenuPermissionConfig = DEFAULT_MENU_CONFIG):
        self.session = session
        self.config = config

    async def _overrides(self, role: Optional[Role] = None) -> Dict[str, Dict[str, bool]]:
        """{menu_key: {role: enabled}} as stored"""
        stmt = select(MenuPermission.menu_key, MenuPermission.role, MenuPermission.is_enabled)
        if role is not None:
            stmt = stmt.where(MenuPermission.role == role.value)
        try:
            result = await self.session.execute(stmt)
            rows = result.all()
        except SQLAlchemyError as e:
            logger.error(f"Error loading menu permissions: {str(e)}")
            raise StorageError()

        overrides: Dict[str, Dict[str, bool]] = {}
        for menu_key, role_name, is_enabled in rows:
            overrides.setdefault(menu_key, {})[role_name] = bool(is_enabled)
        return overrides

    def _resolve(self, role: Role, overrides: Dict[str, Dict[str, bool]]) -> Dict[str, bool]:
        if role == Role.SUPER_ADMIN:
            return {key: True for key in self.config.items}

        permissions = self.config.default_for(role)
        for key in permissions:
            stored = overrides.get(key, {})
            if role.value in stored:
                permissions[key] = stored[role.value]
        return permissions

    async def get_matrix(self, principal: Principal) -> Dict[str, Any]:
        """Effective visibility of every item for every role"""
        require_policy(principal, MENU_ADMIN_POLICY)
        overrides = await self._overrides()

        permissions = {key: {} for key in self.config.items}
        for role in Role:
            for key, enabled in self._resolve(role, overrides).items():
                permissions[key][role.value] = enabled

        return {
            "version": self.config.version,
            "menu_items": [
                {"key": item.key, "name": item.name, "category": item.category}
                for item in self.config.items.values()
            ],
            "roles": [role.value for role in Role],
            "permissions": permissions,
        }

    async def check(self, principal: Principal, role_name: Optional[str] = None) -> Dict[str, Any]:
        """Effective visibility for one role, the caller's own by default"""
        role = parse_role(role_name) if role_name else principal.role
        if role is None:
            raise ValidationError(f"Unknown role: {role_name or principal.role_name}")

        overrides = await self._overrides(role)
        return {
            "role": role.value,
            "version": self.config.version,
            "permissions": self._resolve(role, overrides),
        }

    async def replace(self, principal: Principal, permissions: Dict[str, Dict[str, bool]]) -> Dict[str, Any]:
        """
        Replace every stored override with the given matrix.

        Disabled entries are stored too, so turning off a default item sticks.
        """
        require_policy(principal, MENU_ADMIN_POLICY)

        rows = []
        for menu_key, by_role in permissions.items():
            if menu_key not in self.config.items:
                raise ValidationError(f"Unknown menu item: {menu_key}")
            for role_name, enabled in by_role.items():
                role = parse_role(role_name)
                if role is None:
                    raise ValidationError(f"Unknown role: {role_name}")
                rows.append(MenuPermission(menu_key=menu_key, role=role.value, is_enabled=bool(enabled)))

        try:
            await self.session.execute(delete(MenuPermission))
            self.session.add_all(rows)
            self.session.add(ActivityLog(
                user_id=principal.id,
                action="update_menu_permissions",
                module="settings",
                details=f"Replaced menu permissions ({len(rows)} entries, config {self.config.version})",
            ))
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error replacing menu permissions: {str(e)}")
            raise StorageError()

        log_user_action(principal.id, "replace", "menu permissions")
        return {"success": True, "entries": len(rows), "version": self.config.version}
