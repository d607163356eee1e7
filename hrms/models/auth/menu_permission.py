from sqlalchemy import Column, String, Boolean, UniqueConstraint
from hrms.db.base import BaseModel

class MenuPermission(BaseModel):
    __tablename__ = "menu_permissions"
    __table_args__ = (
        UniqueConstraint("menu_key", "role", name="uq_menu_permission_key_role"),
    )

    menu_key = Column(String(100), nullable=False, index=True)
    role = Column(String(100), nullable=False, index=True)
    is_enabled = Column(Boolean, default=True, nullable=False)
