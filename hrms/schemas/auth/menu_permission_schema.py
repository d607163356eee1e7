from typing import Dict, List
from pydantic import BaseModel

class MenuItemInfo(BaseModel):
    key: str
    name: str
    category: str

class MenuPermissionMatrix(BaseModel):
    version: str
    menu_items: List[MenuItemInfo]
    roles: List[str]
    permissions: Dict[str, Dict[str, bool]]

class MenuPermissionUpdate(BaseModel):
    # {menu_key: {role: enabled}}
    permissions: Dict[str, Dict[str, bool]]

class MenuPermissionCheck(BaseModel):
    role: str
    version: str
    permissions: Dict[str, bool]
