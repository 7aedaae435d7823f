from pydantic import BaseModel


class PermissionFlags(BaseModel):
    read: bool = False
    create: bool = False
    update: bool = False
    delete: bool = False


class MenuItem(BaseModel):
    page: str
    path: str
    label: str
    permissions: PermissionFlags


class NavigationRead(BaseModel):
    role: str
    items: list[MenuItem]


class RolePermissionsRead(BaseModel):
    role: str
    permissions: dict[str, PermissionFlags]
    pages: list[str]


class DashboardStats(BaseModel):
    total_requests: int
    pending_requests: int
    in_progress_requests: int
    completed_requests: int
    cancelled_requests: int
