"""Advisory views of the RBAC contract: the caller's menu and the roles page."""
from fastapi import APIRouter, Depends

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.permissions import can_access_page, get_accessible_pages, get_role_permissions
from ..auth.rbac_contract import Resource, Role
from ..auth.scoping import Actor
from ..dependencies import get_current_actor
from ..schemas.navigation import MenuItem, NavigationRead, PermissionFlags, RolePermissionsRead

router = APIRouter(prefix="/api", tags=["navigation"])

# (page, label, route, resource whose flags the menu item carries)
MENU: tuple[tuple[str, str, str, Resource], ...] = (
    ("dashboard", "Dashboard", "/dashboard", Resource.DASHBOARD),
    ("users", "Users", "/dashboard/users", Resource.USERS),
    ("roles", "Roles & Permissions", "/dashboard/roles", Resource.ROLES),
    ("centers", "Service Centers", "/dashboard/centers", Resource.CENTERS),
    ("warehouses", "Warehouses", "/dashboard/warehouses", Resource.WAREHOUSES),
    ("inventory", "Inventory", "/dashboard/inventory", Resource.INVENTORY),
    ("customers", "Customers", "/dashboard/customers", Resource.CUSTOMERS),
    ("categories", "Categories & Products", "/dashboard/categories", Resource.CATEGORIES),
    ("service-requests", "Service Requests", "/dashboard/service-requests", Resource.SERVICE_REQUESTS),
    ("transfers", "Parts Transfers", "/dashboard/transfers", Resource.TRANSFERS),
    ("reports", "Reports", "/dashboard/reports", Resource.REPORTS),
    ("activities", "Activity Log", "/dashboard/activities", Resource.ACTIVITIES),
    ("settings", "Settings", "/dashboard/settings", Resource.SETTINGS),
)


def _flags(role: str, resource: Resource) -> PermissionFlags:
    entry = get_role_permissions(role).get(resource.value)
    return PermissionFlags(**entry.as_dict()) if entry is not None else PermissionFlags()


@router.get("/navigation", response_model=NavigationRead)
async def navigation(actor: Actor = Depends(get_current_actor)) -> NavigationRead:
    items = [
        MenuItem(page=page, label=label, path=path, permissions=_flags(actor.role, resource))
        for page, label, path, resource in MENU
        if can_access_page(actor.role, page)
    ]
    return NavigationRead(role=actor.role, items=items)


@router.get("/roles", response_model=list[RolePermissionsRead])
async def list_roles(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/roles")),
) -> list[RolePermissionsRead]:
    return [
        RolePermissionsRead(
            role=role.value,
            permissions={
                resource: PermissionFlags(**entry.as_dict())
                for resource, entry in get_role_permissions(role).items()
            },
            pages=sorted(get_accessible_pages(role)),
        )
        for role in Role
    ]
