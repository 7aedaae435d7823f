"""Declarative mapping of protected endpoints to the (resource, action) they need.

Each key is a (METHOD, PATH) tuple exactly as mounted on the application.
Routers take their guard from here, so the binding lives in one place.
"""
from types import MappingProxyType
from typing import Callable, Final, Mapping

from .guards import require_permission
from .rbac_contract import Action, Resource

R, C, U, D = Action.READ, Action.CREATE, Action.UPDATE, Action.DELETE

ENFORCEMENT_MATRIX: Final[Mapping[tuple[str, str], tuple[Resource, Action]]] = MappingProxyType({
    # Users
    ("GET", "/api/users"): (Resource.USERS, R),
    ("GET", "/api/users/{user_id}"): (Resource.USERS, R),
    ("POST", "/api/users"): (Resource.USERS, C),
    ("PUT", "/api/users/{user_id}"): (Resource.USERS, U),
    ("DELETE", "/api/users/{user_id}"): (Resource.USERS, D),
    # Service centers
    ("GET", "/api/service-centers"): (Resource.CENTERS, R),
    ("GET", "/api/service-centers/{center_id}"): (Resource.CENTERS, R),
    ("POST", "/api/service-centers"): (Resource.CENTERS, C),
    ("PUT", "/api/service-centers/{center_id}"): (Resource.CENTERS, U),
    ("DELETE", "/api/service-centers/{center_id}"): (Resource.CENTERS, D),
    # Customers
    ("GET", "/api/customers"): (Resource.CUSTOMERS, R),
    ("GET", "/api/customers/{customer_id}"): (Resource.CUSTOMERS, R),
    ("POST", "/api/customers"): (Resource.CUSTOMERS, C),
    ("PUT", "/api/customers/{customer_id}"): (Resource.CUSTOMERS, U),
    ("DELETE", "/api/customers/{customer_id}"): (Resource.CUSTOMERS, D),
    # Categories and products share the "categories" resource
    ("GET", "/api/categories"): (Resource.CATEGORIES, R),
    ("POST", "/api/categories"): (Resource.CATEGORIES, C),
    ("PUT", "/api/categories/{category_id}"): (Resource.CATEGORIES, U),
    ("DELETE", "/api/categories/{category_id}"): (Resource.CATEGORIES, D),
    ("GET", "/api/products"): (Resource.CATEGORIES, R),
    ("POST", "/api/products"): (Resource.CATEGORIES, C),
    ("PUT", "/api/products/{product_id}"): (Resource.CATEGORIES, U),
    ("DELETE", "/api/products/{product_id}"): (Resource.CATEGORIES, D),
    # Service requests and follow-ups
    ("GET", "/api/service-requests"): (Resource.SERVICE_REQUESTS, R),
    ("GET", "/api/service-requests/{request_id}"): (Resource.SERVICE_REQUESTS, R),
    ("POST", "/api/service-requests"): (Resource.SERVICE_REQUESTS, C),
    ("PUT", "/api/service-requests/{request_id}"): (Resource.SERVICE_REQUESTS, U),
    ("DELETE", "/api/service-requests/{request_id}"): (Resource.SERVICE_REQUESTS, D),
    ("GET", "/api/service-requests/{request_id}/follow-ups"): (Resource.SERVICE_REQUEST_FOLLOW_UPS, R),
    ("POST", "/api/service-requests/{request_id}/follow-ups"): (Resource.SERVICE_REQUEST_FOLLOW_UPS, C),
    # Warehouses
    ("GET", "/api/warehouses"): (Resource.WAREHOUSES, R),
    ("GET", "/api/warehouses/{warehouse_id}"): (Resource.WAREHOUSES, R),
    ("POST", "/api/warehouses"): (Resource.WAREHOUSES, C),
    ("PUT", "/api/warehouses/{warehouse_id}"): (Resource.WAREHOUSES, U),
    ("DELETE", "/api/warehouses/{warehouse_id}"): (Resource.WAREHOUSES, D),
    # Spare parts and stock levels share the "inventory" resource
    ("GET", "/api/spare-parts"): (Resource.INVENTORY, R),
    ("POST", "/api/spare-parts"): (Resource.INVENTORY, C),
    ("PUT", "/api/spare-parts/{part_id}"): (Resource.INVENTORY, U),
    ("GET", "/api/inventory"): (Resource.INVENTORY, R),
    ("POST", "/api/inventory"): (Resource.INVENTORY, C),
    ("PUT", "/api/inventory/{item_id}"): (Resource.INVENTORY, U),
    # Parts transfers
    ("GET", "/api/transfers"): (Resource.TRANSFERS, R),
    ("POST", "/api/transfers"): (Resource.TRANSFERS, C),
    ("PUT", "/api/transfers/{transfer_id}"): (Resource.TRANSFERS, U),
    # Read-only views
    ("GET", "/api/activities"): (Resource.ACTIVITIES, R),
    ("GET", "/api/dashboard/stats"): (Resource.DASHBOARD, R),
    ("GET", "/api/dashboard/recent-requests"): (Resource.DASHBOARD, R),
    ("GET", "/api/reports/low-stock"): (Resource.REPORTS, R),
    ("GET", "/api/roles"): (Resource.ROLES, R),
})


def permission_for(method: str, path: str) -> tuple[Resource, Action]:
    return ENFORCEMENT_MATRIX[(method, path)]


def require_enforced_permission(method: str, path: str) -> Callable:
    return require_permission(*permission_for(method, path))
