"""
RBAC Contract - compiled-in permission matrix and page access policy.

This module is the single source of truth for WHAT each role may do:
- Role -> Resource -> {read, create, update, delete}
- Role -> navigable page-set

The policy is static. Nothing writes to these tables after import, and the
"roles" page of the application only displays the derived state.

Every (role, resource) pair missing from ROLE_PERMISSIONS denies all actions.
Every (role, page) pair missing from ROLE_PAGE_ACCESS is not navigable.

ALL changes to this contract must go through security review.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Final, Mapping


# ============================================================================
# ROLES
# ============================================================================

class Role(str, Enum):
    """Actor category. Assigned to a user record, changed only by an admin."""
    ADMIN = "admin"
    MANAGER = "manager"
    TECHNICIAN = "technician"
    RECEPTIONIST = "receptionist"
    WAREHOUSE_MANAGER = "warehouse_manager"
    CUSTOMER = "customer"


ALL_ROLES: Final[frozenset[str]] = frozenset(role.value for role in Role)


# ============================================================================
# RESOURCES AND ACTIONS
# ============================================================================

class Resource(str, Enum):
    """Protected domain nouns. Identifiers only - they key into the matrix."""
    DASHBOARD = "dashboard"
    USERS = "users"
    ROLES = "roles"
    CENTERS = "centers"
    WAREHOUSES = "warehouses"
    INVENTORY = "inventory"
    CUSTOMERS = "customers"
    CATEGORIES = "categories"
    SERVICE_REQUESTS = "serviceRequests"
    SERVICE_REQUEST_FOLLOW_UPS = "serviceRequestFollowUps"
    TRANSFERS = "transfers"
    REPORTS = "reports"
    ACTIVITIES = "activities"
    SETTINGS = "settings"


ALL_RESOURCES: Final[frozenset[str]] = frozenset(resource.value for resource in Resource)


class Action(str, Enum):
    READ = "read"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


ALL_ACTIONS: Final[frozenset[str]] = frozenset(action.value for action in Action)


@dataclass(frozen=True, slots=True)
class PermissionEntry:
    """Four independent flags for one (role, resource) pair."""
    read: bool = False
    create: bool = False
    update: bool = False
    delete: bool = False

    def allows(self, action: str) -> bool:
        if action not in ALL_ACTIONS:
            return False
        return bool(getattr(self, action))

    def as_dict(self) -> dict[str, bool]:
        return {
            "read": self.read,
            "create": self.create,
            "update": self.update,
            "delete": self.delete,
        }


FULL: Final = PermissionEntry(read=True, create=True, update=True, delete=True)
READ_ONLY: Final = PermissionEntry(read=True)
NO_DELETE: Final = PermissionEntry(read=True, create=True, update=True)
READ_CREATE: Final = PermissionEntry(read=True, create=True)
READ_UPDATE: Final = PermissionEntry(read=True, update=True)


# ============================================================================
# PERMISSION MATRIX
# ============================================================================

def _freeze(table: dict[Role, dict[Resource, PermissionEntry]]) -> Mapping[str, Mapping[str, PermissionEntry]]:
    return MappingProxyType({
        role.value: MappingProxyType({resource.value: entry for resource, entry in entries.items()})
        for role, entries in table.items()
    })


ROLE_PERMISSIONS: Final[Mapping[str, Mapping[str, PermissionEntry]]] = _freeze({
    # Admin: full access to every protected resource
    Role.ADMIN: {resource: FULL for resource in Resource},

    # Manager: their center's data, never deletes
    Role.MANAGER: {
        Resource.DASHBOARD: READ_ONLY,
        Resource.USERS: NO_DELETE,
        Resource.CENTERS: READ_UPDATE,
        Resource.WAREHOUSES: NO_DELETE,
        Resource.INVENTORY: NO_DELETE,
        Resource.CUSTOMERS: NO_DELETE,
        Resource.CATEGORIES: NO_DELETE,
        Resource.SERVICE_REQUESTS: NO_DELETE,
        Resource.TRANSFERS: NO_DELETE,
        Resource.REPORTS: READ_ONLY,
        Resource.ACTIVITIES: READ_ONLY,
    },

    # Technician: assigned requests, adds follow-ups only
    Role.TECHNICIAN: {
        Resource.SERVICE_REQUESTS: READ_ONLY,
        Resource.SERVICE_REQUEST_FOLLOW_UPS: READ_CREATE,
        Resource.CUSTOMERS: READ_ONLY,
        Resource.CATEGORIES: READ_ONLY,
    },

    Role.RECEPTIONIST: {
        Resource.DASHBOARD: READ_ONLY,
        Resource.CUSTOMERS: NO_DELETE,
        Resource.SERVICE_REQUESTS: READ_CREATE,
        Resource.CATEGORIES: READ_ONLY,
    },

    # Warehouse manager: stock and transfers for their warehouse
    Role.WAREHOUSE_MANAGER: {
        Resource.DASHBOARD: READ_ONLY,
        Resource.WAREHOUSES: READ_UPDATE,
        Resource.INVENTORY: NO_DELETE,
        Resource.CATEGORIES: NO_DELETE,
        Resource.TRANSFERS: NO_DELETE,
        Resource.REPORTS: READ_ONLY,
    },

    Role.CUSTOMER: {
        Resource.SERVICE_REQUESTS: READ_CREATE,
    },
})


# ============================================================================
# PAGE ACCESS
# ============================================================================

# Page identifiers are navigation labels, coarser than resources.
ALL_PAGES: Final[frozenset[str]] = frozenset({
    "dashboard",
    "users",
    "roles",
    "centers",
    "warehouses",
    "inventory",
    "customers",
    "categories",
    "service-requests",
    "transfers",
    "reports",
    "activities",
    "settings",
})

# Declared independently of ROLE_PERMISSIONS: technician has no "dashboard"
# page, and manager navigates to "centers" without create rights.
ROLE_PAGE_ACCESS: Final[Mapping[str, frozenset[str]]] = MappingProxyType({
    Role.ADMIN.value: frozenset({
        "dashboard", "users", "roles", "centers", "warehouses", "inventory",
        "customers", "categories", "service-requests", "transfers",
        "reports", "activities", "settings",
    }),
    Role.MANAGER.value: frozenset({
        "dashboard", "users", "centers", "warehouses", "inventory", "customers",
        "categories", "service-requests", "transfers", "reports", "activities",
    }),
    Role.TECHNICIAN.value: frozenset({
        "service-requests", "customers", "categories",
    }),
    Role.RECEPTIONIST.value: frozenset({
        "dashboard", "customers", "service-requests", "categories",
    }),
    Role.WAREHOUSE_MANAGER.value: frozenset({
        "dashboard", "warehouses", "inventory", "categories", "transfers", "reports",
    }),
    Role.CUSTOMER.value: frozenset({
        "service-requests",
    }),
})


# ============================================================================
# HARD INVARIANTS - FAIL-FAST ENFORCEMENT
# ============================================================================

def validate_role(role: str) -> None:
    """
    Validate that a role is one of the six enumerated roles.

    Used where a role enters the system (user records, seed data). Runtime
    permission queries never raise; they deny.

    Raises:
        ValueError: If role is not allowed
    """
    if role not in ALL_ROLES:
        raise ValueError(
            f"Invalid role '{role}'. "
            f"Must be one of: {', '.join(sorted(ALL_ROLES))}"
        )


def _validate_contract() -> None:
    """Validate the entire RBAC contract at module import time."""
    errors = []

    missing_roles = ALL_ROLES - set(ROLE_PERMISSIONS)
    if missing_roles:
        errors.append(f"Roles missing from permission matrix: {sorted(missing_roles)}")

    missing_pages = ALL_ROLES - set(ROLE_PAGE_ACCESS)
    if missing_pages:
        errors.append(f"Roles missing from page access: {sorted(missing_pages)}")

    for role, entries in ROLE_PERMISSIONS.items():
        if role not in ALL_ROLES:
            errors.append(f"Invalid role in matrix: {role}")
            continue
        for resource, entry in entries.items():
            if resource not in ALL_RESOURCES:
                errors.append(f"Role '{role}' has unknown resource '{resource}'")
            if (entry.create or entry.update or entry.delete) and not entry.read:
                errors.append(f"Role '{role}' can write '{resource}' without read")

    for role, pages in ROLE_PAGE_ACCESS.items():
        unknown = pages - ALL_PAGES
        if unknown:
            errors.append(f"Role '{role}' has unknown pages: {sorted(unknown)}")

    if errors:
        raise RuntimeError(
            "RBAC Contract validation failed:\n" + "\n".join(f"  - {e}" for e in errors)
        )


# Run validation on import
_validate_contract()
