"""Read accessors over the RBAC contract.

Every query is total: unknown roles, resources, actions or pages deny
(``False`` / empty set) instead of raising.
"""
from __future__ import annotations

from enum import Enum
from typing import Mapping

from .rbac_contract import (
    ROLE_PAGE_ACCESS,
    ROLE_PERMISSIONS,
    Action,
    PermissionEntry,
)


def _key(value: object) -> str | None:
    if isinstance(value, Enum):
        value = value.value
    return value if isinstance(value, str) else None


def _entry(role: object, resource: object) -> PermissionEntry | None:
    role_key = _key(role)
    resource_key = _key(resource)
    if role_key is None or resource_key is None:
        return None
    entries = ROLE_PERMISSIONS.get(role_key)
    if entries is None:
        return None
    return entries.get(resource_key)


def has_permission(role: object, resource: object, action: object) -> bool:
    """Can ``role`` perform ``action`` on ``resource``? Absent pairs deny."""
    entry = _entry(role, resource)
    action_key = _key(action)
    if entry is None or action_key is None:
        return False
    return entry.allows(action_key)


def can_read(role: object, resource: object) -> bool:
    return has_permission(role, resource, Action.READ)


def can_create(role: object, resource: object) -> bool:
    return has_permission(role, resource, Action.CREATE)


def can_update(role: object, resource: object) -> bool:
    return has_permission(role, resource, Action.UPDATE)


def can_delete(role: object, resource: object) -> bool:
    return has_permission(role, resource, Action.DELETE)


def can_access_page(role: object, page: object) -> bool:
    page_key = _key(page)
    if page_key is None:
        return False
    return page_key in get_accessible_pages(role)


def get_accessible_pages(role: object) -> frozenset[str]:
    role_key = _key(role)
    if role_key is None:
        return frozenset()
    return ROLE_PAGE_ACCESS.get(role_key, frozenset())


def get_role_permissions(role: object) -> Mapping[str, PermissionEntry]:
    """Derived view of one role's row of the matrix (roles page)."""
    role_key = _key(role)
    if role_key is None:
        return {}
    return ROLE_PERMISSIONS.get(role_key, {})
