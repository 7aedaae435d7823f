"""
Row-level scoping on top of the permission matrix.

Scoping narrows a resource-level "yes" down to "yes for these rows". It never
broadens a resource-level "no": callers MUST check ``has_permission`` first.
Nothing here performs I/O; only fields already present on the record are
inspected.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Final, Iterable, Mapping, TypeVar

from .rbac_contract import ALL_ROLES, Role

T = TypeVar("T")


class ResourceType(str, Enum):
    """Record kinds tested for visibility (singular nouns)."""
    USER = "user"
    SERVICE_CENTER = "serviceCenter"
    CUSTOMER = "customer"
    CATEGORY = "category"
    PRODUCT = "product"
    SERVICE_REQUEST = "serviceRequest"
    SERVICE_REQUEST_FOLLOW_UP = "serviceRequestFollowUp"
    WAREHOUSE = "warehouse"
    SPARE_PART = "sparePart"
    INVENTORY = "inventory"
    TRANSFER = "transfer"
    ACTIVITY = "activity"


@dataclass(frozen=True, slots=True)
class Actor:
    """Authenticated identity for the lifetime of one session."""
    id: Any
    role: str
    center_id: Any | None = None
    warehouse_id: Any | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


@dataclass(frozen=True, slots=True)
class ScopingFields:
    """The only record fields the scoping authority looks at."""
    center_id: str | None = None
    technician_id: str | None = None
    customer_id: str | None = None
    manager_id: str | None = None

    @classmethod
    def from_record(cls, record: object) -> "ScopingFields":
        """Narrow an ORM object, mapping or schema to its scoping projection."""
        if isinstance(record, ScopingFields):
            return record
        return cls(
            center_id=_read_field(record, "center_id", "centerId"),
            technician_id=_read_field(record, "technician_id", "technicianId"),
            customer_id=_read_field(record, "customer_id", "customerId"),
            manager_id=_read_field(record, "manager_id", "managerId"),
        )


@dataclass(frozen=True, slots=True)
class ScopingRule:
    record_field: str
    actor_field: str


# (role, resource type) -> ownership field on the record and matching actor field.
# Pairs without an entry are not row-scoped.
SCOPING_RULES: Final[Mapping[tuple[str, str], ScopingRule]] = MappingProxyType({
    (Role.MANAGER.value, ResourceType.USER.value): ScopingRule("center_id", "center_id"),
    (Role.MANAGER.value, ResourceType.SERVICE_REQUEST.value): ScopingRule("center_id", "center_id"),
    (Role.MANAGER.value, ResourceType.WAREHOUSE.value): ScopingRule("center_id", "center_id"),
    (Role.TECHNICIAN.value, ResourceType.SERVICE_REQUEST.value): ScopingRule("technician_id", "id"),
    (Role.WAREHOUSE_MANAGER.value, ResourceType.WAREHOUSE.value): ScopingRule("manager_id", "id"),
    (Role.CUSTOMER.value, ResourceType.SERVICE_REQUEST.value): ScopingRule("customer_id", "id"),
})


def _normalize(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, Enum):
        value = value.value
    text = str(value)
    return text or None


def _read_field(record: object, snake: str, camel: str) -> str | None:
    if isinstance(record, Mapping):
        value = record.get(snake, record.get(camel))
    else:
        value = getattr(record, snake, None)
        if value is None:
            value = getattr(record, camel, None)
    return _normalize(value)


def _role_key(role: object) -> str | None:
    if isinstance(role, Enum):
        role = role.value
    return role if isinstance(role, str) else None


def _type_key(resource_type: object) -> str | None:
    if isinstance(resource_type, Enum):
        resource_type = resource_type.value
    return resource_type if isinstance(resource_type, str) else None


def can_access_record(actor: Actor | None, resource_type: object, record: object) -> bool:
    """
    Is ``record`` inside ``actor``'s scope for ``resource_type``?

    Admin sees everything. A record whose ownership field is absent is
    unowned and passes. Unknown roles and missing actors fail closed.
    """
    if actor is None:
        return False
    role = _role_key(actor.role)
    if role is None or role not in ALL_ROLES:
        return False
    if role == Role.ADMIN.value:
        return True

    rule = SCOPING_RULES.get((role, _type_key(resource_type)))
    if rule is None:
        return True

    owner = getattr(ScopingFields.from_record(record), rule.record_field)
    if owner is None:
        return True
    return owner == _normalize(getattr(actor, rule.actor_field, None))


def filter_for_actor(actor: Actor | None, resource_type: object, records: Iterable[T]) -> list[T]:
    """Order-preserving visibility filter for list endpoints."""
    if actor is not None and _role_key(actor.role) == Role.ADMIN.value:
        return list(records)
    return [record for record in records if can_access_record(actor, resource_type, record)]


def scoping_rule(actor: Actor | None, resource_type: object) -> ScopingRule | None:
    if actor is None:
        return None
    return SCOPING_RULES.get((_role_key(actor.role), _type_key(resource_type)))


def owned_values(actor: Actor | None, resource_type: object) -> dict[str, Any]:
    """Ownership fields a new record must carry to stay inside ``actor``'s scope."""
    rule = scoping_rule(actor, resource_type)
    if rule is None:
        return {}
    value = getattr(actor, rule.actor_field, None)
    return {} if value is None else {rule.record_field: value}
