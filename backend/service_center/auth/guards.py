"""
Request-layer enforcement of the RBAC core.

Order for every protected endpoint:
1. resolve the actor                     -> 401 (get_current_actor)
2. has_permission(role, resource, action) -> 403 (require_permission)
3. single record: can_access_record       -> 403 (authorize_record)
4. list endpoint: filter_for_actor

Steps 3 and 4 assume step 2 already passed; row scoping never stands in for
the resource check.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Mapping

from fastapi import Depends, Request

from ..dependencies import get_current_actor, get_storage
from ..domain.ports.storage import Storage
from ..errors import PermissionError, RecordAccessError
from ..services.activity import record_denial
from .permissions import has_permission
from .rbac_contract import Action, Resource, Role
from .scoping import Actor, ResourceType, ScopingFields, can_access_record, scoping_rule

logger = logging.getLogger("service_center.rbac")


def require_permission(resource: Resource, action: Action) -> Callable:
    """
    Dependency enforcing the matrix for one (resource, action).

    Returns the resolved Actor so handlers can scope rows with it.
    Denials are logged and recorded in the activity log.
    """
    async def dependency(
        request: Request,
        actor: Actor = Depends(get_current_actor),
        storage: Storage = Depends(get_storage),
    ) -> Actor:
        if has_permission(actor.role, resource, action):
            return actor

        logger.warning(
            "RBAC deny role=%s resource=%s action=%s method=%s path=%s",
            actor.role,
            resource.value,
            action.value,
            request.method,
            request.url.path,
        )
        await record_denial(
            storage,
            actor,
            entity_type=resource.value,
            entity_id=None,
            description=f"{request.method} {request.url.path} requires {resource.value}:{action.value}",
        )
        raise PermissionError(
            f"Permission denied: {resource.value}:{action.value} required",
            details={"resource": resource.value, "action": action.value},
        )

    return dependency


async def authorize_record(
    request: Request,
    storage: Storage,
    actor: Actor,
    resource_type: ResourceType,
    record: Any,
) -> None:
    """Row-level precondition for reading, updating or deleting one record."""
    if can_access_record(actor, resource_type, record):
        return
    await _deny_record(request, storage, actor, resource_type, getattr(record, "id", None), "outside actor scope")


async def authorize_changes(
    request: Request,
    storage: Storage,
    actor: Actor,
    resource_type: ResourceType,
    record: Any,
    changes: Mapping[str, Any],
) -> None:
    """
    An update must leave the record inside the actor's scope.

    Clearing the ownership field would make the record unowned, which every
    actor can see, so only an admin may do it.
    """
    rule = scoping_rule(actor, resource_type)
    if (
        rule is not None
        and not actor.is_admin
        and rule.record_field in changes
        and changes[rule.record_field] is None
    ):
        await _deny_record(
            request,
            storage,
            actor,
            resource_type,
            getattr(record, "id", None),
            f"clears {rule.record_field}",
        )

    current = ScopingFields.from_record(record)
    merged = {
        "center_id": current.center_id,
        "technician_id": current.technician_id,
        "customer_id": current.customer_id,
        "manager_id": current.manager_id,
    }
    merged.update({key: value for key, value in changes.items() if key in merged})
    await authorize_record(request, storage, actor, resource_type, _Projection(record, merged))


async def _deny_record(
    request: Request,
    storage: Storage,
    actor: Actor,
    resource_type: ResourceType,
    record_id: Any,
    reason: str,
) -> None:
    logger.warning(
        "RBAC row deny role=%s resource_type=%s record=%s reason=%s method=%s path=%s",
        actor.role,
        resource_type.value,
        record_id,
        reason,
        request.method,
        request.url.path,
    )
    await record_denial(
        storage,
        actor,
        entity_type=resource_type.value,
        entity_id=record_id,
        description=f"{request.method} {request.url.path} {reason}",
    )
    raise RecordAccessError(details={"resource_type": resource_type.value})


class _Projection:
    """A record's id plus its would-be scoping fields, for denial logging."""

    def __init__(self, record: Any, fields: Mapping[str, Any]) -> None:
        self.id = getattr(record, "id", None)
        for key, value in fields.items():
            setattr(self, key, value)


async def authorize_assignment(
    request: Request,
    storage: Storage,
    actor: Actor,
    service_request: Any,
) -> None:
    """Technicians work only on requests explicitly assigned to them."""
    if actor.role != Role.TECHNICIAN:
        return
    assigned = ScopingFields.from_record(service_request).technician_id
    if assigned is not None and assigned == str(actor.id):
        return

    logger.warning(
        "RBAC assignment deny role=%s record=%s method=%s path=%s",
        actor.role,
        getattr(service_request, "id", None),
        request.method,
        request.url.path,
    )
    await record_denial(
        storage,
        actor,
        entity_type=ResourceType.SERVICE_REQUEST.value,
        entity_id=getattr(service_request, "id", None),
        description=f"{request.method} {request.url.path} on an unassigned request",
    )
    raise RecordAccessError("Service request is not assigned to you")
