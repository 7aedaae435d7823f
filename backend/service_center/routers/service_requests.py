import uuid
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query, Request, Response, status

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.guards import authorize_assignment, authorize_changes, authorize_record
from ..auth.scoping import Actor, ResourceType, filter_for_actor, owned_values
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..errors import ConflictError, ValidationError
from ..schemas.service_request import (
    FollowUpCreate,
    FollowUpRead,
    ServiceRequestCreate,
    ServiceRequestRead,
    ServiceRequestUpdate,
)
from ..services.activity import log_activity
from .common import changes_of, get_or_404

router = APIRouter(prefix="/api/service-requests", tags=["service-requests"])


def generate_request_number(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"SR-{now:%Y%m%d}-{uuid.uuid4().hex[:6].upper()}"


@router.get("", response_model=list[ServiceRequestRead])
async def list_service_requests(
    status_filter: str | None = Query(None, alias="status"),
    actor: Actor = Depends(require_enforced_permission("GET", "/api/service-requests")),
    storage: Storage = Depends(get_storage),
) -> list[ServiceRequestRead]:
    filters = {"status": status_filter} if status_filter else {}
    records = await storage.service_requests.list(newest_first=True, **filters)
    return [
        ServiceRequestRead.model_validate(record)
        for record in filter_for_actor(actor, ResourceType.SERVICE_REQUEST, records)
    ]


@router.get("/{request_id}", response_model=ServiceRequestRead)
async def get_service_request(
    request_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("GET", "/api/service-requests/{request_id}")),
    storage: Storage = Depends(get_storage),
) -> ServiceRequestRead:
    record = await get_or_404(storage.service_requests, request_id, "Service request")
    await authorize_record(request, storage, actor, ResourceType.SERVICE_REQUEST, record)
    return ServiceRequestRead.model_validate(record)


@router.post("", response_model=ServiceRequestRead, status_code=status.HTTP_201_CREATED)
async def create_service_request(
    payload: ServiceRequestCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/service-requests")),
    storage: Storage = Depends(get_storage),
) -> ServiceRequestRead:
    values = payload.model_dump()
    values.update(owned_values(actor, ResourceType.SERVICE_REQUEST))
    if values["customer_id"] is None:
        raise ValidationError("customer_id is required")
    if values["center_id"] is None:
        raise ValidationError("center_id is required")

    if values["request_number"] is None:
        values["request_number"] = generate_request_number()
    elif await storage.service_requests.list(request_number=values["request_number"], limit=1):
        raise ConflictError("Request number already exists")

    await get_or_404(storage.products, values["product_id"], "Product")
    record = await storage.service_requests.create(status="pending", **values)
    await log_activity(
        storage,
        actor,
        "create",
        ResourceType.SERVICE_REQUEST.value,
        record.id,
        f"Created service request {record.request_number}",
    )
    await storage.commit()
    return ServiceRequestRead.model_validate(record)


@router.put("/{request_id}", response_model=ServiceRequestRead)
async def update_service_request(
    request_id: uuid.UUID,
    payload: ServiceRequestUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/service-requests/{request_id}")),
    storage: Storage = Depends(get_storage),
) -> ServiceRequestRead:
    record = await get_or_404(storage.service_requests, request_id, "Service request")
    await authorize_record(request, storage, actor, ResourceType.SERVICE_REQUEST, record)

    changes = changes_of(payload)
    for required in ("status", "center_id", "device_name", "issue"):
        if required in changes and changes[required] is None:
            changes.pop(required)
    await authorize_changes(request, storage, actor, ResourceType.SERVICE_REQUEST, record, changes)

    if changes.get("status") == "completed" and record.status != "completed":
        changes["completed_at"] = datetime.now(timezone.utc)

    record = await storage.service_requests.update(record, **changes)
    await log_activity(
        storage,
        actor,
        "update",
        ResourceType.SERVICE_REQUEST.value,
        record.id,
        f"Updated service request {record.request_number}",
    )
    await storage.commit()
    return ServiceRequestRead.model_validate(record)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_service_request(
    request_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("DELETE", "/api/service-requests/{request_id}")),
    storage: Storage = Depends(get_storage),
) -> Response:
    record = await get_or_404(storage.service_requests, request_id, "Service request")
    await authorize_record(request, storage, actor, ResourceType.SERVICE_REQUEST, record)
    await storage.service_requests.delete(record)
    await log_activity(
        storage,
        actor,
        "delete",
        ResourceType.SERVICE_REQUEST.value,
        request_id,
        f"Deleted service request {record.request_number}",
    )
    await storage.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{request_id}/follow-ups", response_model=list[FollowUpRead])
async def list_follow_ups(
    request_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(
        require_enforced_permission("GET", "/api/service-requests/{request_id}/follow-ups")
    ),
    storage: Storage = Depends(get_storage),
) -> list[FollowUpRead]:
    parent = await get_or_404(storage.service_requests, request_id, "Service request")
    await authorize_record(request, storage, actor, ResourceType.SERVICE_REQUEST, parent)
    follow_ups = await storage.follow_ups.list(service_request_id=parent.id)
    return [FollowUpRead.model_validate(follow_up) for follow_up in follow_ups]


@router.post(
    "/{request_id}/follow-ups",
    response_model=FollowUpRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_follow_up(
    request_id: uuid.UUID,
    payload: FollowUpCreate,
    request: Request,
    actor: Actor = Depends(
        require_enforced_permission("POST", "/api/service-requests/{request_id}/follow-ups")
    ),
    storage: Storage = Depends(get_storage),
) -> FollowUpRead:
    parent = await get_or_404(storage.service_requests, request_id, "Service request")
    await authorize_record(request, storage, actor, ResourceType.SERVICE_REQUEST, parent)
    await authorize_assignment(request, storage, actor, parent)

    follow_up = await storage.follow_ups.create(
        service_request_id=parent.id,
        technician_id=actor.id,
        follow_up_text=payload.follow_up_text,
    )
    await log_activity(
        storage,
        actor,
        "create",
        ResourceType.SERVICE_REQUEST_FOLLOW_UP.value,
        follow_up.id,
        f"Added follow-up to service request {parent.request_number}",
    )
    await storage.commit()
    return FollowUpRead.model_validate(follow_up)
