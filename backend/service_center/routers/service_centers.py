import uuid

from fastapi import APIRouter, Depends, Request, Response, status

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.guards import authorize_record
from ..auth.scoping import Actor, ResourceType, filter_for_actor
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..schemas.service_center import ServiceCenterCreate, ServiceCenterRead, ServiceCenterUpdate
from ..services.activity import log_activity
from .common import changes_of, get_or_404

router = APIRouter(prefix="/api/service-centers", tags=["service-centers"])


@router.get("", response_model=list[ServiceCenterRead])
async def list_centers(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/service-centers")),
    storage: Storage = Depends(get_storage),
) -> list[ServiceCenterRead]:
    centers = await storage.centers.list()
    return [
        ServiceCenterRead.model_validate(center)
        for center in filter_for_actor(actor, ResourceType.SERVICE_CENTER, centers)
    ]


@router.get("/{center_id}", response_model=ServiceCenterRead)
async def get_center(
    center_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("GET", "/api/service-centers/{center_id}")),
    storage: Storage = Depends(get_storage),
) -> ServiceCenterRead:
    center = await get_or_404(storage.centers, center_id, "Service center")
    await authorize_record(request, storage, actor, ResourceType.SERVICE_CENTER, center)
    return ServiceCenterRead.model_validate(center)


@router.post("", response_model=ServiceCenterRead, status_code=status.HTTP_201_CREATED)
async def create_center(
    payload: ServiceCenterCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/service-centers")),
    storage: Storage = Depends(get_storage),
) -> ServiceCenterRead:
    center = await storage.centers.create(**payload.model_dump())
    await log_activity(
        storage, actor, "create", ResourceType.SERVICE_CENTER.value, center.id, f"Created service center {center.name}"
    )
    await storage.commit()
    return ServiceCenterRead.model_validate(center)


@router.put("/{center_id}", response_model=ServiceCenterRead)
async def update_center(
    center_id: uuid.UUID,
    payload: ServiceCenterUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/service-centers/{center_id}")),
    storage: Storage = Depends(get_storage),
) -> ServiceCenterRead:
    center = await get_or_404(storage.centers, center_id, "Service center")
    await authorize_record(request, storage, actor, ResourceType.SERVICE_CENTER, center)
    center = await storage.centers.update(center, **changes_of(payload))
    await log_activity(
        storage, actor, "update", ResourceType.SERVICE_CENTER.value, center.id, f"Updated service center {center.name}"
    )
    await storage.commit()
    return ServiceCenterRead.model_validate(center)


@router.delete("/{center_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_center(
    center_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("DELETE", "/api/service-centers/{center_id}")),
    storage: Storage = Depends(get_storage),
) -> Response:
    center = await get_or_404(storage.centers, center_id, "Service center")
    await authorize_record(request, storage, actor, ResourceType.SERVICE_CENTER, center)
    await storage.centers.delete(center)
    await log_activity(
        storage, actor, "delete", ResourceType.SERVICE_CENTER.value, center_id, f"Deleted service center {center.name}"
    )
    await storage.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
