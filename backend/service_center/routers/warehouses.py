import uuid

from fastapi import APIRouter, Depends, Request, Response, status

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.guards import authorize_changes, authorize_record
from ..auth.scoping import Actor, ResourceType, filter_for_actor, owned_values
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..schemas.warehouse import WarehouseCreate, WarehouseRead, WarehouseUpdate
from ..services.activity import log_activity
from .common import changes_of, get_or_404

router = APIRouter(prefix="/api/warehouses", tags=["warehouses"])


@router.get("", response_model=list[WarehouseRead])
async def list_warehouses(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/warehouses")),
    storage: Storage = Depends(get_storage),
) -> list[WarehouseRead]:
    warehouses = await storage.warehouses.list()
    return [
        WarehouseRead.model_validate(warehouse)
        for warehouse in filter_for_actor(actor, ResourceType.WAREHOUSE, warehouses)
    ]


@router.get("/{warehouse_id}", response_model=WarehouseRead)
async def get_warehouse(
    warehouse_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("GET", "/api/warehouses/{warehouse_id}")),
    storage: Storage = Depends(get_storage),
) -> WarehouseRead:
    warehouse = await get_or_404(storage.warehouses, warehouse_id, "Warehouse")
    await authorize_record(request, storage, actor, ResourceType.WAREHOUSE, warehouse)
    return WarehouseRead.model_validate(warehouse)


@router.post("", response_model=WarehouseRead, status_code=status.HTTP_201_CREATED)
async def create_warehouse(
    payload: WarehouseCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/warehouses")),
    storage: Storage = Depends(get_storage),
) -> WarehouseRead:
    values = payload.model_dump()
    values.update(owned_values(actor, ResourceType.WAREHOUSE))
    warehouse = await storage.warehouses.create(**values)
    await log_activity(
        storage, actor, "create", ResourceType.WAREHOUSE.value, warehouse.id, f"Created warehouse {warehouse.name}"
    )
    await storage.commit()
    return WarehouseRead.model_validate(warehouse)


@router.put("/{warehouse_id}", response_model=WarehouseRead)
async def update_warehouse(
    warehouse_id: uuid.UUID,
    payload: WarehouseUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/warehouses/{warehouse_id}")),
    storage: Storage = Depends(get_storage),
) -> WarehouseRead:
    warehouse = await get_or_404(storage.warehouses, warehouse_id, "Warehouse")
    await authorize_record(request, storage, actor, ResourceType.WAREHOUSE, warehouse)
    changes = changes_of(payload)
    await authorize_changes(request, storage, actor, ResourceType.WAREHOUSE, warehouse, changes)
    warehouse = await storage.warehouses.update(warehouse, **changes)
    await log_activity(
        storage, actor, "update", ResourceType.WAREHOUSE.value, warehouse.id, f"Updated warehouse {warehouse.name}"
    )
    await storage.commit()
    return WarehouseRead.model_validate(warehouse)


@router.delete("/{warehouse_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_warehouse(
    warehouse_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("DELETE", "/api/warehouses/{warehouse_id}")),
    storage: Storage = Depends(get_storage),
) -> Response:
    warehouse = await get_or_404(storage.warehouses, warehouse_id, "Warehouse")
    await authorize_record(request, storage, actor, ResourceType.WAREHOUSE, warehouse)
    await storage.warehouses.delete(warehouse)
    await log_activity(
        storage, actor, "delete", ResourceType.WAREHOUSE.value, warehouse_id, f"Deleted warehouse {warehouse.name}"
    )
    await storage.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
