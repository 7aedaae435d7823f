"""Spare parts, stock levels and the low-stock report."""
import uuid

from fastapi import APIRouter, Depends, Request, status

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.guards import authorize_record
from ..auth.rbac_contract import Role
from ..auth.scoping import Actor, ResourceType, filter_for_actor
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..errors import ConflictError
from ..schemas.catalog import SparePartCreate, SparePartRead, SparePartUpdate
from ..schemas.warehouse import InventoryItemCreate, InventoryItemRead, InventoryItemUpdate
from ..services.activity import log_activity
from .common import changes_of, get_or_404

router = APIRouter(prefix="/api", tags=["inventory"])


@router.get("/spare-parts", response_model=list[SparePartRead])
async def list_spare_parts(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/spare-parts")),
    storage: Storage = Depends(get_storage),
) -> list[SparePartRead]:
    return [SparePartRead.model_validate(part) for part in await storage.spare_parts.list()]


@router.post("/spare-parts", response_model=SparePartRead, status_code=status.HTTP_201_CREATED)
async def create_spare_part(
    payload: SparePartCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/spare-parts")),
    storage: Storage = Depends(get_storage),
) -> SparePartRead:
    if await storage.spare_parts.list(part_number=payload.part_number, limit=1):
        raise ConflictError("Part number already exists")
    part = await storage.spare_parts.create(**payload.model_dump())
    await log_activity(
        storage, actor, "create", ResourceType.SPARE_PART.value, part.id, f"Created spare part {part.part_number}"
    )
    await storage.commit()
    return SparePartRead.model_validate(part)


@router.put("/spare-parts/{part_id}", response_model=SparePartRead)
async def update_spare_part(
    part_id: uuid.UUID,
    payload: SparePartUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/spare-parts/{part_id}")),
    storage: Storage = Depends(get_storage),
) -> SparePartRead:
    part = await get_or_404(storage.spare_parts, part_id, "Spare part")
    await authorize_record(request, storage, actor, ResourceType.SPARE_PART, part)
    part = await storage.spare_parts.update(part, **changes_of(payload))
    await log_activity(
        storage, actor, "update", ResourceType.SPARE_PART.value, part.id, f"Updated spare part {part.part_number}"
    )
    await storage.commit()
    return SparePartRead.model_validate(part)


@router.get("/inventory", response_model=list[InventoryItemRead])
async def list_inventory(
    warehouse_id: uuid.UUID | None = None,
    actor: Actor = Depends(require_enforced_permission("GET", "/api/inventory")),
    storage: Storage = Depends(get_storage),
) -> list[InventoryItemRead]:
    # Warehouse managers land on their own warehouse unless they ask for another
    if warehouse_id is None and actor.role == Role.WAREHOUSE_MANAGER:
        warehouse_id = actor.warehouse_id
    filters = {"warehouse_id": warehouse_id} if warehouse_id is not None else {}
    items = await storage.inventory.list(**filters)
    return [
        InventoryItemRead.model_validate(item)
        for item in filter_for_actor(actor, ResourceType.INVENTORY, items)
    ]


@router.post("/inventory", response_model=InventoryItemRead, status_code=status.HTTP_201_CREATED)
async def create_inventory_item(
    payload: InventoryItemCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/inventory")),
    storage: Storage = Depends(get_storage),
) -> InventoryItemRead:
    await get_or_404(storage.warehouses, payload.warehouse_id, "Warehouse")
    await get_or_404(storage.spare_parts, payload.spare_part_id, "Spare part")
    existing = await storage.inventory.list(
        warehouse_id=payload.warehouse_id, spare_part_id=payload.spare_part_id, limit=1
    )
    if existing:
        raise ConflictError("Spare part is already stocked in this warehouse")

    item = await storage.inventory.create(**payload.model_dump())
    await log_activity(
        storage, actor, "create", ResourceType.INVENTORY.value, item.id, f"Stocked {item.quantity} units"
    )
    await storage.commit()
    return InventoryItemRead.model_validate(item)


@router.put("/inventory/{item_id}", response_model=InventoryItemRead)
async def update_inventory_item(
    item_id: uuid.UUID,
    payload: InventoryItemUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/inventory/{item_id}")),
    storage: Storage = Depends(get_storage),
) -> InventoryItemRead:
    item = await get_or_404(storage.inventory, item_id, "Inventory item")
    await authorize_record(request, storage, actor, ResourceType.INVENTORY, item)
    changes = {key: value for key, value in changes_of(payload).items() if value is not None}
    item = await storage.inventory.update(item, **changes)
    await log_activity(
        storage, actor, "update", ResourceType.INVENTORY.value, item.id, f"Set stock to {item.quantity} units"
    )
    await storage.commit()
    return InventoryItemRead.model_validate(item)


@router.get("/reports/low-stock", response_model=list[InventoryItemRead])
async def low_stock_report(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/reports/low-stock")),
    storage: Storage = Depends(get_storage),
) -> list[InventoryItemRead]:
    items = filter_for_actor(actor, ResourceType.INVENTORY, await storage.inventory.list())
    return [
        InventoryItemRead.model_validate(item)
        for item in items
        if item.quantity <= item.min_quantity
    ]
