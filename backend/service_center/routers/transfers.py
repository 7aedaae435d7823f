import uuid
from typing import Any

from fastapi import APIRouter, Depends, Request, status

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.guards import authorize_record
from ..auth.scoping import Actor, ResourceType, filter_for_actor
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..errors import InsufficientStockError, InvalidTransitionError, ValidationError
from ..schemas.warehouse import TransferCreate, TransferRead, TransferUpdate
from ..services.activity import log_activity
from .common import get_or_404

router = APIRouter(prefix="/api/transfers", tags=["transfers"])

# status -> statuses it may move to
TRANSFER_TRANSITIONS: dict[str, frozenset[str]] = {
    "pending": frozenset({"approved", "rejected"}),
    "approved": frozenset({"completed", "rejected"}),
    "rejected": frozenset(),
    "completed": frozenset(),
}


async def _move_stock(storage: Storage, transfer: Any) -> None:
    """Apply a completed transfer to both warehouses' stock levels.

    Both stock rows are read locked; the caller holds the transfer lock.
    """
    source = await storage.inventory.list(
        warehouse_id=transfer.from_warehouse_id,
        spare_part_id=transfer.spare_part_id,
        limit=1,
        for_update=True,
    )
    if not source or source[0].quantity < transfer.quantity:
        raise InsufficientStockError(
            details={"spare_part_id": str(transfer.spare_part_id)},
        )
    await storage.inventory.update(source[0], quantity=source[0].quantity - transfer.quantity)

    target = await storage.inventory.list(
        warehouse_id=transfer.to_warehouse_id,
        spare_part_id=transfer.spare_part_id,
        limit=1,
        for_update=True,
    )
    if target:
        await storage.inventory.update(target[0], quantity=target[0].quantity + transfer.quantity)
    else:
        await storage.inventory.create(
            warehouse_id=transfer.to_warehouse_id,
            spare_part_id=transfer.spare_part_id,
            quantity=transfer.quantity,
        )


@router.get("", response_model=list[TransferRead])
async def list_transfers(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/transfers")),
    storage: Storage = Depends(get_storage),
) -> list[TransferRead]:
    transfers = await storage.transfers.list(newest_first=True)
    return [
        TransferRead.model_validate(transfer)
        for transfer in filter_for_actor(actor, ResourceType.TRANSFER, transfers)
    ]


@router.post("", response_model=TransferRead, status_code=status.HTTP_201_CREATED)
async def create_transfer(
    payload: TransferCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/transfers")),
    storage: Storage = Depends(get_storage),
) -> TransferRead:
    if payload.from_warehouse_id == payload.to_warehouse_id:
        raise ValidationError("Source and destination warehouse must differ")
    await get_or_404(storage.warehouses, payload.from_warehouse_id, "Source warehouse")
    await get_or_404(storage.warehouses, payload.to_warehouse_id, "Destination warehouse")
    await get_or_404(storage.spare_parts, payload.spare_part_id, "Spare part")

    transfer = await storage.transfers.create(
        status="pending",
        requested_by=actor.id,
        **payload.model_dump(),
    )
    await log_activity(
        storage,
        actor,
        "create",
        ResourceType.TRANSFER.value,
        transfer.id,
        f"Requested transfer of {transfer.quantity} units",
    )
    await storage.commit()
    return TransferRead.model_validate(transfer)


@router.put("/{transfer_id}", response_model=TransferRead)
async def update_transfer(
    transfer_id: uuid.UUID,
    payload: TransferUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/transfers/{transfer_id}")),
    storage: Storage = Depends(get_storage),
) -> TransferRead:
    # Locked so two concurrent completions cannot both see "approved"
    transfer = await get_or_404(storage.transfers, transfer_id, "Transfer", for_update=True)
    await authorize_record(request, storage, actor, ResourceType.TRANSFER, transfer)

    changes: dict[str, Any] = {}
    if payload.notes is not None:
        changes["notes"] = payload.notes
    if payload.status is not None and payload.status != transfer.status:
        if payload.status not in TRANSFER_TRANSITIONS.get(transfer.status, frozenset()):
            raise InvalidTransitionError(
                f"Cannot move transfer from '{transfer.status}' to '{payload.status}'"
            )
        changes["status"] = payload.status
        if payload.status == "approved":
            changes["approved_by"] = actor.id
        elif payload.status == "completed":
            await _move_stock(storage, transfer)

    transfer = await storage.transfers.update(transfer, **changes)
    await log_activity(
        storage,
        actor,
        "update",
        ResourceType.TRANSFER.value,
        transfer.id,
        f"Transfer is now {transfer.status}",
    )
    await storage.commit()
    return TransferRead.model_validate(transfer)
