import uuid

from fastapi import APIRouter, Depends, Request, Response, status

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.guards import authorize_record
from ..auth.scoping import Actor, ResourceType, filter_for_actor
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..schemas.customer import CustomerCreate, CustomerRead, CustomerUpdate
from ..services.activity import log_activity
from .common import changes_of, get_or_404

router = APIRouter(prefix="/api/customers", tags=["customers"])


@router.get("", response_model=list[CustomerRead])
async def list_customers(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/customers")),
    storage: Storage = Depends(get_storage),
) -> list[CustomerRead]:
    customers = await storage.customers.list(newest_first=True)
    return [
        CustomerRead.model_validate(customer)
        for customer in filter_for_actor(actor, ResourceType.CUSTOMER, customers)
    ]


@router.get("/{customer_id}", response_model=CustomerRead)
async def get_customer(
    customer_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("GET", "/api/customers/{customer_id}")),
    storage: Storage = Depends(get_storage),
) -> CustomerRead:
    customer = await get_or_404(storage.customers, customer_id, "Customer")
    await authorize_record(request, storage, actor, ResourceType.CUSTOMER, customer)
    return CustomerRead.model_validate(customer)


@router.post("", response_model=CustomerRead, status_code=status.HTTP_201_CREATED)
async def create_customer(
    payload: CustomerCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/customers")),
    storage: Storage = Depends(get_storage),
) -> CustomerRead:
    customer = await storage.customers.create(**payload.model_dump())
    await log_activity(
        storage, actor, "create", ResourceType.CUSTOMER.value, customer.id, f"Created customer {customer.full_name}"
    )
    await storage.commit()
    return CustomerRead.model_validate(customer)


@router.put("/{customer_id}", response_model=CustomerRead)
async def update_customer(
    customer_id: uuid.UUID,
    payload: CustomerUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/customers/{customer_id}")),
    storage: Storage = Depends(get_storage),
) -> CustomerRead:
    customer = await get_or_404(storage.customers, customer_id, "Customer")
    await authorize_record(request, storage, actor, ResourceType.CUSTOMER, customer)
    customer = await storage.customers.update(customer, **changes_of(payload))
    await log_activity(
        storage, actor, "update", ResourceType.CUSTOMER.value, customer.id, f"Updated customer {customer.full_name}"
    )
    await storage.commit()
    return CustomerRead.model_validate(customer)


@router.delete("/{customer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_customer(
    customer_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("DELETE", "/api/customers/{customer_id}")),
    storage: Storage = Depends(get_storage),
) -> Response:
    customer = await get_or_404(storage.customers, customer_id, "Customer")
    await authorize_record(request, storage, actor, ResourceType.CUSTOMER, customer)
    await storage.customers.delete(customer)
    await log_activity(
        storage, actor, "delete", ResourceType.CUSTOMER.value, customer_id, f"Deleted customer {customer.full_name}"
    )
    await storage.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
