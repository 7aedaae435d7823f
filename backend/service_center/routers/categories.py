"""Catalog endpoints. Categories and products share the "categories" resource."""
import uuid

from fastapi import APIRouter, Depends, Request, Response, status

from ..auth.enforcement_matrix import require_enforced_permission
from ..auth.guards import authorize_record
from ..auth.scoping import Actor, ResourceType
from ..dependencies import get_storage
from ..domain.ports.storage import Storage
from ..schemas.catalog import (
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    ProductCreate,
    ProductRead,
    ProductUpdate,
)
from ..services.activity import log_activity
from .common import changes_of, get_or_404

router = APIRouter(prefix="/api", tags=["catalog"])


@router.get("/categories", response_model=list[CategoryRead])
async def list_categories(
    actor: Actor = Depends(require_enforced_permission("GET", "/api/categories")),
    storage: Storage = Depends(get_storage),
) -> list[CategoryRead]:
    return [CategoryRead.model_validate(category) for category in await storage.categories.list()]


@router.post("/categories", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    payload: CategoryCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/categories")),
    storage: Storage = Depends(get_storage),
) -> CategoryRead:
    category = await storage.categories.create(**payload.model_dump())
    await log_activity(
        storage, actor, "create", ResourceType.CATEGORY.value, category.id, f"Created category {category.name}"
    )
    await storage.commit()
    return CategoryRead.model_validate(category)


@router.put("/categories/{category_id}", response_model=CategoryRead)
async def update_category(
    category_id: uuid.UUID,
    payload: CategoryUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/categories/{category_id}")),
    storage: Storage = Depends(get_storage),
) -> CategoryRead:
    category = await get_or_404(storage.categories, category_id, "Category")
    await authorize_record(request, storage, actor, ResourceType.CATEGORY, category)
    category = await storage.categories.update(category, **changes_of(payload))
    await log_activity(
        storage, actor, "update", ResourceType.CATEGORY.value, category.id, f"Updated category {category.name}"
    )
    await storage.commit()
    return CategoryRead.model_validate(category)


@router.delete("/categories/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category(
    category_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("DELETE", "/api/categories/{category_id}")),
    storage: Storage = Depends(get_storage),
) -> Response:
    category = await get_or_404(storage.categories, category_id, "Category")
    await authorize_record(request, storage, actor, ResourceType.CATEGORY, category)
    await storage.categories.delete(category)
    await log_activity(
        storage, actor, "delete", ResourceType.CATEGORY.value, category_id, f"Deleted category {category.name}"
    )
    await storage.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/products", response_model=list[ProductRead])
async def list_products(
    category_id: uuid.UUID | None = None,
    actor: Actor = Depends(require_enforced_permission("GET", "/api/products")),
    storage: Storage = Depends(get_storage),
) -> list[ProductRead]:
    filters = {"category_id": category_id} if category_id is not None else {}
    return [ProductRead.model_validate(product) for product in await storage.products.list(**filters)]


@router.post("/products", response_model=ProductRead, status_code=status.HTTP_201_CREATED)
async def create_product(
    payload: ProductCreate,
    actor: Actor = Depends(require_enforced_permission("POST", "/api/products")),
    storage: Storage = Depends(get_storage),
) -> ProductRead:
    await get_or_404(storage.categories, payload.category_id, "Category")
    product = await storage.products.create(**payload.model_dump())
    await log_activity(
        storage, actor, "create", ResourceType.PRODUCT.value, product.id, f"Created product {product.name}"
    )
    await storage.commit()
    return ProductRead.model_validate(product)


@router.put("/products/{product_id}", response_model=ProductRead)
async def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("PUT", "/api/products/{product_id}")),
    storage: Storage = Depends(get_storage),
) -> ProductRead:
    product = await get_or_404(storage.products, product_id, "Product")
    await authorize_record(request, storage, actor, ResourceType.PRODUCT, product)
    product = await storage.products.update(product, **changes_of(payload))
    await log_activity(
        storage, actor, "update", ResourceType.PRODUCT.value, product.id, f"Updated product {product.name}"
    )
    await storage.commit()
    return ProductRead.model_validate(product)


@router.delete("/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: uuid.UUID,
    request: Request,
    actor: Actor = Depends(require_enforced_permission("DELETE", "/api/products/{product_id}")),
    storage: Storage = Depends(get_storage),
) -> Response:
    product = await get_or_404(storage.products, product_id, "Product")
    await authorize_record(request, storage, actor, ResourceType.PRODUCT, product)
    await storage.products.delete(product)
    await log_activity(
        storage, actor, "delete", ResourceType.PRODUCT.value, product_id, f"Deleted product {product.name}"
    )
    await storage.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
