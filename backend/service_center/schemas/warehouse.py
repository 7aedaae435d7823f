import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

TransferStatus = Literal["pending", "approved", "rejected", "completed"]


class WarehouseBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    location: str = Field(..., min_length=1)
    manager_id: uuid.UUID | None = None
    center_id: uuid.UUID | None = None


class WarehouseCreate(WarehouseBase):
    pass


class WarehouseUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    location: str | None = Field(None, min_length=1)
    manager_id: uuid.UUID | None = None
    center_id: uuid.UUID | None = None


class WarehouseRead(WarehouseBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True


class InventoryItemCreate(BaseModel):
    warehouse_id: uuid.UUID
    spare_part_id: uuid.UUID
    quantity: int = Field(0, ge=0)
    min_quantity: int = Field(5, ge=0)


class InventoryItemUpdate(BaseModel):
    quantity: int | None = Field(None, ge=0)
    min_quantity: int | None = Field(None, ge=0)


class InventoryItemRead(BaseModel):
    id: uuid.UUID
    warehouse_id: uuid.UUID
    spare_part_id: uuid.UUID
    quantity: int
    min_quantity: int
    updated_at: datetime

    class Config:
        from_attributes = True


class TransferCreate(BaseModel):
    from_warehouse_id: uuid.UUID
    to_warehouse_id: uuid.UUID
    spare_part_id: uuid.UUID
    quantity: int = Field(..., gt=0)
    reason: str | None = None
    notes: str | None = None


class TransferUpdate(BaseModel):
    status: TransferStatus | None = None
    notes: str | None = None


class TransferRead(BaseModel):
    id: uuid.UUID
    from_warehouse_id: uuid.UUID
    to_warehouse_id: uuid.UUID
    spare_part_id: uuid.UUID
    quantity: int
    status: str
    requested_by: uuid.UUID
    approved_by: uuid.UUID | None = None
    reason: str | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
