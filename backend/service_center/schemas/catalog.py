import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None


class CategoryCreate(CategoryBase):
    pass


class CategoryUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None


class CategoryRead(CategoryBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True


class ProductBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    model: str | None = Field(None, max_length=255)
    category_id: uuid.UUID
    description: str | None = None


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    model: str | None = Field(None, max_length=255)
    category_id: uuid.UUID | None = None
    description: str | None = None


class ProductRead(ProductBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True


class SparePartBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    part_number: str = Field(..., min_length=1, max_length=100)
    category_id: uuid.UUID | None = None
    price: int | None = Field(None, ge=0)
    description: str | None = None


class SparePartCreate(SparePartBase):
    pass


class SparePartUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    category_id: uuid.UUID | None = None
    price: int | None = Field(None, ge=0)
    description: str | None = None


class SparePartRead(SparePartBase):
    id: uuid.UUID
    created_at: datetime

    class Config:
        from_attributes = True
