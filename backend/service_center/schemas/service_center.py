import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class ServiceCenterBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)
    manager_id: uuid.UUID | None = None


class ServiceCenterCreate(ServiceCenterBase):
    is_active: bool = True


class ServiceCenterUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    address: str | None = Field(None, min_length=1)
    phone: str | None = Field(None, max_length=50)
    email: str | None = Field(None, max_length=255)
    manager_id: uuid.UUID | None = None
    is_active: bool | None = None


class ServiceCenterRead(ServiceCenterBase):
    id: uuid.UUID
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
