import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

ServiceRequestStatus = Literal["pending", "in_progress", "completed", "cancelled"]


class ServiceRequestCreate(BaseModel):
    # Generated as SR-YYYYMMDD-XXXXXX when omitted
    request_number: str | None = Field(None, min_length=1, max_length=64)
    customer_id: uuid.UUID | None = None
    product_id: uuid.UUID
    device_name: str = Field(..., min_length=1, max_length=255)
    model: str | None = Field(None, max_length=255)
    issue: str = Field(..., min_length=1)
    center_id: uuid.UUID | None = None
    technician_id: uuid.UUID | None = None
    estimated_cost: int | None = Field(None, ge=0)
    notes: str | None = None


class ServiceRequestUpdate(BaseModel):
    device_name: str | None = Field(None, min_length=1, max_length=255)
    model: str | None = Field(None, max_length=255)
    issue: str | None = Field(None, min_length=1)
    status: ServiceRequestStatus | None = None
    center_id: uuid.UUID | None = None
    technician_id: uuid.UUID | None = None
    estimated_cost: int | None = Field(None, ge=0)
    actual_cost: int | None = Field(None, ge=0)
    notes: str | None = None


class ServiceRequestRead(BaseModel):
    id: uuid.UUID
    request_number: str
    customer_id: uuid.UUID
    product_id: uuid.UUID
    device_name: str
    model: str | None = None
    issue: str
    status: str
    center_id: uuid.UUID
    technician_id: uuid.UUID | None = None
    estimated_cost: int | None = None
    actual_cost: int | None = None
    notes: str | None = None
    created_at: datetime
    updated_at: datetime
    completed_at: datetime | None = None

    class Config:
        from_attributes = True


class FollowUpCreate(BaseModel):
    follow_up_text: str = Field(..., min_length=1)


class FollowUpRead(BaseModel):
    id: uuid.UUID
    service_request_id: uuid.UUID
    technician_id: uuid.UUID
    follow_up_text: str
    created_at: datetime

    class Config:
        from_attributes = True
