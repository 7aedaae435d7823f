import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from ..auth.rbac_contract import Role

UserStatus = Literal["active", "inactive", "pending"]


class UserBase(BaseModel):
    email: str = Field(..., min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    full_name: str = Field(..., min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    address: str | None = None


class UserCreate(UserBase):
    role: Role = Role.CUSTOMER
    status: UserStatus = "active"
    center_id: uuid.UUID | None = None


class UserUpdate(BaseModel):
    full_name: str | None = Field(None, min_length=1, max_length=255)
    phone: str | None = Field(None, max_length=50)
    address: str | None = None
    role: Role | None = None
    status: UserStatus | None = None
    center_id: uuid.UUID | None = None


class UserRead(UserBase):
    id: uuid.UUID
    role: str
    status: str
    center_id: uuid.UUID | None = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
