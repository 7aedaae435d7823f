import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, validates

from ..auth.rbac_contract import Role, validate_role
from .base import Base

USER_STATUSES = ("active", "inactive", "pending")


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'inactive', 'pending')",
            name="valid_user_status",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    email: Mapped[str] = mapped_column(
        String(255), unique=True, nullable=False, index=True
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50))
    address: Mapped[str | None] = mapped_column(Text)
    role: Mapped[str] = mapped_column(
        String(32), nullable=False, default=Role.CUSTOMER.value, index=True
    )
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending"
    )
    center_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True), nullable=True, index=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @validates("role")
    def check_role(self, key: str, value: str) -> str:
        if isinstance(value, Role):
            value = value.value
        validate_role(value)
        return value

    @validates("status")
    def check_status(self, key: str, value: str) -> str:
        if value not in USER_STATUSES:
            raise ValueError(
                f"Invalid status '{value}'. Must be one of: {', '.join(USER_STATUSES)}"
            )
        return value
