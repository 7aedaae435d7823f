import uuid
from typing import Any, Generic, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.ports.storage import Storage as StoragePort
from ..models import (
    ActivityLog,
    Base,
    Category,
    Customer,
    InventoryItem,
    PartsTransfer,
    Product,
    ServiceCenter,
    ServiceRequest,
    ServiceRequestFollowUp,
    SparePart,
    User,
    Warehouse,
)

ModelT = TypeVar("ModelT", bound=Base)


class SqlRecordRepository(Generic[ModelT]):
    def __init__(self, session: AsyncSession, model: type[ModelT]) -> None:
        self._session = session
        self._model = model

    async def get(self, record_id: uuid.UUID, *, for_update: bool = False) -> ModelT | None:
        if not for_update:
            return await self._session.get(self._model, record_id)
        stmt = (
            select(self._model)
            .where(self._model.id == record_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await self._session.execute(stmt)
        return result.scalars().first()

    async def list(
        self,
        *,
        limit: int | None = None,
        newest_first: bool = False,
        for_update: bool = False,
        **filters: Any,
    ) -> list[ModelT]:
        query = select(self._model)
        for field, value in filters.items():
            query = query.where(getattr(self._model, field) == value)
        if newest_first and hasattr(self._model, "created_at"):
            query = query.order_by(self._model.created_at.desc())
        if limit is not None:
            query = query.limit(limit)
        if for_update:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self._session.execute(query)
        return list(result.scalars().all())

    async def create(self, **values: Any) -> ModelT:
        record = self._model(**values)
        self._session.add(record)
        await self._session.flush()
        await self._session.refresh(record)
        return record

    async def update(self, record: ModelT, **values: Any) -> ModelT:
        for field, value in values.items():
            setattr(record, field, value)
        await self._session.flush()
        await self._session.refresh(record)
        return record

    async def delete(self, record: ModelT) -> None:
        await self._session.delete(record)
        await self._session.flush()


class SqlStorage(StoragePort):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self.users = SqlRecordRepository(session, User)
        self.centers = SqlRecordRepository(session, ServiceCenter)
        self.customers = SqlRecordRepository(session, Customer)
        self.categories = SqlRecordRepository(session, Category)
        self.products = SqlRecordRepository(session, Product)
        self.spare_parts = SqlRecordRepository(session, SparePart)
        self.service_requests = SqlRecordRepository(session, ServiceRequest)
        self.follow_ups = SqlRecordRepository(session, ServiceRequestFollowUp)
        self.warehouses = SqlRecordRepository(session, Warehouse)
        self.inventory = SqlRecordRepository(session, InventoryItem)
        self.transfers = SqlRecordRepository(session, PartsTransfer)
        self.activities = SqlRecordRepository(session, ActivityLog)

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
