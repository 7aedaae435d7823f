from __future__ import annotations

import uuid
from typing import Any, Protocol, TypeVar

RecordT = TypeVar("RecordT")


class RecordRepository(Protocol[RecordT]):
    async def get(self, record_id: uuid.UUID, *, for_update: bool = False) -> RecordT | None:
        ...

    async def list(
        self,
        *,
        limit: int | None = None,
        newest_first: bool = False,
        for_update: bool = False,
        **filters: Any,
    ) -> list[RecordT]:
        ...

    async def create(self, **values: Any) -> RecordT:
        ...

    async def update(self, record: RecordT, **values: Any) -> RecordT:
        ...

    async def delete(self, record: RecordT) -> None:
        ...


class Storage(Protocol):
    """One repository per table plus the unit-of-work boundary.

    Repositories hand back raw record sets; visibility narrowing is the
    caller's job (``filter_for_actor``). ``for_update`` row-locks what it
    reads until the next commit or rollback.
    """

    users: RecordRepository[Any]
    centers: RecordRepository[Any]
    customers: RecordRepository[Any]
    categories: RecordRepository[Any]
    products: RecordRepository[Any]
    spare_parts: RecordRepository[Any]
    service_requests: RecordRepository[Any]
    follow_ups: RecordRepository[Any]
    warehouses: RecordRepository[Any]
    inventory: RecordRepository[Any]
    transfers: RecordRepository[Any]
    activities: RecordRepository[Any]

    async def commit(self) -> None:
        ...

    async def rollback(self) -> None:
        ...
