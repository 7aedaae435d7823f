"""In-memory Storage used by the router and guard tests. No database needed."""
from __future__ import annotations

import itertools
import uuid
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from typing import Any

from fastapi.testclient import TestClient

from service_center.auth.scoping import Actor
from service_center.dependencies import get_current_actor, get_storage
from service_center.main import create_app

_BASE_TIME = datetime(2024, 1, 1, tzinfo=timezone.utc)
_clock = itertools.count()


def _tick() -> datetime:
    # Strictly increasing timestamps keep newest_first ordering deterministic
    return _BASE_TIME + timedelta(seconds=next(_clock))


class InMemoryRepository:
    def __init__(self, **defaults: Any) -> None:
        self.rows: dict[uuid.UUID, SimpleNamespace] = {}
        self._defaults = defaults
        self.fail_on_create = False
        # ids and filter sets read with for_update, in order
        self.locked: list[Any] = []

    def add(self, **values: Any) -> SimpleNamespace:
        now = _tick()
        data = {"id": uuid.uuid4(), "created_at": now, "updated_at": now, **self._defaults, **values}
        record = SimpleNamespace(**data)
        self.rows[record.id] = record
        return record

    async def get(self, record_id: uuid.UUID, *, for_update: bool = False) -> SimpleNamespace | None:
        if for_update:
            self.locked.append(record_id)
        return self.rows.get(record_id)

    async def list(
        self,
        *,
        limit: int | None = None,
        newest_first: bool = False,
        for_update: bool = False,
        **filters: Any,
    ) -> list[SimpleNamespace]:
        if for_update:
            self.locked.append(filters)
        rows = [
            row
            for row in self.rows.values()
            if all(getattr(row, field, None) == value for field, value in filters.items())
        ]
        if newest_first:
            rows.sort(key=lambda row: row.created_at, reverse=True)
        return rows[:limit] if limit is not None else rows

    async def create(self, **values: Any) -> SimpleNamespace:
        if self.fail_on_create:
            raise RuntimeError("storage unavailable")
        return self.add(**values)

    async def update(self, record: SimpleNamespace, **values: Any) -> SimpleNamespace:
        for field, value in values.items():
            setattr(record, field, value)
        record.updated_at = _tick()
        return record

    async def delete(self, record: SimpleNamespace) -> None:
        self.rows.pop(record.id, None)


class InMemoryStorage:
    def __init__(self) -> None:
        self.users = InMemoryRepository(phone=None, address=None, status="active", center_id=None)
        self.centers = InMemoryRepository(phone=None, email=None, manager_id=None, is_active=True)
        self.customers = InMemoryRepository(email=None, address=None)
        self.categories = InMemoryRepository(description=None)
        self.products = InMemoryRepository(model=None, description=None)
        self.spare_parts = InMemoryRepository(category_id=None, price=None, description=None)
        self.service_requests = InMemoryRepository(
            model=None,
            status="pending",
            technician_id=None,
            estimated_cost=None,
            actual_cost=None,
            notes=None,
            completed_at=None,
        )
        self.follow_ups = InMemoryRepository()
        self.warehouses = InMemoryRepository(manager_id=None, center_id=None)
        self.inventory = InMemoryRepository(quantity=0, min_quantity=5)
        self.transfers = InMemoryRepository(status="pending", approved_by=None, reason=None, notes=None)
        self.activities = InMemoryRepository(entity_id=None)
        self.commits = 0
        self.rollbacks = 0

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1

    def add_service_request(self, **values: Any) -> SimpleNamespace:
        defaults = {
            "request_number": f"SR-20240101-{uuid.uuid4().hex[:6].upper()}",
            "customer_id": uuid.uuid4(),
            "product_id": uuid.uuid4(),
            "device_name": "Washer",
            "issue": "Does not spin",
            "center_id": uuid.uuid4(),
        }
        return self.service_requests.add(**{**defaults, **values})

    def denials(self) -> list[SimpleNamespace]:
        return [row for row in self.activities.rows.values() if row.action == "permission_denied"]


def make_actor(role: str, **fields: Any) -> Actor:
    return Actor(id=fields.pop("id", uuid.uuid4()), role=role, **fields)


def make_client(storage: InMemoryStorage, actor: Actor | None = None) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_storage] = lambda: storage
    if actor is not None:
        app.dependency_overrides[get_current_actor] = lambda: actor
    return TestClient(app, raise_server_exceptions=False)
