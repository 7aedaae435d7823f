import uuid

from fastapi import status

from tests.fakes import InMemoryStorage, make_actor, make_client


def _warehouse(storage: InMemoryStorage, **values):
    return storage.warehouses.add(**{"name": "Main", "location": "Dock 1", **values})


def _part(storage: InMemoryStorage):
    return storage.spare_parts.add(name="Drive belt", part_number=uuid.uuid4().hex[:10])


class TestWarehouses:
    def test_warehouse_manager_sees_managed_warehouse_only(self) -> None:
        storage = InMemoryStorage()
        warehouse_manager = make_actor("warehouse_manager")
        managed = _warehouse(storage, manager_id=warehouse_manager.id)
        _warehouse(storage, manager_id=uuid.uuid4())
        client = make_client(storage, warehouse_manager)

        listed = client.get("/api/warehouses").json()

        assert [item["id"] for item in listed] == [str(managed.id)]

    def test_warehouse_manager_cannot_hand_off_warehouse(self) -> None:
        storage = InMemoryStorage()
        warehouse_manager = make_actor("warehouse_manager")
        managed = _warehouse(storage, manager_id=warehouse_manager.id)
        client = make_client(storage, warehouse_manager)

        response = client.put(f"/api/warehouses/{managed.id}", json={"manager_id": str(uuid.uuid4())})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert managed.manager_id == warehouse_manager.id

    def test_warehouse_manager_cannot_clear_manager(self) -> None:
        storage = InMemoryStorage()
        warehouse_manager = make_actor("warehouse_manager")
        managed = _warehouse(storage, manager_id=warehouse_manager.id)
        client = make_client(storage, warehouse_manager)

        response = client.put(f"/api/warehouses/{managed.id}", json={"manager_id": None})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["error"]["code"] == "RECORD_ACCESS_DENIED"
        assert managed.manager_id == warehouse_manager.id

    def test_manager_cannot_detach_warehouse_from_center(self) -> None:
        storage = InMemoryStorage()
        center = uuid.uuid4()
        warehouse = _warehouse(storage, center_id=center)
        client = make_client(storage, make_actor("manager", center_id=center))

        response = client.put(f"/api/warehouses/{warehouse.id}", json={"center_id": None})

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert warehouse.center_id == center
        assert len(storage.denials()) == 1

    def test_manager_may_clear_warehouse_manager(self) -> None:
        storage = InMemoryStorage()
        center = uuid.uuid4()
        warehouse = _warehouse(storage, center_id=center, manager_id=uuid.uuid4())
        client = make_client(storage, make_actor("manager", center_id=center))

        response = client.put(f"/api/warehouses/{warehouse.id}", json={"manager_id": None})

        assert response.status_code == status.HTTP_200_OK
        assert warehouse.manager_id is None

    def test_warehouse_manager_renames_own_warehouse(self) -> None:
        storage = InMemoryStorage()
        warehouse_manager = make_actor("warehouse_manager")
        managed = _warehouse(storage, manager_id=warehouse_manager.id)
        client = make_client(storage, warehouse_manager)

        response = client.put(f"/api/warehouses/{managed.id}", json={"name": "North"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["name"] == "North"

    def test_warehouse_manager_cannot_create(self) -> None:
        client = make_client(InMemoryStorage(), make_actor("warehouse_manager"))
        response = client.post("/api/warehouses", json={"name": "New", "location": "Yard"})
        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_manager_created_warehouse_is_stamped_with_center(self) -> None:
        storage = InMemoryStorage()
        center = uuid.uuid4()
        client = make_client(storage, make_actor("manager", center_id=center))

        response = client.post("/api/warehouses", json={"name": "New", "location": "Yard"})

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["center_id"] == str(center)


class TestInventory:
    def test_warehouse_manager_defaults_to_own_warehouse(self) -> None:
        storage = InMemoryStorage()
        part = _part(storage)
        own = _warehouse(storage)
        other = _warehouse(storage)
        own_row = storage.inventory.add(warehouse_id=own.id, spare_part_id=part.id, quantity=3)
        storage.inventory.add(warehouse_id=other.id, spare_part_id=part.id, quantity=9)
        client = make_client(storage, make_actor("warehouse_manager", warehouse_id=own.id))

        listed = client.get("/api/inventory").json()

        assert [item["id"] for item in listed] == [str(own_row.id)]

    def test_low_stock_report(self) -> None:
        storage = InMemoryStorage()
        part = _part(storage)
        warehouse = _warehouse(storage)
        other = _warehouse(storage)
        low = storage.inventory.add(warehouse_id=warehouse.id, spare_part_id=part.id, quantity=5, min_quantity=5)
        storage.inventory.add(warehouse_id=other.id, spare_part_id=part.id, quantity=6, min_quantity=5)
        client = make_client(storage, make_actor("manager"))

        response = client.get("/api/reports/low-stock")

        assert response.status_code == status.HTTP_200_OK
        assert [item["id"] for item in response.json()] == [str(low.id)]

    def test_receptionist_cannot_see_reports(self) -> None:
        client = make_client(InMemoryStorage(), make_actor("receptionist"))
        assert client.get("/api/reports/low-stock").status_code == status.HTTP_403_FORBIDDEN

    def test_duplicate_stock_row_conflicts(self) -> None:
        storage = InMemoryStorage()
        part = _part(storage)
        warehouse = _warehouse(storage)
        storage.inventory.add(warehouse_id=warehouse.id, spare_part_id=part.id)
        client = make_client(storage, make_actor("warehouse_manager"))

        response = client.post(
            "/api/inventory",
            json={"warehouse_id": str(warehouse.id), "spare_part_id": str(part.id), "quantity": 1},
        )

        assert response.status_code == status.HTTP_409_CONFLICT


class TestTransfers:
    def _setup(self):
        storage = InMemoryStorage()
        part = _part(storage)
        source = _warehouse(storage)
        target = _warehouse(storage)
        storage.inventory.add(warehouse_id=source.id, spare_part_id=part.id, quantity=10)
        return storage, part, source, target

    def test_same_warehouse_is_rejected(self) -> None:
        storage, part, source, _target = self._setup()
        client = make_client(storage, make_actor("warehouse_manager"))

        response = client.post(
            "/api/transfers",
            json={
                "from_warehouse_id": str(source.id),
                "to_warehouse_id": str(source.id),
                "spare_part_id": str(part.id),
                "quantity": 1,
            },
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert storage.transfers.rows == {}

    def test_full_lifecycle_moves_stock(self) -> None:
        storage, part, source, target = self._setup()
        requester = make_actor("warehouse_manager")
        approver = make_actor("manager")

        created = make_client(storage, requester).post(
            "/api/transfers",
            json={
                "from_warehouse_id": str(source.id),
                "to_warehouse_id": str(target.id),
                "spare_part_id": str(part.id),
                "quantity": 4,
            },
        )
        assert created.status_code == status.HTTP_201_CREATED
        transfer_id = created.json()["id"]
        assert created.json()["requested_by"] == str(requester.id)

        approver_client = make_client(storage, approver)
        approved = approver_client.put(f"/api/transfers/{transfer_id}", json={"status": "approved"})
        assert approved.json()["approved_by"] == str(approver.id)

        completed = approver_client.put(f"/api/transfers/{transfer_id}", json={"status": "completed"})
        assert completed.status_code == status.HTTP_200_OK

        quantities = {row.warehouse_id: row.quantity for row in storage.inventory.rows.values()}
        assert quantities == {source.id: 6, target.id: 4}

    def test_pending_transfer_cannot_complete(self) -> None:
        storage, part, source, target = self._setup()
        transfer = storage.transfers.add(
            from_warehouse_id=source.id,
            to_warehouse_id=target.id,
            spare_part_id=part.id,
            quantity=1,
            requested_by=uuid.uuid4(),
        )
        client = make_client(storage, make_actor("admin"))

        response = client.put(f"/api/transfers/{transfer.id}", json={"status": "completed"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"
        assert transfer.status == "pending"

    def test_insufficient_stock_blocks_completion(self) -> None:
        storage, part, source, target = self._setup()
        transfer = storage.transfers.add(
            from_warehouse_id=source.id,
            to_warehouse_id=target.id,
            spare_part_id=part.id,
            quantity=50,
            status="approved",
            requested_by=uuid.uuid4(),
        )
        client = make_client(storage, make_actor("admin"))

        response = client.put(f"/api/transfers/{transfer.id}", json={"status": "completed"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error"]["code"] == "INSUFFICIENT_STOCK"
        assert transfer.status == "approved"

    def test_completion_reads_transfer_and_stock_locked(self) -> None:
        storage, part, source, target = self._setup()
        transfer = storage.transfers.add(
            from_warehouse_id=source.id,
            to_warehouse_id=target.id,
            spare_part_id=part.id,
            quantity=3,
            status="approved",
            requested_by=uuid.uuid4(),
        )
        client = make_client(storage, make_actor("admin"))

        response = client.put(f"/api/transfers/{transfer.id}", json={"status": "completed"})

        assert response.status_code == status.HTTP_200_OK
        assert storage.transfers.locked == [transfer.id]
        assert storage.inventory.locked == [
            {"warehouse_id": source.id, "spare_part_id": part.id},
            {"warehouse_id": target.id, "spare_part_id": part.id},
        ]

    def test_second_completion_does_not_move_stock_again(self) -> None:
        storage, part, source, target = self._setup()
        transfer = storage.transfers.add(
            from_warehouse_id=source.id,
            to_warehouse_id=target.id,
            spare_part_id=part.id,
            quantity=4,
            status="approved",
            requested_by=uuid.uuid4(),
        )
        client = make_client(storage, make_actor("admin"))

        first = client.put(f"/api/transfers/{transfer.id}", json={"status": "completed"})
        second = client.put(f"/api/transfers/{transfer.id}", json={"status": "completed"})

        assert first.status_code == status.HTTP_200_OK
        assert second.status_code == status.HTTP_200_OK
        quantities = {row.warehouse_id: row.quantity for row in storage.inventory.rows.values()}
        assert quantities == {source.id: 6, target.id: 4}
