"""
Tests for request-layer enforcement.

Verifies that:
1. Matrix denials raise 403, are logged, and are recorded as activities
2. Allowed checks return the actor and record nothing
3. A failing activity write never turns a 403 into something else
4. Row-level checks only run on what they are given
"""
import logging
import uuid

import pytest
from fastapi import Request

from service_center.auth.guards import (
    authorize_assignment,
    authorize_changes,
    authorize_record,
    require_permission,
)
from service_center.auth.rbac_contract import Action, Resource
from service_center.auth.scoping import ResourceType
from service_center.errors import PermissionError, RecordAccessError
from tests.fakes import InMemoryStorage, make_actor


def make_request(method: str = "GET", path: str = "/api/service-requests") -> Request:
    return Request(
        {
            "type": "http",
            "method": method,
            "path": path,
            "headers": [],
        }
    )


class TestRequirePermission:
    @pytest.mark.anyio
    async def test_allowed_returns_actor(self):
        storage = InMemoryStorage()
        actor = make_actor("receptionist")
        dependency = require_permission(Resource.SERVICE_REQUESTS, Action.CREATE)

        result = await dependency(request=make_request("POST"), actor=actor, storage=storage)

        assert result is actor
        assert storage.activities.rows == {}

    @pytest.mark.anyio
    async def test_denial_raises_logs_and_records(self, caplog: pytest.LogCaptureFixture):
        storage = InMemoryStorage()
        actor = make_actor("receptionist")
        dependency = require_permission(Resource.SERVICE_REQUESTS, Action.UPDATE)
        request = make_request("PUT", "/api/service-requests/abc")

        with caplog.at_level(logging.WARNING, logger="service_center.rbac"):
            with pytest.raises(PermissionError) as exc_info:
                await dependency(request=request, actor=actor, storage=storage)

        assert exc_info.value.status_code == 403
        assert exc_info.value.details == {"resource": "serviceRequests", "action": "update"}
        message = " ".join(record.getMessage() for record in caplog.records)
        assert "role=receptionist" in message
        assert "resource=serviceRequests" in message
        assert "action=update" in message
        assert "PUT" in message and "/api/service-requests/abc" in message

        [denial] = storage.denials()
        assert denial.user_id == actor.id
        assert denial.entity_type == "serviceRequests"
        assert storage.commits == 1

    @pytest.mark.anyio
    async def test_denial_still_raised_when_activity_write_fails(self):
        storage = InMemoryStorage()
        storage.activities.fail_on_create = True
        dependency = require_permission(Resource.USERS, Action.DELETE)

        with pytest.raises(PermissionError):
            await dependency(request=make_request("DELETE"), actor=make_actor("manager"), storage=storage)

        assert storage.rollbacks == 1
        assert storage.commits == 0

    @pytest.mark.anyio
    async def test_unknown_role_is_denied(self):
        dependency = require_permission(Resource.CATEGORIES, Action.READ)
        with pytest.raises(PermissionError):
            await dependency(request=make_request(), actor=make_actor("guest"), storage=InMemoryStorage())


class TestAuthorizeRecord:
    @pytest.mark.anyio
    async def test_in_scope_record_passes(self):
        storage = InMemoryStorage()
        technician = make_actor("technician")
        record = storage.add_service_request(technician_id=technician.id)

        await authorize_record(make_request(), storage, technician, ResourceType.SERVICE_REQUEST, record)

        assert storage.denials() == []

    @pytest.mark.anyio
    async def test_out_of_scope_record_is_denied(self):
        storage = InMemoryStorage()
        technician = make_actor("technician")
        record = storage.add_service_request(technician_id=uuid.uuid4())

        with pytest.raises(RecordAccessError) as exc_info:
            await authorize_record(make_request(), storage, technician, ResourceType.SERVICE_REQUEST, record)

        assert exc_info.value.code == "RECORD_ACCESS_DENIED"
        assert exc_info.value.status_code == 403
        [denial] = storage.denials()
        assert denial.entity_id == str(record.id)


class TestAuthorizeChanges:
    @pytest.mark.anyio
    async def test_manager_cannot_move_record_out_of_center(self):
        storage = InMemoryStorage()
        center = uuid.uuid4()
        manager = make_actor("manager", center_id=center)
        record = storage.add_service_request(center_id=center)

        with pytest.raises(RecordAccessError):
            await authorize_changes(
                make_request("PUT"),
                storage,
                manager,
                ResourceType.SERVICE_REQUEST,
                record,
                {"center_id": uuid.uuid4()},
            )

    @pytest.mark.anyio
    async def test_unrelated_changes_pass(self):
        storage = InMemoryStorage()
        center = uuid.uuid4()
        manager = make_actor("manager", center_id=center)
        record = storage.add_service_request(center_id=center)

        await authorize_changes(
            make_request("PUT"),
            storage,
            manager,
            ResourceType.SERVICE_REQUEST,
            record,
            {"notes": "Waiting for parts", "technician_id": uuid.uuid4()},
        )

    @pytest.mark.anyio
    async def test_clearing_own_scope_field_is_denied(self, caplog: pytest.LogCaptureFixture):
        storage = InMemoryStorage()
        center = uuid.uuid4()
        manager = make_actor("manager", center_id=center)
        user = storage.users.add(email="tech@example.com", full_name="Tech", role="technician", center_id=center)

        with caplog.at_level(logging.WARNING, logger="service_center.rbac"):
            with pytest.raises(RecordAccessError):
                await authorize_changes(
                    make_request("PUT", f"/api/users/{user.id}"),
                    storage,
                    manager,
                    ResourceType.USER,
                    user,
                    {"center_id": None},
                )

        assert "reason=clears center_id" in caplog.text
        [denial] = storage.denials()
        assert denial.entity_id == str(user.id)

    @pytest.mark.anyio
    async def test_admin_may_clear_scope_field(self):
        storage = InMemoryStorage()
        record = storage.add_service_request()

        await authorize_changes(
            make_request("PUT"),
            storage,
            make_actor("admin"),
            ResourceType.SERVICE_REQUEST,
            record,
            {"center_id": None},
        )


class TestAuthorizeAssignment:
    @pytest.mark.anyio
    async def test_unassigned_request_rejects_technician(self):
        storage = InMemoryStorage()
        record = storage.add_service_request(technician_id=None)

        with pytest.raises(RecordAccessError, match="not assigned"):
            await authorize_assignment(make_request("POST"), storage, make_actor("technician"), record)

    @pytest.mark.anyio
    async def test_assigned_technician_passes(self):
        storage = InMemoryStorage()
        technician = make_actor("technician")
        record = storage.add_service_request(technician_id=technician.id)

        await authorize_assignment(make_request("POST"), storage, technician, record)

    @pytest.mark.anyio
    async def test_other_roles_skip_the_check(self):
        storage = InMemoryStorage()
        record = storage.add_service_request(technician_id=None)

        await authorize_assignment(make_request("POST"), storage, make_actor("manager"), record)
