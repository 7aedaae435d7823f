"""
Tests for the RBAC contract.

The contract is validated at import time; these tests pin the concrete
matrix so that any change to it is a deliberate, reviewed change.
"""
import pytest

from service_center.auth import rbac_contract
from service_center.auth.rbac_contract import (
    ALL_PAGES,
    ALL_RESOURCES,
    ALL_ROLES,
    FULL,
    NO_DELETE,
    READ_CREATE,
    READ_ONLY,
    READ_UPDATE,
    ROLE_PAGE_ACCESS,
    ROLE_PERMISSIONS,
    PermissionEntry,
)


class TestRoles:
    def test_six_roles_defined(self):
        assert ALL_ROLES == {
            "admin",
            "manager",
            "technician",
            "receptionist",
            "warehouse_manager",
            "customer",
        }

    def test_every_role_has_a_matrix_row_and_page_set(self):
        assert set(ROLE_PERMISSIONS) == ALL_ROLES
        assert set(ROLE_PAGE_ACCESS) == ALL_ROLES

    @pytest.mark.parametrize("role", sorted(ALL_ROLES))
    def test_validate_role_accepts_known_roles(self, role):
        rbac_contract.validate_role(role)  # Should not raise

    @pytest.mark.parametrize("role", ["", "Admin", "superuser", "warehouse-manager"])
    def test_validate_role_rejects_unknown(self, role):
        with pytest.raises(ValueError, match="Invalid role"):
            rbac_contract.validate_role(role)


class TestMatrix:
    def test_fourteen_resources(self):
        assert len(ALL_RESOURCES) == 14
        assert "serviceRequestFollowUps" in ALL_RESOURCES

    def test_admin_has_full_access_everywhere(self):
        admin = ROLE_PERMISSIONS["admin"]
        assert set(admin) == ALL_RESOURCES
        assert all(entry == FULL for entry in admin.values())

    def test_manager_row(self):
        manager = ROLE_PERMISSIONS["manager"]
        assert manager["dashboard"] == READ_ONLY
        assert manager["centers"] == READ_UPDATE
        assert manager["serviceRequests"] == NO_DELETE
        assert manager["reports"] == READ_ONLY
        assert manager["activities"] == READ_ONLY
        assert not any(entry.delete for entry in manager.values())
        assert "roles" not in manager
        assert "settings" not in manager

    def test_technician_row(self):
        assert dict(ROLE_PERMISSIONS["technician"]) == {
            "serviceRequests": READ_ONLY,
            "serviceRequestFollowUps": READ_CREATE,
            "customers": READ_ONLY,
            "categories": READ_ONLY,
        }

    def test_receptionist_row(self):
        assert dict(ROLE_PERMISSIONS["receptionist"]) == {
            "dashboard": READ_ONLY,
            "customers": NO_DELETE,
            "serviceRequests": READ_CREATE,
            "categories": READ_ONLY,
        }

    def test_warehouse_manager_row(self):
        warehouse_manager = ROLE_PERMISSIONS["warehouse_manager"]
        assert warehouse_manager["warehouses"] == READ_UPDATE
        assert warehouse_manager["inventory"] == NO_DELETE
        assert warehouse_manager["transfers"] == NO_DELETE
        assert "serviceRequests" not in warehouse_manager

    def test_customer_row(self):
        assert dict(ROLE_PERMISSIONS["customer"]) == {"serviceRequests": READ_CREATE}

    def test_any_write_implies_read(self):
        for role, entries in ROLE_PERMISSIONS.items():
            for resource, entry in entries.items():
                if entry.create or entry.update or entry.delete:
                    assert entry.read, f"{role}/{resource} writes without read"

    def test_matrix_is_immutable(self):
        with pytest.raises(TypeError):
            ROLE_PERMISSIONS["customer"] = {}  # type: ignore[index]
        with pytest.raises(TypeError):
            ROLE_PERMISSIONS["customer"]["users"] = FULL  # type: ignore[index]

    def test_entries_are_frozen(self):
        with pytest.raises(AttributeError):
            READ_ONLY.delete = True  # type: ignore[misc]

    def test_entry_as_dict(self):
        assert PermissionEntry(read=True, update=True).as_dict() == {
            "read": True,
            "create": False,
            "update": True,
            "delete": False,
        }


class TestPages:
    def test_thirteen_pages(self):
        assert len(ALL_PAGES) == 13

    def test_admin_sees_every_page(self):
        assert ROLE_PAGE_ACCESS["admin"] == ALL_PAGES

    def test_customer_sees_only_service_requests(self):
        assert ROLE_PAGE_ACCESS["customer"] == {"service-requests"}

    def test_technician_has_no_dashboard_page(self):
        assert "dashboard" not in ROLE_PAGE_ACCESS["technician"]


class TestContractValidation:
    def test_shipped_contract_is_valid(self):
        rbac_contract._validate_contract()  # Should not raise

    def test_write_without_read_is_rejected(self, monkeypatch: pytest.MonkeyPatch):
        broken = dict(ROLE_PERMISSIONS)
        broken["customer"] = {"serviceRequests": PermissionEntry(create=True)}
        monkeypatch.setattr(rbac_contract, "ROLE_PERMISSIONS", broken)
        with pytest.raises(RuntimeError, match="without read"):
            rbac_contract._validate_contract()

    def test_unknown_page_is_rejected(self, monkeypatch: pytest.MonkeyPatch):
        broken = dict(ROLE_PAGE_ACCESS)
        broken["customer"] = frozenset({"service-requests", "billing"})
        monkeypatch.setattr(rbac_contract, "ROLE_PAGE_ACCESS", broken)
        with pytest.raises(RuntimeError, match="unknown pages"):
            rbac_contract._validate_contract()

    def test_missing_role_is_rejected(self, monkeypatch: pytest.MonkeyPatch):
        broken = {role: entries for role, entries in ROLE_PERMISSIONS.items() if role != "technician"}
        monkeypatch.setattr(rbac_contract, "ROLE_PERMISSIONS", broken)
        with pytest.raises(RuntimeError, match="missing from permission matrix"):
            rbac_contract._validate_contract()
