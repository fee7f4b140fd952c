"""
Tests for roles: tiers, rename cascade and deletion guard.
"""

import pytest

from backoffice.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from backoffice.models.enums import RoleTier
from backoffice.schemas.role import RoleCreate, RoleUpdate
from backoffice.services.account_registry import AccountRegistry
from backoffice.services.kv_store import KeyValueStore
from backoffice.services.role_service import ROLES_LIST_KEY, RoleService, resolve_tier


@pytest.fixture
def store(db_session):
    return KeyValueStore(db_session)


@pytest.fixture
def roles(store):
    return RoleService(store)


class TestResolveTier:

    def test_registered_role(self):
        roles = [{"name": "Ops Lead", "tier": "admin"}]
        assert resolve_tier(roles, "Ops Lead") == RoleTier.ADMIN

    def test_role_without_tier_falls_back_to_name(self):
        roles = [{"name": "Admin"}]
        assert resolve_tier(roles, "Admin") == RoleTier.ADMIN

    def test_unknown_role_is_staff(self):
        assert resolve_tier([], "Cashier") == RoleTier.STAFF


class TestCreateRole:

    def test_create(self, roles, caller_factory):
        role = roles.create_role(caller_factory(), RoleCreate(role_name=" Cashier "))
        assert role["name"] == "Cashier"
        assert role["tier"] == "staff"
        assert roles.list_roles() == [role]

    def test_duplicate_name_case_insensitive(self, roles, caller_factory):
        caller = caller_factory()
        roles.create_role(caller, RoleCreate(role_name="Cashier"))
        with pytest.raises(InvalidInputError, match="already exists"):
            roles.create_role(caller, RoleCreate(role_name="cashier"))

    def test_cannot_create_above_own_tier(self, roles, caller_factory):
        admin = caller_factory("a1", role="Admin")
        with pytest.raises(ForbiddenError):
            roles.create_role(admin, RoleCreate(role_name="Boss", tier=RoleTier.SUPER_ADMIN))


class TestUpdateRole:

    def test_rename_cascades_to_accounts(self, store, roles, caller_factory):
        caller = caller_factory()
        role = roles.create_role(caller, RoleCreate(role_name="Cashier"))
        accounts = AccountRegistry(store)
        accounts.add({"id": "s1", "name": "Sam", "role": "Cashier"})
        accounts.add({"id": "s2", "name": "Kim", "role": "Auditor"})

        updated = roles.update_role(caller, role["id"], RoleUpdate(role_name="Teller"))

        assert updated["name"] == "Teller"
        assert accounts.get("s1")["role"] == "Teller"
        assert accounts.get("s2")["role"] == "Auditor"

    def test_rename_keeps_tier(self, roles, caller_factory):
        caller = caller_factory()
        role = roles.create_role(caller, RoleCreate(role_name="Admin"))
        roles.update_role(caller, role["id"], RoleUpdate(role_name="Administrator"))
        assert roles.tier_for("Administrator") == RoleTier.ADMIN

    def test_unknown_role(self, roles, caller_factory):
        with pytest.raises(NotFoundError, match="Role not found"):
            roles.update_role(caller_factory(), "missing", RoleUpdate(role_name="X"))

    def test_rename_to_existing_name(self, roles, caller_factory):
        caller = caller_factory()
        roles.create_role(caller, RoleCreate(role_name="Cashier"))
        other = roles.create_role(caller, RoleCreate(role_name="Teller"))
        with pytest.raises(InvalidInputError):
            roles.update_role(caller, other["id"], RoleUpdate(role_name="CASHIER"))


class TestDeleteRole:

    def test_delete_unused(self, roles, caller_factory):
        caller = caller_factory()
        role = roles.create_role(caller, RoleCreate(role_name="Cashier"))
        roles.delete_role(caller, role["id"])
        assert roles.list_roles() == []

    def test_delete_in_use_conflicts(self, store, roles, caller_factory):
        caller = caller_factory()
        role = roles.create_role(caller, RoleCreate(role_name="Cashier"))
        AccountRegistry(store).add({"id": "s1", "name": "Sam", "role": "Cashier"})

        with pytest.raises(ConflictError) as exc:
            roles.delete_role(caller, role["id"])
        assert exc.value.status_code == 409

        # Once nobody holds the role any more it can go
        AccountRegistry(store).save({"id": "s1", "name": "Sam", "role": "Teller"})
        roles.delete_role(caller, role["id"])
        assert store.get_list(ROLES_LIST_KEY) == []
