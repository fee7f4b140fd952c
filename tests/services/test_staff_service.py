"""
Tests for StaffService permission maintenance.
"""

from backoffice.models.enums import HealPolicy
from backoffice.services import permissions
from backoffice.services.account_registry import AccountRegistry
from backoffice.services.kv_store import KeyValueStore
from backoffice.services.staff_service import StaffService


def seed_accounts(db_session, caller_factory):
    accounts = AccountRegistry(KeyValueStore(db_session))
    caller = caller_factory("boss", role="Super Admin")
    accounts.add(caller.account)
    accounts.add({"id": "adm", "name": "Ann", "role": "Admin", "permissions": {}})
    accounts.add({"id": "stf", "name": "Sam", "role": "Staff", "permissions": {}})
    return accounts, caller


class TestRefreshPermissions:

    def test_role_based_defaults(self, db_session, identity_provider, caller_factory):
        accounts, caller = seed_accounts(db_session, caller_factory)
        count = StaffService(db_session, identity_provider).refresh_permissions(
            caller, HealPolicy.ROLE_BASED
        )
        assert count == 3
        assert accounts.get("adm")["permissions"] == permissions.full_permissions()
        assert accounts.get("stf")["permissions"] == permissions.basic_permissions()

    def test_empty_policy_keeps_caller_full(self, db_session, identity_provider, caller_factory):
        accounts, caller = seed_accounts(db_session, caller_factory)
        StaffService(db_session, identity_provider).refresh_permissions(
            caller, HealPolicy.EMPTY
        )
        assert accounts.get("boss")["permissions"] == permissions.full_permissions()
        assert accounts.get("adm")["permissions"] == permissions.empty_permissions()
        assert accounts.get("stf")["permissions"] == permissions.empty_permissions()
