"""
Role service: user-defined role labels and their privilege tiers.

Roles are stored together in "roles:list". Each role carries a
tier (super_admin / admin / staff) that decides admin-only rules,
so renaming a role never changes what its holders may do.

Accounts store the role *name*, not its id, so a rename is
rewritten onto every account that carries the old name.
"""

import logging

from backoffice.exceptions import ConflictError, ForbiddenError, InvalidInputError, NotFoundError
from backoffice.models.enums import ActivityAction, RoleTier
from backoffice.schemas.role import RoleCreate, RoleUpdate
from backoffice.services.account_registry import AccountRegistry
from backoffice.services.activity_service import ActivityLog
from backoffice.services.kv_store import KeyValueStore, new_record_id
from backoffice.time_utils import now_iso

logger = logging.getLogger(__name__)

ROLES_LIST_KEY = "roles:list"


def resolve_tier(roles: list[dict], role_name: str | None) -> RoleTier:
    """
    Tier of the named role. Names missing from the registry, and
    roles stored before tiers existed, fall back to the legacy
    exact-name rule ("Super Admin", "Admin").
    """
    for role in roles:
        if role.get("name") == role_name:
            try:
                return RoleTier(role["tier"])
            except (KeyError, ValueError):
                break
    return RoleTier.from_legacy_name(role_name)


class RoleService:

    def __init__(self, store: KeyValueStore, activity_log: ActivityLog | None = None):
        self.store = store
        self.accounts = AccountRegistry(store)
        self.activity_log = activity_log or ActivityLog(store)

    def list_roles(self, for_update: bool = False) -> list[dict]:
        return self.store.get_list(ROLES_LIST_KEY, for_update=for_update)

    def tier_for(self, role_name: str | None) -> RoleTier:
        return resolve_tier(self.list_roles(), role_name)

    def _name_taken(self, roles: list[dict], name: str, exclude_id: str | None = None) -> bool:
        lowered = name.lower()
        return any(
            r.get("name", "").lower() == lowered and r.get("id") != exclude_id
            for r in roles
        )

    def _index_of(self, roles: list[dict], role_id: str) -> int:
        for i, role in enumerate(roles):
            if role.get("id") == role_id:
                return i
        raise NotFoundError("Role not found")

    def create_role(self, caller, request: RoleCreate, ip_address: str | None = None) -> dict:
        name = request.role_name.strip()
        tier = request.tier or RoleTier.from_legacy_name(name)
        if tier.rank > caller.tier.rank:
            raise ForbiddenError("Cannot create a role with more privileges than your own")

        roles = self.list_roles(for_update=True)
        if self._name_taken(roles, name):
            raise InvalidInputError("Role with this name already exists")

        role = {
            "id": new_record_id(),
            "name": name,
            "tier": tier.value,
            "createdAt": now_iso(),
            "createdBy": caller.id,
            "createdByName": caller.name,
        }
        roles.append(role)
        self.store.set(ROLES_LIST_KEY, roles)

        self.activity_log.record(
            caller.id, caller.name, ActivityAction.ADD_ROLE,
            f"Created new role: {name}", "", ip_address,
        )
        return role

    def update_role(self, caller, role_id: str, request: RoleUpdate, ip_address: str | None = None) -> dict:
        """
        Rename a role (and optionally change its tier), then rewrite
        the role name on every account that carried the old one.
        """
        name = request.role_name.strip()
        roles = self.list_roles(for_update=True)
        index = self._index_of(roles, role_id)

        if self._name_taken(roles, name, exclude_id=role_id):
            raise InvalidInputError("Role with this name already exists")

        old = roles[index]
        old_name = old["name"]
        old_tier = resolve_tier(roles, old_name)
        new_tier = request.tier or old_tier
        if max(old_tier.rank, new_tier.rank) > caller.tier.rank:
            raise ForbiddenError("Cannot change a role with more privileges than your own")

        roles[index] = {
            **old,
            "name": name,
            "tier": new_tier.value,
            "updatedAt": now_iso(),
            "updatedBy": caller.id,
            "updatedByName": caller.name,
        }
        self.store.set(ROLES_LIST_KEY, roles)

        renamed = 0
        if name != old_name:
            for account in self.accounts.with_role(old_name):
                account["role"] = name
                self.accounts.save(account)
                renamed += 1
            logger.info("Role %r renamed to %r on %d accounts", old_name, name, renamed)

        self.activity_log.record(
            caller.id, caller.name, ActivityAction.EDIT_ROLE,
            f"Updated role: {old_name} → {name}", "", ip_address,
        )
        return roles[index]

    def delete_role(self, caller, role_id: str, ip_address: str | None = None) -> None:
        roles = self.list_roles(for_update=True)
        index = self._index_of(roles, role_id)
        role_name = roles[index]["name"]

        if self.accounts.with_role(role_name):
            raise ConflictError("Cannot delete role that is assigned to staff members")

        roles.pop(index)
        self.store.set(ROLES_LIST_KEY, roles)

        self.activity_log.record(
            caller.id, caller.name, ActivityAction.DELETE_ROLE,
            f"Deleted role: {role_name}", "", ip_address,
        )
