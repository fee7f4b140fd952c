"""
Authorization gate.

Every protected request passes through authorize(), which runs
these steps in order and stops at the first failure:

1. Resolve the bearer token through the identity provider (401).
2. Load the caller's account; a missing account means it was
   deleted (403 ACCOUNT_DELETED).
3. Refuse deactivated accounts before looking at permissions
   (403 ACCOUNT_DEACTIVATED).
4. Repair an empty permission record and commit the repair, so
   it sticks even if the check below denies the request.
5. Check the (resource, action) grant (403).

Resource-specific rules (ownership, self-protection, admin and
super admin only operations) are separate require_* methods
that routers call after authorize().
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from backoffice.config import get_settings
from backoffice.exceptions import (
    AccountDeactivatedError,
    AccountDeletedError,
    ForbiddenError,
    SelfModificationError,
    UnauthenticatedError,
)
from backoffice.models.enums import AccountStatus, Action, HealPolicy, Resource, RoleTier
from backoffice.services import permissions
from backoffice.services.account_registry import AccountRegistry
from backoffice.services.identity_provider import IdentityProvider
from backoffice.services.kv_store import KeyValueStore
from backoffice.services.role_service import RoleService

logger = logging.getLogger(__name__)


@dataclass
class Caller:
    id: str
    account: dict
    tier: RoleTier

    @property
    def name(self) -> str:
        return self.account.get("name", "")

    @property
    def permissions(self) -> dict:
        return self.account.get("permissions") or {}

    @property
    def is_admin(self) -> bool:
        return self.tier.is_admin

    @property
    def is_super_admin(self) -> bool:
        return self.tier == RoleTier.SUPER_ADMIN

    def can(self, resource: Resource, action: Action) -> bool:
        return permissions.is_granted(self.permissions, resource, action)


def parse_bearer(authorization: str | None) -> str:
    if not authorization:
        raise UnauthenticatedError("No authorization header")
    scheme, _, token = authorization.partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise UnauthenticatedError("Invalid authorization format")
    return token


class AuthorizationGate:

    def __init__(
        self,
        db: Session,
        identity_provider: IdentityProvider,
        heal_policy: HealPolicy | None = None,
    ):
        self.db = db
        self.identity_provider = identity_provider
        self.store = KeyValueStore(db)
        self.accounts = AccountRegistry(self.store)
        self.roles = RoleService(self.store)
        if heal_policy is None:
            heal_policy = HealPolicy(get_settings().PERMISSION_HEAL_POLICY)
        self.heal_policy = heal_policy

    def heal(self, account: dict, tier: RoleTier) -> dict:
        """Give an account with an empty permission record its defaults."""
        account["permissions"] = permissions.healed_permissions(
            tier,
            is_sole_account=self.accounts.is_sole_member(account["id"]),
            policy=self.heal_policy,
        )
        self.accounts.save(account)
        self.db.commit()
        logger.info(
            "Auto-fixed missing permissions for %s (role %r, policy %s)",
            account.get("email"), account.get("role"), self.heal_policy.value,
        )
        return account

    def resolve(self, authorization: str | None) -> Caller:
        """Steps 1-4: an authenticated, existing, active, healed caller."""
        identity = self.identity_provider.verify_token(parse_bearer(authorization))

        account = self.accounts.get(identity.id)
        if account is None:
            raise AccountDeletedError()

        if account.get("status") == AccountStatus.INACTIVE.value:
            raise AccountDeactivatedError()

        tier = self.roles.tier_for(account.get("role"))
        if permissions.is_empty(account.get("permissions")):
            account = self.heal(account, tier)

        return Caller(id=identity.id, account=account, tier=tier)

    def require(
        self,
        caller: Caller,
        resource: Resource,
        action: Action,
        message: str | None = None,
    ) -> None:
        if not caller.can(resource, action):
            raise ForbiddenError(
                message or f"No permission to {action.value} {resource.value}"
            )

    def authorize(
        self,
        authorization: str | None,
        resource: Resource | None = None,
        action: Action | None = None,
        message: str | None = None,
    ) -> Caller:
        """Resolve the caller; with a resource, also check the grant."""
        caller = self.resolve(authorization)
        if resource is not None:
            self.require(caller, resource, action or Action.VIEW, message)
        return caller

    # --- Resource-specific rules ---

    def require_owner_or_admin(
        self,
        caller: Caller,
        record: dict,
        resource: Resource,
        action: Action,
        message: str,
        owner_field: str = "submittedBy",
    ) -> None:
        """The grant is required in every case; non-admins must also own the record."""
        is_owner = record.get(owner_field) == caller.id
        if not caller.can(resource, action) or not (caller.is_admin or is_owner):
            raise ForbiddenError(message)

    def require_not_self(self, caller: Caller, target_id: str, message: str) -> None:
        if target_id == caller.id:
            raise SelfModificationError(message)

    def require_admin(self, caller: Caller, message: str) -> None:
        if not caller.is_admin:
            raise ForbiddenError(message)

    def require_super_admin(self, caller: Caller, message: str) -> None:
        if not caller.is_super_admin:
            raise ForbiddenError(message)
