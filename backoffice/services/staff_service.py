"""
Staff service: signup, own profile and password, and management
of other staff accounts.
"""

import logging

from sqlalchemy.orm import Session

from backoffice.config import get_settings
from backoffice.exceptions import (
    ForbiddenError,
    InvalidInputError,
    NotFoundError,
    UnauthenticatedError,
)
from backoffice.models.enums import AccountStatus, ActivityAction, HealPolicy
from backoffice.schemas.auth import (
    MIN_PASSWORD_LENGTH,
    ChangePasswordRequest,
    ProfileUpdate,
    SignupRequest,
)
from backoffice.schemas.staff import StaffUpdate
from backoffice.services import permissions
from backoffice.services.account_registry import AccountRegistry
from backoffice.services.activity_service import ActivityLog
from backoffice.services.email_service import EmailSender, welcome_email_html
from backoffice.services.identity_provider import IdentityProvider
from backoffice.services.kv_store import KeyValueStore
from backoffice.services.listing import matches_search, newest_first, paginate
from backoffice.services.role_service import RoleService
from backoffice.time_utils import now_iso

logger = logging.getLogger(__name__)

STAFF_SEARCH_FIELDS = ("name", "email", "role")


def welcome_key(account_id: str) -> str:
    return f"welcome:{account_id}"


class StaffService:

    def __init__(
        self,
        db: Session,
        identity_provider: IdentityProvider,
        email_sender: EmailSender | None = None,
    ):
        self.db = db
        self.store = KeyValueStore(db)
        self.accounts = AccountRegistry(self.store)
        self.roles = RoleService(self.store)
        self.activity_log = ActivityLog(self.store)
        self.identity_provider = identity_provider
        self.email_sender = email_sender

    # --- Signup ---

    def is_first_signup(self) -> bool:
        """Checked against the locked membership list; see AccountRegistry.is_empty."""
        return self.accounts.is_empty(lock=True)

    def signup(self, request: SignupRequest, creator=None, ip_address: str | None = None) -> dict:
        """
        Register an account.

        creator is None only for the very first account, which
        always gets full permissions whatever the request says.
        Later accounts are provisioned by a staff manager and get
        the requested permissions or none at all.
        """
        is_first = creator is None
        identity = self.identity_provider.create_user(
            request.email, request.password,
            {"name": request.name, "role": request.role},
        )

        account = {
            "id": identity.id,
            "name": request.name,
            "email": identity.email,
            "role": request.role,
            "permissions": permissions.signup_permissions(
                is_first, None if is_first else request.permissions
            ),
            "status": AccountStatus.ACTIVE.value,
            "createdAt": now_iso(),
        }
        self.accounts.add(account)

        details = f"Role: {request.role}, Email: {identity.email}"
        if is_first:
            logger.info("First user signup - granting full permissions")
            self.activity_log.record(
                account["id"], account["name"], ActivityAction.SIGNUP,
                f"New user signed up: {account['name']}", details, ip_address,
            )
            return {"user": self._summary(account), "credentials": None}

        self.activity_log.record(
            creator.id, creator.name, ActivityAction.ADD_STAFF,
            f"Added new staff member: {account['name']}", details, ip_address,
        )
        self._send_welcome(account, request.password)
        return {
            "user": self._summary(account),
            "credentials": {
                "email": account["email"],
                "temporaryPassword": request.password,
            },
        }

    def _send_welcome(self, account: dict, temporary_password: str) -> None:
        self.store.set(welcome_key(account["id"]), {
            "email": account["email"],
            "name": account["name"],
            "role": account["role"],
            "temporaryPassword": temporary_password,
            "createdAt": now_iso(),
        })
        if self.email_sender is None:
            return
        sent = self.email_sender.send(
            to=account["email"],
            subject="Welcome - Your Account is Ready!",
            body=welcome_email_html(
                account["name"], account["email"], temporary_password,
                get_settings().LOGIN_URL,
            ),
        )
        if not sent:
            logger.warning(
                "Welcome email not sent to %s - share credentials manually",
                account["email"],
            )

    @staticmethod
    def _summary(account: dict) -> dict:
        return {k: account.get(k) for k in ("id", "email", "name", "role")}

    # --- Own account ---

    def touch_last_login(self, caller) -> dict:
        account = caller.account
        account["lastLogin"] = now_iso()
        self.accounts.save(account)
        return account

    def change_password(self, caller, request: ChangePasswordRequest, ip_address: str | None = None) -> None:
        if len(request.new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidInputError(
                f"New password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )
        try:
            self.identity_provider.sign_in(caller.account["email"], request.current_password)
        except UnauthenticatedError:
            raise InvalidInputError("Current password is incorrect")

        self.identity_provider.update_password(caller.id, request.new_password)
        self.activity_log.record(
            caller.id, caller.name, ActivityAction.CHANGE_PASSWORD,
            "Changed password", "Password updated successfully", ip_address,
        )

    def update_profile(self, caller, request: ProfileUpdate, ip_address: str | None = None) -> dict:
        """Name only; email and role are changed by a staff manager."""
        account = {**caller.account, "name": request.name, "updatedAt": now_iso()}
        self.accounts.save(account)
        self.activity_log.record(
            caller.id, request.name, ActivityAction.UPDATE_PROFILE,
            "Updated own profile", f"Changed name to: {request.name}", ip_address,
        )
        return account

    # --- Other accounts ---

    def list_staff(
        self,
        search: str = "",
        role: str = "",
        status: str = "",
        archived: str = "",
        page: int = 1,
        limit: int = 1000,
    ) -> tuple[list[dict], dict]:
        staff = [
            s for s in self.accounts.all()
            if matches_search(s, search, STAFF_SEARCH_FIELDS)
        ]
        if role and role != "all":
            staff = [s for s in staff if s.get("role") == role]
        if status and status != "all":
            staff = [s for s in staff if s.get("status") == status]
        if archived == "true":
            staff = [s for s in staff if s.get("isArchived") is True]
        elif archived == "false":
            staff = [s for s in staff if s.get("isArchived") is not True]

        return paginate(newest_first(staff, "createdAt"), page, limit)

    def update_staff(self, gate, caller, staff_id: str, request: StaffUpdate, ip_address: str | None = None) -> dict:
        gate.require_not_self(
            caller, staff_id,
            "Cannot edit your own account. Ask another admin for assistance.",
        )
        existing = self.accounts.get(staff_id)
        if existing is None:
            raise NotFoundError("Staff member not found")

        changes = {
            k: v for k, v in request.model_dump(
                by_alias=True, exclude_unset=True, mode="json"
            ).items()
            if v is not None
        }

        new_email = changes.get("email")
        if new_email and new_email != (existing.get("email") or "").lower():
            gate.require_admin(caller, "Only Admin can change email addresses")
            other = self.accounts.find_by_email(new_email)
            if other and other["id"] != staff_id:
                raise InvalidInputError("Another staff member already uses this email")
            self.identity_provider.update_email(staff_id, new_email)

        new_role = changes.get("role")
        if new_role and new_role != existing.get("role"):
            if self.roles.tier_for(new_role).rank > caller.tier.rank:
                raise ForbiddenError("Cannot assign a role with more privileges than your own")

        updated = {**existing, **changes, "id": staff_id, "updatedAt": now_iso()}
        self.accounts.save(updated)

        self.activity_log.record(
            caller.id, caller.name, ActivityAction.EDIT_STAFF,
            f"Updated staff member: {updated.get('name')}",
            f"Role: {updated.get('role')}", ip_address,
        )
        return updated

    def delete_staff(self, gate, caller, staff_id: str, ip_address: str | None = None) -> None:
        gate.require_not_self(caller, staff_id, "Cannot delete your own account")
        existing = self.accounts.get(staff_id)
        if existing is None:
            raise NotFoundError("Staff member not found")

        self.accounts.remove(staff_id)
        self.activity_log.record(
            caller.id, caller.name, ActivityAction.DELETE_STAFF,
            f"Deleted staff member: {existing.get('name')}",
            f"Role: {existing.get('role')}", ip_address,
        )

    def refresh_permissions(self, caller, policy: HealPolicy, ip_address: str | None = None) -> int:
        """
        Reset every account to the defaults the self-heal would assign.
        The calling Super Admin keeps full grants.
        """
        accounts = self.accounts.all()
        sole = len(accounts) == 1
        for account in accounts:
            if account["id"] == caller.id:
                account["permissions"] = permissions.full_permissions()
            else:
                account["permissions"] = permissions.healed_permissions(
                    self.roles.tier_for(account.get("role")),
                    is_sole_account=sole,
                    policy=policy,
                )
            self.accounts.save(account)

        self.activity_log.record(
            caller.id, caller.name, ActivityAction.EDIT_STAFF,
            "Refreshed permissions for all users",
            f"Updated {len(accounts)} users", ip_address,
        )
        return len(accounts)

    def fix_first_account_permissions(self, caller) -> dict:
        if not self.accounts.is_sole_member(caller.id):
            raise ForbiddenError("Only the first user can use this endpoint")
        account = {**caller.account, "permissions": permissions.full_permissions()}
        self.accounts.save(account)
        logger.info("Fixed permissions for first user: %s", account.get("email"))
        return account
