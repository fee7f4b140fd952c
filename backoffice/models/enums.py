"""
Shared enumerations.

Values are the exact strings stored in the key-value records
and sent over the wire, so they must not be renamed.
"""

import enum


class AccountStatus(str, enum.Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class RoleTier(str, enum.Enum):
    """Privilege tier attached to a role, independent of its name."""
    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    STAFF = "staff"

    @classmethod
    def from_legacy_name(cls, role_name: str | None) -> "RoleTier":
        """Tier implied by a role name for records created before tiers."""
        if role_name == "Super Admin":
            return cls.SUPER_ADMIN
        if role_name == "Admin":
            return cls.ADMIN
        return cls.STAFF

    @property
    def rank(self) -> int:
        return {"staff": 0, "admin": 1, "super_admin": 2}[self.value]

    @property
    def is_admin(self) -> bool:
        return self in (RoleTier.ADMIN, RoleTier.SUPER_ADMIN)


class Resource(str, enum.Enum):
    DASHBOARD = "dashboard"
    DEPOSITS = "deposits"
    BANK_DEPOSITS = "bankDeposits"
    STAFF_MANAGEMENT = "staffManagement"
    # Legacy resources, still present on older permission records
    ACTIVITY_LOGS = "activityLogs"
    SETTINGS = "settings"


class Action(str, enum.Enum):
    VIEW = "view"
    ADD = "add"
    EDIT = "edit"
    DELETE = "delete"
    ACTIVITY = "activity"
    # Legacy actions
    VIEW_ALL = "viewAll"
    ARCHIVE = "archive"
    RESTORE = "restore"


class HealPolicy(str, enum.Enum):
    """How an account with an empty permission record is repaired."""
    ROLE_BASED = "role_based"
    EMPTY = "empty"


class ActivityAction(str, enum.Enum):
    """Vocabulary of audit trail action tags."""
    SIGNUP = "signup"
    ADD_STAFF = "add_staff"
    EDIT_STAFF = "edit_staff"
    DELETE_STAFF = "delete_staff"
    CHANGE_PASSWORD = "change_password"
    PASSWORD_RESET = "password_reset"
    UPDATE_PROFILE = "update_profile"
    ADD_DEPOSIT = "add_deposit"
    EDIT_DEPOSIT = "edit_deposit"
    DELETE_DEPOSIT = "delete_deposit"
    ADD_BANK_DEPOSIT = "add_bank_deposit"
    EDIT_BANK_DEPOSIT = "edit_bank_deposit"
    DELETE_BANK_DEPOSIT = "delete_bank_deposit"
    DELETE_ACTIVITY = "delete_activity"
    BULK_DELETE_ACTIVITIES = "bulk_delete_activities"
    ADD_ROLE = "add_role"
    EDIT_ROLE = "edit_role"
    DELETE_ROLE = "delete_role"
    ADD_BANK = "add_bank"
    EDIT_BANK = "edit_bank"
    DELETE_BANK = "delete_bank"
