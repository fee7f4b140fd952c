"""
Permission model.

A permission record maps resource -> action -> bool, e.g.
{"deposits": {"view": True, "add": True}}. Anything not listed
is denied.

Two policies decide what an account gets:

- At signup the very first account gets FULL (otherwise nobody
  could ever grant anything); everyone else gets what the
  creator passed in, or EMPTY.
- When an account is found with an empty record (accounts that
  predate the permission system), the gate repairs it. Under the
  "role_based" policy admin tiers get FULL and everyone else
  BASIC. Under the "empty" policy everyone but the sole account
  gets EMPTY, which keeps "permissions are assigned by hand"
  strictly true.
"""

from backoffice.models.enums import Action, HealPolicy, Resource, RoleTier

CORE_RESOURCES = (
    Resource.DASHBOARD,
    Resource.DEPOSITS,
    Resource.BANK_DEPOSITS,
    Resource.STAFF_MANAGEMENT,
)

CORE_ACTIONS = (
    Action.VIEW,
    Action.ADD,
    Action.EDIT,
    Action.DELETE,
    Action.ACTIVITY,
)


def _preset(granted: bool) -> dict:
    return {
        resource.value: {action.value: granted for action in CORE_ACTIONS}
        for resource in CORE_RESOURCES
    }


def full_permissions() -> dict:
    return _preset(True)


def empty_permissions() -> dict:
    return _preset(False)


def basic_permissions() -> dict:
    """Day-to-day staff: record deposits, no deleting, no staff admin."""
    return {
        "dashboard": {"view": True, "viewAll": False},
        "deposits": {
            "view": True, "add": True, "edit": True,
            "delete": False, "viewAll": False,
        },
        "bankDeposits": {
            "view": True, "add": True, "edit": True,
            "delete": False, "viewAll": False,
        },
        "staffManagement": {
            "view": False, "add": False, "edit": False, "delete": False,
            "archive": False, "restore": False, "viewAll": False,
        },
        "activityLogs": {"view": True, "viewAll": False},
        "settings": {"view": True, "edit": False},
    }


def is_granted(record: dict | None, resource: Resource | str, action: Action | str) -> bool:
    """Fail closed: a missing resource, action or non-True value denies."""
    if not isinstance(record, dict):
        return False
    resource_key = resource.value if isinstance(resource, Resource) else resource
    action_key = action.value if isinstance(action, Action) else action
    actions = record.get(resource_key)
    if not isinstance(actions, dict):
        return False
    return actions.get(action_key) is True


def is_empty(record: dict | None) -> bool:
    return not isinstance(record, dict) or len(record) == 0


def signup_permissions(is_first_account: bool, requested: dict | None) -> dict:
    if is_first_account:
        return full_permissions()
    if requested:
        return requested
    return empty_permissions()


def healed_permissions(
    tier: RoleTier,
    is_sole_account: bool,
    policy: HealPolicy = HealPolicy.ROLE_BASED,
) -> dict:
    """Replacement for an empty permission record."""
    if is_sole_account:
        return full_permissions()
    if policy == HealPolicy.EMPTY:
        return empty_permissions()
    if tier.is_admin:
        return full_permissions()
    return basic_permissions()
