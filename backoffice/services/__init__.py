"""Business logic services."""

from backoffice.services.kv_store import KeyValueStore
from backoffice.services.account_registry import AccountRegistry
from backoffice.services.activity_service import ActivityLog
from backoffice.services.authorization import AuthorizationGate, Caller
from backoffice.services.otp_service import OtpService
from backoffice.services.staff_service import StaffService
from backoffice.services.deposit_service import DepositService
from backoffice.services.role_service import RoleService
from backoffice.services.bank_service import BankService
from backoffice.services.dashboard_service import DashboardService

__all__ = [
    "KeyValueStore",
    "AccountRegistry",
    "ActivityLog",
    "AuthorizationGate",
    "Caller",
    "OtpService",
    "StaffService",
    "DepositService",
    "RoleService",
    "BankService",
    "DashboardService",
]
