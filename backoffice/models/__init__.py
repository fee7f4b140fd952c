"""
Database models package.

All models must be imported here so that Alembic can discover
them through Base.metadata when generating migrations.
"""

from backoffice.models.base import Base
from backoffice.models.enums import (
    AccountStatus,
    RoleTier,
    Resource,
    Action,
    HealPolicy,
    ActivityAction,
)
from backoffice.models.kv_entry import KVEntry
from backoffice.models.identity import Identity

__all__ = [
    "Base",
    "AccountStatus",
    "RoleTier",
    "Resource",
    "Action",
    "HealPolicy",
    "ActivityAction",
    "KVEntry",
    "Identity",
]
