"""
Pydantic schemas for staff records and the audit trail.
"""

from pydantic import Field, field_validator

from backoffice.models.enums import AccountStatus
from backoffice.schemas.base import CamelModel, Pagination


class StaffUpdate(CamelModel):
    """Fields an admin may change on another account. Unset means unchanged."""
    name: str | None = Field(default=None, min_length=1, max_length=255)
    email: str | None = None
    role: str | None = Field(default=None, min_length=1, max_length=100)
    status: AccountStatus | None = None
    is_archived: bool | None = None
    permissions: dict[str, dict[str, bool]] | None = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str | None) -> str | None:
        if value is None:
            return value
        value = value.strip().lower()
        if "@" not in value:
            raise ValueError("A valid email address is required")
        return value


class BulkDeleteRequest(CamelModel):
    activity_ids: list[str] = Field(default_factory=list)


# --- Responses ---

class StaffListResponse(CamelModel):
    staff: list[dict]
    pagination: Pagination


class StaffResponse(CamelModel):
    success: bool = True
    staff: dict


class ActivityListResponse(CamelModel):
    activities: list[dict]


class BulkDeleteResponse(CamelModel):
    success: bool = True
    deleted_count: int
