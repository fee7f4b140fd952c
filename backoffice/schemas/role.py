"""
Pydantic schemas for roles and banks.
"""

from pydantic import Field, field_validator

from backoffice.models.enums import RoleTier
from backoffice.schemas.base import CamelModel


def _required_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


class RoleCreate(CamelModel):
    role_name: str = Field(max_length=100)
    tier: RoleTier | None = None

    normalize_name = field_validator("role_name")(_required_name)


class RoleUpdate(RoleCreate):
    pass


class BankCreate(CamelModel):
    bank_name: str = Field(max_length=255)

    normalize_name = field_validator("bank_name")(_required_name)


class BankUpdate(BankCreate):
    pass


# --- Responses ---

class RoleListResponse(CamelModel):
    success: bool = True
    roles: list[dict]


class RoleResponse(CamelModel):
    success: bool = True
    role: dict


class BankListResponse(CamelModel):
    success: bool = True
    banks: list[dict]


class BankResponse(CamelModel):
    success: bool = True
    bank: dict
