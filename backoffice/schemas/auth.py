"""
Pydantic schemas for signup, login and password operations.
"""

from pydantic import Field, field_validator

from backoffice.schemas.base import CamelModel

MIN_PASSWORD_LENGTH = 6


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if "@" not in value:
        raise ValueError("A valid email address is required")
    return value


class SignupRequest(CamelModel):
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    name: str = Field(min_length=1, max_length=255)
    role: str = Field(min_length=1, max_length=100)
    permissions: dict[str, dict[str, bool]] | None = None

    normalize_email = field_validator("email")(_normalize_email)

    @field_validator("name", "role")
    @classmethod
    def strip_text(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Email, password, name, and role are required")
        return value


class LoginRequest(CamelModel):
    email: str
    password: str

    normalize_email = field_validator("email")(_normalize_email)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(min_length=1)
    new_password: str


class ProfileUpdate(CamelModel):
    name: str

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Name is required")
        return value


class SendOtpRequest(CamelModel):
    email: str

    normalize_email = field_validator("email")(_normalize_email)


class VerifyOtpRequest(CamelModel):
    email: str
    otp: str = Field(min_length=1)
    new_password: str

    normalize_email = field_validator("email")(_normalize_email)


# --- Responses ---

class AccountSummary(CamelModel):
    id: str
    email: str
    name: str
    role: str


class Credentials(CamelModel):
    """Handed back once so the creator can share them if email fails."""
    email: str
    temporary_password: str


class SignupResponse(CamelModel):
    success: bool = True
    user: AccountSummary
    credentials: Credentials | None = None


class LoginResponse(CamelModel):
    success: bool = True
    access_token: str
    token_type: str = "bearer"


class CurrentUserResponse(CamelModel):
    user: dict


class ProfileResponse(CamelModel):
    success: bool = True
    user: dict


class FixPermissionsResponse(CamelModel):
    success: bool = True
    message: str
    user: dict


class SendOtpResponse(CamelModel):
    success: bool = True
    message: str
    debug_otp: str | None = Field(default=None, alias="debug_otp")
