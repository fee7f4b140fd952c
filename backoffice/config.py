"""
Application configuration.

All configuration is loaded from environment variables.
Never hardcode secrets or connection strings in code.
"""

import os
from functools import lru_cache

from dotenv import load_dotenv

# Load .env file into environment variables
load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "Deposit Back Office"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

    # Server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Database
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL",
        "sqlite:///./backoffice.db"
    )

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Access tokens
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-key-change-me")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(
        os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60")
    )

    # Password recovery
    OTP_TTL_MINUTES: int = int(os.getenv("OTP_TTL_MINUTES", "5"))
    OTP_MAX_ATTEMPTS: int = int(os.getenv("OTP_MAX_ATTEMPTS", "3"))
    # Returns the code in the API response when email delivery fails.
    # Ignored when ENVIRONMENT is "production".
    ALLOW_OTP_IN_RESPONSE: bool = (
        os.getenv("ALLOW_OTP_IN_RESPONSE", "false").lower() == "true"
    )

    # Audit trail
    MAX_ACTIVITY_ENTRIES: int = int(os.getenv("MAX_ACTIVITY_ENTRIES", "1000"))

    # "role_based" or "empty", see services/permissions.py
    PERMISSION_HEAL_POLICY: str = os.getenv(
        "PERMISSION_HEAL_POLICY", "role_based"
    )

    # Email
    RESEND_API_KEY: str = os.getenv("RESEND_API_KEY", "")
    SENDGRID_API_KEY: str = os.getenv("SENDGRID_API_KEY", "")
    EMAIL_FROM: str = os.getenv("EMAIL_FROM", "Admin Panel <onboarding@resend.dev>")
    EMAIL_TIMEOUT_SECONDS: float = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))
    LOGIN_URL: str = os.getenv("LOGIN_URL", "http://localhost:5173")

    @property
    def otp_in_response_enabled(self) -> bool:
        return self.ALLOW_OTP_IN_RESPONSE and self.ENVIRONMENT != "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Return cached settings instance.

    Using lru_cache means the Settings object is created once
    and reused for all subsequent calls. This avoids reading
    environment variables repeatedly.
    """
    return Settings()
