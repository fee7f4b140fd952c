"""
Password recovery with one-time passcodes.

One challenge per email address, stored at "otp:<email>":

    NoChallenge --request--> Issued --verify ok--> (deleted)
                               |---- expired ----> (deleted)
                               |---- 3rd miss ---> (deleted)
                               '---- miss -------> Issued (attempts + 1)

A new request overwrites any earlier challenge for the address,
so only the most recent code can ever verify.
"""

import hmac
import logging
import secrets
from datetime import timedelta
from typing import Callable

from sqlalchemy.orm import Session

from backoffice.config import Settings, get_settings
from backoffice.exceptions import (
    InvalidInputError,
    NotFoundError,
    OtpAttemptsExhaustedError,
    OtpExpiredError,
    OtpInvalidError,
    OtpNotFoundError,
    UpstreamError,
)
from backoffice.models.enums import ActivityAction
from backoffice.schemas.auth import MIN_PASSWORD_LENGTH
from backoffice.services.account_registry import AccountRegistry
from backoffice.services.activity_service import ActivityLog
from backoffice.services.email_service import EmailSender, otp_email_html
from backoffice.services.identity_provider import IdentityProvider
from backoffice.services.kv_store import KeyValueStore
from backoffice.time_utils import parse_iso, to_iso, utcnow

logger = logging.getLogger(__name__)

OTP_LENGTH = 6


def otp_key(email: str) -> str:
    return f"otp:{email}"


def generate_otp() -> str:
    """Uniformly random 6-digit code; leading zeros are kept."""
    return f"{secrets.randbelow(10 ** OTP_LENGTH):0{OTP_LENGTH}d}"


class OtpService:

    def __init__(
        self,
        db: Session,
        identity_provider: IdentityProvider,
        email_sender: EmailSender,
        settings: Settings | None = None,
        clock: Callable = utcnow,
    ):
        self.db = db
        self.store = KeyValueStore(db)
        self.accounts = AccountRegistry(self.store)
        self.activity_log = ActivityLog(self.store)
        self.identity_provider = identity_provider
        self.email_sender = email_sender
        self.settings = settings or get_settings()
        self.clock = clock

    def request(self, email: str) -> dict:
        """
        Issue a fresh challenge and email it.

        Returns {"sent": bool, "otp": str | None}. The code is only
        handed back when delivery failed and the non-production
        fallback is switched on.
        """
        account = self.accounts.find_by_email(email)
        if account is None:
            raise NotFoundError("No account found with this email address")

        code = generate_otp()
        issued_at = self.clock()
        # Stored timestamps keep milliseconds only
        issued_at = issued_at.replace(microsecond=issued_at.microsecond // 1000 * 1000)
        expires_at = issued_at + timedelta(minutes=self.settings.OTP_TTL_MINUTES)
        self.store.set(otp_key(email), {
            "otp": code,
            "email": email,
            "expiresAt": to_iso(expires_at),
            "attempts": 0,
            "createdAt": to_iso(issued_at),
        })
        logger.info("OTP issued for %s (expires at %s)", email, to_iso(expires_at))

        sent = self.email_sender.send(
            to=email,
            subject="Password Reset Code",
            body=otp_email_html(
                account.get("name", ""), code, self.settings.OTP_TTL_MINUTES
            ),
        )
        if sent:
            return {"sent": True, "otp": None}

        if self.settings.otp_in_response_enabled:
            logger.warning("Email service not configured - returning OTP in response")
            return {"sent": False, "otp": code}

        raise UpstreamError("Failed to send OTP email. Please try again later.")

    def verify(self, email: str, code: str, new_password: str, ip_address: str | None = None) -> dict:
        """Check the code and, on success, reset the password."""
        if len(new_password) < MIN_PASSWORD_LENGTH:
            raise InvalidInputError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        key = otp_key(email)
        challenge = self.store.get(key, for_update=True)
        if not challenge:
            raise OtpNotFoundError("OTP not found or expired. Please request a new OTP.")

        expires_at = parse_iso(challenge.get("expiresAt"))
        if expires_at is None or self.clock() > expires_at:
            self.store.delete(key)
            raise OtpExpiredError("OTP has expired. Please request a new OTP.")

        max_attempts = self.settings.OTP_MAX_ATTEMPTS
        attempts = int(challenge.get("attempts", 0))
        if attempts >= max_attempts:
            self.store.delete(key)
            raise OtpAttemptsExhaustedError(
                "Too many incorrect attempts. Please request a new OTP."
            )

        stored = str(challenge.get("otp", "")).encode()
        if not hmac.compare_digest(stored, code.strip().encode()):
            attempts += 1
            if attempts >= max_attempts:
                self.store.delete(key)
                raise OtpAttemptsExhaustedError(
                    "Too many incorrect attempts. Please request a new OTP."
                )
            challenge["attempts"] = attempts
            self.store.set(key, challenge)
            raise OtpInvalidError(
                "Invalid OTP. Please try again.",
                remaining_attempts=max_attempts - attempts,
            )

        account = self.accounts.find_by_email(email)
        if account is None:
            raise NotFoundError("User not found")

        self.identity_provider.update_password(account["id"], new_password)
        self.store.delete(key)

        self.activity_log.record(
            account["id"], account.get("name", ""), ActivityAction.PASSWORD_RESET,
            "Password reset via OTP", f"Email: {email}", ip_address,
        )
        return account
