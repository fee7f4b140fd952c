"""
Tests for OTP password recovery.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from backoffice.config import Settings
from backoffice.exceptions import (
    InvalidInputError,
    NotFoundError,
    OtpAttemptsExhaustedError,
    OtpExpiredError,
    OtpInvalidError,
    OtpNotFoundError,
    UpstreamError,
)
from backoffice.services.account_registry import AccountRegistry
from backoffice.services.activity_service import ActivityLog
from backoffice.services.kv_store import KeyValueStore
from backoffice.services.otp_service import OtpService, generate_otp, otp_key

EMAIL = "sam@test.com"


class FakeClock:

    def __init__(self):
        self.now = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def account(db_session, identity_provider):
    identity = identity_provider.create_user(EMAIL, "old-password", {})
    record = {"id": identity.id, "name": "Sam", "email": EMAIL, "role": "Staff"}
    AccountRegistry(KeyValueStore(db_session)).add(record)
    db_session.commit()
    return record


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(db_session, identity_provider, outbox, clock):
    return OtpService(db_session, identity_provider, outbox, clock=clock)


def issued_code(db_session, email=EMAIL):
    return KeyValueStore(db_session).get(otp_key(email))["otp"]


class TestGenerate:

    def test_six_digits(self):
        for _ in range(50):
            code = generate_otp()
            assert len(code) == 6
            assert code.isdigit()

    def test_leading_zeros_kept(self):
        with patch("backoffice.services.otp_service.secrets.randbelow", return_value=42):
            assert generate_otp() == "000042"


class TestRequest:

    def test_unknown_email(self, service):
        with pytest.raises(NotFoundError, match="No account found"):
            service.request("nobody@test.com")

    def test_stores_challenge_and_emails_it(self, db_session, service, outbox, account):
        result = service.request(EMAIL)
        assert result == {"sent": True, "otp": None}

        challenge = KeyValueStore(db_session).get(otp_key(EMAIL))
        assert challenge["attempts"] == 0
        assert challenge["expiresAt"] == "2025-03-01T12:05:00.000Z"
        assert outbox.sent[0]["to"] == EMAIL
        assert challenge["otp"] in outbox.sent[0]["body"]

    def test_delivery_failure_without_fallback(self, service, outbox, account):
        outbox.succeed = False
        with pytest.raises(UpstreamError):
            service.request(EMAIL)

    def test_delivery_failure_with_fallback(self, db_session, identity_provider, outbox, account):
        settings = Settings()
        settings.ALLOW_OTP_IN_RESPONSE = True
        settings.ENVIRONMENT = "development"
        outbox.succeed = False

        result = OtpService(db_session, identity_provider, outbox, settings=settings).request(EMAIL)
        assert result["sent"] is False
        assert result["otp"] == issued_code(db_session)

    def test_fallback_never_in_production(self, db_session, identity_provider, outbox, account):
        settings = Settings()
        settings.ALLOW_OTP_IN_RESPONSE = True
        settings.ENVIRONMENT = "production"
        outbox.succeed = False

        with pytest.raises(UpstreamError):
            OtpService(db_session, identity_provider, outbox, settings=settings).request(EMAIL)


class TestVerify:

    def test_success_resets_password_and_consumes_code(
        self, db_session, service, identity_provider, account,
    ):
        service.request(EMAIL)
        service.verify(EMAIL, issued_code(db_session), "new-password")
        db_session.commit()

        assert KeyValueStore(db_session).get(otp_key(EMAIL)) is None
        assert identity_provider.sign_in(EMAIL, "new-password")
        entries = ActivityLog(KeyValueStore(db_session)).entries()
        assert entries[0]["action"] == "password_reset"

    def test_code_is_single_use(self, db_session, service, account):
        service.request(EMAIL)
        code = issued_code(db_session)
        service.verify(EMAIL, code, "new-password")
        with pytest.raises(OtpNotFoundError):
            service.verify(EMAIL, code, "another-password")

    def test_short_password_rejected_first(self, db_session, service, account):
        service.request(EMAIL)
        with pytest.raises(InvalidInputError):
            service.verify(EMAIL, issued_code(db_session), "123")
        assert KeyValueStore(db_session).get(otp_key(EMAIL))["attempts"] == 0

    def test_no_challenge(self, service, account):
        with pytest.raises(OtpNotFoundError):
            service.verify(EMAIL, "123456", "new-password")

    def test_expired(self, db_session, service, clock, account):
        service.request(EMAIL)
        code = issued_code(db_session)
        clock.advance(minutes=5, seconds=1)

        with pytest.raises(OtpExpiredError):
            service.verify(EMAIL, code, "new-password")
        assert KeyValueStore(db_session).get(otp_key(EMAIL)) is None

    def test_valid_right_at_expiry(self, db_session, service, clock, account):
        service.request(EMAIL)
        clock.advance(minutes=5)
        service.verify(EMAIL, issued_code(db_session), "new-password")

    def test_valid_at_expiry_with_sub_millisecond_issue_time(self, db_session, service, clock, account):
        clock.now = clock.now.replace(microsecond=1900)
        service.request(EMAIL)
        challenge = KeyValueStore(db_session).get(otp_key(EMAIL))
        assert challenge["createdAt"] == "2025-03-01T12:00:00.001Z"
        assert challenge["expiresAt"] == "2025-03-01T12:05:00.001Z"
        clock.now = datetime(2025, 3, 1, 12, 5, 0, 1000, tzinfo=timezone.utc)
        service.verify(EMAIL, issued_code(db_session), "new-password")

    def test_wrong_code_counts_down(self, db_session, service, account):
        service.request(EMAIL)
        wrong = "000000" if issued_code(db_session) != "000000" else "111111"

        with pytest.raises(OtpInvalidError) as exc:
            service.verify(EMAIL, wrong, "new-password")
        assert exc.value.to_payload()["remainingAttempts"] == 2

        with pytest.raises(OtpInvalidError) as exc:
            service.verify(EMAIL, wrong, "new-password")
        assert exc.value.to_payload()["remainingAttempts"] == 1

    def test_third_miss_deletes_challenge(self, db_session, service, account):
        service.request(EMAIL)
        code = issued_code(db_session)
        wrong = "000000" if code != "000000" else "111111"

        for _ in range(2):
            with pytest.raises(OtpInvalidError):
                service.verify(EMAIL, wrong, "new-password")
        with pytest.raises(OtpAttemptsExhaustedError):
            service.verify(EMAIL, wrong, "new-password")

        # Even the right code is gone now
        with pytest.raises(OtpNotFoundError):
            service.verify(EMAIL, code, "new-password")

    def test_new_request_invalidates_old_code(self, db_session, service, account):
        codes = iter([111111, 222222])
        with patch(
            "backoffice.services.otp_service.secrets.randbelow",
            side_effect=lambda _: next(codes),
        ):
            service.request(EMAIL)
            service.request(EMAIL)

        with pytest.raises(OtpInvalidError):
            service.verify(EMAIL, "111111", "new-password")
        service.verify(EMAIL, "222222", "new-password")
