"""
Tests for the forgot-password endpoints.
"""

import re

import pytest


def latest_code(outbox):
    return re.search(r">(\d{6})<", outbox.sent[-1]["body"]).group(1)


@pytest.fixture
def staff(make_staff):
    return make_staff("sam@test.com")


class TestSendOtp:

    def test_sends_email(self, client, staff, outbox):
        response = client.post("/forgot-password/send-otp", json={"email": "sam@test.com"})
        assert response.status_code == 200
        assert "debug_otp" not in response.json()
        assert outbox.sent[-1]["subject"] == "Password Reset Code"

    def test_unknown_email(self, client, admin_token):
        response = client.post("/forgot-password/send-otp", json={"email": "who@test.com"})
        assert response.status_code == 404

    def test_email_failure_is_502(self, client, staff, outbox):
        outbox.succeed = False
        response = client.post("/forgot-password/send-otp", json={"email": "sam@test.com"})
        assert response.status_code == 502


class TestVerifyOtp:

    def test_reset_password(self, client, staff, outbox):
        client.post("/forgot-password/send-otp", json={"email": "sam@test.com"})
        response = client.post("/forgot-password/verify-otp", json={
            "email": "sam@test.com", "otp": latest_code(outbox), "newPassword": "brand-new",
        })
        assert response.status_code == 200

        login = client.post("/login", json={"email": "sam@test.com", "password": "brand-new"})
        assert login.status_code == 200

    def test_wrong_code_reports_remaining_attempts(self, client, staff, outbox):
        client.post("/forgot-password/send-otp", json={"email": "sam@test.com"})
        wrong = "000000" if latest_code(outbox) != "000000" else "111111"

        response = client.post("/forgot-password/verify-otp", json={
            "email": "sam@test.com", "otp": wrong, "newPassword": "brand-new",
        })
        assert response.status_code == 400
        assert response.json()["remainingAttempts"] == 2

        response = client.post("/forgot-password/verify-otp", json={
            "email": "sam@test.com", "otp": wrong, "newPassword": "brand-new",
        })
        assert response.json()["remainingAttempts"] == 1

    def test_lockout_after_three_misses(self, client, staff, outbox):
        client.post("/forgot-password/send-otp", json={"email": "sam@test.com"})
        code = latest_code(outbox)
        wrong = "000000" if code != "000000" else "111111"

        for _ in range(3):
            client.post("/forgot-password/verify-otp", json={
                "email": "sam@test.com", "otp": wrong, "newPassword": "brand-new",
            })
        response = client.post("/forgot-password/verify-otp", json={
            "email": "sam@test.com", "otp": code, "newPassword": "brand-new",
        })
        assert response.status_code == 400
        assert response.json() == {"error": "OTP not found or expired. Please request a new OTP."}
