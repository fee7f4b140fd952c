"""
Forgot-password endpoints. These authenticate by email + code,
not by bearer token.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from backoffice.api.deps import client_ip, get_identity_provider
from backoffice.exceptions import BackOfficeError, OtpError
from backoffice.models.base import get_db
from backoffice.schemas.auth import SendOtpRequest, SendOtpResponse, VerifyOtpRequest
from backoffice.schemas.base import MessageResponse
from backoffice.services.email_service import EmailSender, get_email_sender
from backoffice.services.identity_provider import IdentityProvider
from backoffice.services.otp_service import OtpService

router = APIRouter(prefix="/forgot-password", tags=["Password recovery"])


@router.post("/send-otp", response_model=SendOtpResponse, response_model_exclude_unset=True)
def send_otp(
    body: SendOtpRequest,
    db: Session = Depends(get_db),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    email_sender: EmailSender = Depends(get_email_sender),
):
    """Issue a reset code. Requesting again replaces the previous code."""
    service = OtpService(db, identity_provider, email_sender)
    try:
        result = service.request(body.email)
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise

    if result["sent"]:
        return {
            "success": True,
            "message": "OTP sent to your email address. Please check your inbox.",
        }
    return {
        "success": True,
        "message": "OTP generated (email service not configured)",
        "debug_otp": result["otp"],
    }


@router.post("/verify-otp", response_model=MessageResponse)
def verify_otp(
    body: VerifyOtpRequest,
    request: Request,
    db: Session = Depends(get_db),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    email_sender: EmailSender = Depends(get_email_sender),
):
    """Check the code and set the new password."""
    service = OtpService(db, identity_provider, email_sender)
    try:
        service.verify(
            body.email, body.otp, body.new_password, ip_address=client_ip(request)
        )
        db.commit()
    except OtpError:
        # Attempt counts and deleted challenges must persist
        db.commit()
        raise
    except BackOfficeError:
        db.rollback()
        raise
    return {
        "success": True,
        "message": "Password reset successfully! Please login with your new password.",
    }
