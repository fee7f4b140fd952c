"""
Signup, login and own-account endpoints.
"""

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from backoffice.api.deps import client_ip, get_gate, get_identity_provider
from backoffice.exceptions import BackOfficeError
from backoffice.models.base import get_db
from backoffice.models.enums import Action, Resource
from backoffice.schemas.auth import (
    ChangePasswordRequest,
    CurrentUserResponse,
    FixPermissionsResponse,
    LoginRequest,
    LoginResponse,
    ProfileResponse,
    ProfileUpdate,
    SignupRequest,
    SignupResponse,
)
from backoffice.schemas.base import MessageResponse
from backoffice.services.authorization import AuthorizationGate
from backoffice.services.email_service import EmailSender, get_email_sender
from backoffice.services.identity_provider import IdentityProvider
from backoffice.services.staff_service import StaffService

router = APIRouter(tags=["Auth"])


@router.post("/signup", response_model=SignupResponse, response_model_exclude_unset=True)
def signup(
    body: SignupRequest,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    email_sender: EmailSender = Depends(get_email_sender),
):
    """
    Register an account.

    The first account ever needs no credentials and becomes the
    bootstrap administrator. Every later signup is a staff
    manager provisioning someone else.
    """
    service = StaffService(db, identity_provider, email_sender)
    try:
        creator = None
        if not service.is_first_signup():
            creator = gate.authorize(
                authorization, Resource.STAFF_MANAGEMENT, Action.ADD,
                "No permission to add staff members",
            )
        result = service.signup(body, creator=creator, ip_address=client_ip(request))
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise

    response = {"success": True, "user": result["user"]}
    if result["credentials"]:
        response["credentials"] = result["credentials"]
    return response


@router.post("/login", response_model=LoginResponse)
def login(
    body: LoginRequest,
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    """Exchange email and password for a bearer token."""
    token = identity_provider.sign_in(body.email, body.password)
    return {"success": True, "accessToken": token, "tokenType": "bearer"}


@router.get("/user", response_model=CurrentUserResponse)
def get_current_user(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    """The caller's own account, permissions included."""
    caller = gate.authorize(authorization)
    account = StaffService(db, identity_provider).touch_last_login(caller)
    db.commit()
    return {"user": account}


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    caller = gate.authorize(authorization)
    service = StaffService(db, identity_provider)
    try:
        service.change_password(caller, body, ip_address=client_ip(request))
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    return {"success": True, "message": "Password changed successfully"}


@router.put("/profile", response_model=ProfileResponse)
def update_profile(
    body: ProfileUpdate,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    """Update own name. Email and role are changed by a staff manager."""
    caller = gate.authorize(authorization)
    account = StaffService(db, identity_provider).update_profile(
        caller, body, ip_address=client_ip(request)
    )
    db.commit()
    return {"success": True, "user": account}


@router.post("/refresh-permissions", response_model=MessageResponse)
def refresh_permissions(
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    """Reset every account to its default permissions. Super Admin only."""
    caller = gate.authorize(authorization)
    gate.require_super_admin(caller, "Only Super Admin can refresh permissions")
    count = StaffService(db, identity_provider).refresh_permissions(
        caller, gate.heal_policy, ip_address=client_ip(request)
    )
    db.commit()
    return {"success": True, "message": f"Updated permissions for {count} users"}


@router.post("/fix-admin-permissions", response_model=FixPermissionsResponse)
def fix_admin_permissions(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    """Restore full permissions to the only account, if that is the caller."""
    caller = gate.authorize(authorization)
    account = StaffService(db, identity_provider).fix_first_account_permissions(caller)
    db.commit()
    return {
        "success": True,
        "message": "Permissions updated successfully",
        "user": account,
    }
