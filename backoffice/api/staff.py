"""
Staff management endpoints.
"""

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.orm import Session

from backoffice.api.deps import client_ip, get_gate, get_identity_provider
from backoffice.exceptions import BackOfficeError
from backoffice.models.base import get_db
from backoffice.models.enums import Action, Resource
from backoffice.schemas.base import SuccessResponse
from backoffice.schemas.staff import StaffListResponse, StaffResponse, StaffUpdate
from backoffice.services.authorization import AuthorizationGate
from backoffice.services.identity_provider import IdentityProvider
from backoffice.services.staff_service import StaffService

router = APIRouter(prefix="/staff", tags=["Staff"])


@router.get("", response_model=StaffListResponse)
def list_staff(
    authorization: str | None = Header(default=None),
    search: str = "",
    role: str = "",
    status: str = "",
    archived: str = "",
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=1000, ge=1),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    gate.authorize(
        authorization, Resource.STAFF_MANAGEMENT, Action.VIEW,
        "No permission to view staff",
    )
    staff, pagination = StaffService(db, identity_provider).list_staff(
        search=search.lower(), role=role, status=status, archived=archived,
        page=page, limit=limit,
    )
    return {"staff": staff, "pagination": pagination}


@router.put("/{staff_id}", response_model=StaffResponse)
def update_staff(
    staff_id: str,
    body: StaffUpdate,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    """
    Edit another account: name, email, role, status, archive flag
    or permissions. Nobody can edit their own record here, and
    only admins can change an email address.
    """
    caller = gate.authorize(
        authorization, Resource.STAFF_MANAGEMENT, Action.EDIT,
        "No permission to edit staff",
    )
    service = StaffService(db, identity_provider)
    try:
        staff = service.update_staff(
            gate, caller, staff_id, body, ip_address=client_ip(request)
        )
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    return {"success": True, "staff": staff}


@router.delete("/{staff_id}", response_model=SuccessResponse)
def delete_staff(
    staff_id: str,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
):
    caller = gate.authorize(
        authorization, Resource.STAFF_MANAGEMENT, Action.DELETE,
        "No permission to delete staff",
    )
    service = StaffService(db, identity_provider)
    try:
        service.delete_staff(gate, caller, staff_id, ip_address=client_ip(request))
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    return {"success": True}
