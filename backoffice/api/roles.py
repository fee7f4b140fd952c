"""
Role endpoints. Roles are managed under the staff management grants.
"""

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from backoffice.api.deps import client_ip, get_gate
from backoffice.exceptions import BackOfficeError
from backoffice.models.base import get_db
from backoffice.models.enums import Action, Resource
from backoffice.schemas.base import SuccessResponse
from backoffice.schemas.role import RoleCreate, RoleListResponse, RoleResponse, RoleUpdate
from backoffice.services.authorization import AuthorizationGate
from backoffice.services.kv_store import KeyValueStore
from backoffice.services.role_service import RoleService

router = APIRouter(prefix="/roles", tags=["Roles"])


@router.get("", response_model=RoleListResponse)
def list_roles(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    gate.authorize(
        authorization, Resource.STAFF_MANAGEMENT, Action.VIEW,
        "No permission to view roles",
    )
    return {"success": True, "roles": RoleService(KeyValueStore(db)).list_roles()}


@router.post("", response_model=RoleResponse)
def create_role(
    body: RoleCreate,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    caller = gate.authorize(
        authorization, Resource.STAFF_MANAGEMENT, Action.ADD,
        "No permission to add roles",
    )
    try:
        role = RoleService(KeyValueStore(db)).create_role(
            caller, body, ip_address=client_ip(request)
        )
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    return {"success": True, "role": role}


@router.put("/{role_id}", response_model=RoleResponse)
def update_role(
    role_id: str,
    body: RoleUpdate,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    """Rename a role; accounts holding the old name follow the rename."""
    caller = gate.authorize(
        authorization, Resource.STAFF_MANAGEMENT, Action.EDIT,
        "No permission to edit roles",
    )
    try:
        role = RoleService(KeyValueStore(db)).update_role(
            caller, role_id, body, ip_address=client_ip(request)
        )
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    return {"success": True, "role": role}


@router.delete("/{role_id}", response_model=SuccessResponse)
def delete_role(
    role_id: str,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    caller = gate.authorize(
        authorization, Resource.STAFF_MANAGEMENT, Action.DELETE,
        "No permission to delete roles",
    )
    try:
        RoleService(KeyValueStore(db)).delete_role(
            caller, role_id, ip_address=client_ip(request)
        )
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    return {"success": True}
