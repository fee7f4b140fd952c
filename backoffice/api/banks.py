"""
Bank endpoints. Anyone with the bank deposit grants can list and
add banks; editing and deleting is for admins.
"""

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from backoffice.api.deps import client_ip, get_gate
from backoffice.exceptions import BackOfficeError
from backoffice.models.base import get_db
from backoffice.models.enums import Action, Resource
from backoffice.schemas.base import SuccessResponse
from backoffice.schemas.role import BankCreate, BankListResponse, BankResponse, BankUpdate
from backoffice.services.authorization import AuthorizationGate
from backoffice.services.bank_service import BankService

router = APIRouter(prefix="/banks", tags=["Banks"])


@router.get("", response_model=BankListResponse)
def list_banks(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    gate.authorize(
        authorization, Resource.BANK_DEPOSITS, Action.VIEW,
        "No permission to view banks",
    )
    return {"success": True, "banks": BankService(db).list_banks()}


@router.post("", response_model=BankResponse)
def create_bank(
    body: BankCreate,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    caller = gate.authorize(
        authorization, Resource.BANK_DEPOSITS, Action.ADD,
        "No permission to add banks",
    )
    try:
        bank = BankService(db).create_bank(caller, body, ip_address=client_ip(request))
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    return {"success": True, "bank": bank}


@router.put("/{bank_id}", response_model=BankResponse)
def update_bank(
    bank_id: str,
    body: BankUpdate,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    caller = gate.authorize(
        authorization, Resource.BANK_DEPOSITS, Action.EDIT,
        "No permission to edit banks",
    )
    gate.require_admin(caller, "No permission to edit banks")
    try:
        bank = BankService(db).update_bank(
            caller, bank_id, body, ip_address=client_ip(request)
        )
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    return {"success": True, "bank": bank}


@router.delete("/{bank_id}", response_model=SuccessResponse)
def delete_bank(
    bank_id: str,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    """Refused while any bank deposit still references the bank."""
    caller = gate.authorize(
        authorization, Resource.BANK_DEPOSITS, Action.DELETE,
        "No permission to delete banks",
    )
    gate.require_admin(caller, "No permission to delete banks")
    try:
        BankService(db).delete_bank(caller, bank_id, ip_address=client_ip(request))
        db.commit()
    except BackOfficeError:
        db.rollback()
        raise
    return {"success": True}
