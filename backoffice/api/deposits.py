"""
Deposit and bank deposit endpoints.

Both collections expose the same four operations, so the routes
are built once per RecordKind.
"""

from fastapi import APIRouter, Depends, Header, Query, Request
from sqlalchemy.orm import Session

from backoffice.api.deps import client_ip, get_gate
from backoffice.exceptions import BackOfficeError
from backoffice.models.base import get_db
from backoffice.models.enums import Action
from backoffice.schemas.base import SuccessResponse
from backoffice.schemas.deposit import (
    BankDepositListResponse,
    BankDepositPayload,
    BankDepositResponse,
    DepositListResponse,
    DepositPayload,
    DepositResponse,
)
from backoffice.services.authorization import AuthorizationGate
from backoffice.services.deposit_service import (
    BANK_DEPOSITS,
    DEPOSITS,
    DepositService,
    RecordKind,
)


def build_router(
    kind: RecordKind,
    path: str,
    collection: str,
    item: str,
    payload_model,
    list_model,
    item_model,
) -> APIRouter:
    router = APIRouter(prefix=path, tags=[collection])

    @router.get("", response_model=list_model)
    def list_records(
        authorization: str | None = Header(default=None),
        search: str = "",
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=1000, ge=1),
        date_from: str = Query(default="", alias="dateFrom"),
        date_to: str = Query(default="", alias="dateTo"),
        submitted_by: str = Query(default="", alias="submittedBy"),
        account_type: str = Query(default="", alias="accountType"),
        db: Session = Depends(get_db),
        gate: AuthorizationGate = Depends(get_gate),
    ):
        """Admins see every record; everyone else only their own."""
        caller = gate.authorize(authorization)
        records, pagination = DepositService(db, kind).list_records(
            caller,
            search=search.lower(),
            date_from=date_from,
            date_to=date_to,
            submitted_by=submitted_by,
            account_type=account_type,
            page=page,
            limit=limit,
        )
        return {collection: records, "pagination": pagination}

    @router.post("", response_model=item_model)
    def create_record(
        body: payload_model,
        request: Request,
        authorization: str | None = Header(default=None),
        db: Session = Depends(get_db),
        gate: AuthorizationGate = Depends(get_gate),
    ):
        caller = gate.authorize(
            authorization, kind.resource, Action.ADD,
            f"No permission to add {kind.noun}s",
        )
        record = DepositService(db, kind).create(
            caller, body.to_record(), ip_address=client_ip(request)
        )
        db.commit()
        return {"success": True, item: record}

    @router.put("/{record_id}", response_model=item_model)
    def update_record(
        record_id: str,
        body: payload_model,
        request: Request,
        authorization: str | None = Header(default=None),
        db: Session = Depends(get_db),
        gate: AuthorizationGate = Depends(get_gate),
    ):
        """Owner or admin, and the edit grant either way."""
        caller = gate.authorize(authorization)
        try:
            record = DepositService(db, kind).update(
                gate, caller, record_id, body.to_record(), ip_address=client_ip(request)
            )
            db.commit()
        except BackOfficeError:
            db.rollback()
            raise
        return {"success": True, item: record}

    @router.delete("/{record_id}", response_model=SuccessResponse)
    def delete_record(
        record_id: str,
        request: Request,
        authorization: str | None = Header(default=None),
        db: Session = Depends(get_db),
        gate: AuthorizationGate = Depends(get_gate),
    ):
        caller = gate.authorize(authorization)
        try:
            DepositService(db, kind).delete(
                gate, caller, record_id, ip_address=client_ip(request)
            )
            db.commit()
        except BackOfficeError:
            db.rollback()
            raise
        return {"success": True}

    return router


deposits_router = build_router(
    DEPOSITS, "/deposits", "deposits", "deposit",
    DepositPayload, DepositListResponse, DepositResponse,
)
bank_deposits_router = build_router(
    BANK_DEPOSITS, "/bank-deposits", "bankDeposits", "bankDeposit",
    BankDepositPayload, BankDepositListResponse, BankDepositResponse,
)
