"""
Pydantic schemas for deposits and bank deposits.

Both are open records: the front end owns most of the fields,
so unknown fields are kept as-is. Server-owned fields (id,
submitter, timestamps) are dropped from input.
"""

from pydantic import ConfigDict

from backoffice.schemas.base import CamelModel, Pagination

SERVER_OWNED_FIELDS = {
    "id", "submittedBy", "submittedByName", "createdAt", "updatedAt",
}


class LineItem(CamelModel):
    model_config = ConfigDict(extra="allow")

    amount: float = 0


class DepositPayload(CamelModel):
    model_config = ConfigDict(extra="allow")

    date: str | None = None
    local_deposit: float | None = None
    usdt_deposit: float | None = None
    cash_deposit: float | None = None
    expenses: list[LineItem] | None = None
    client_incentives: list[LineItem] | None = None

    def to_record(self) -> dict:
        data = self.model_dump(by_alias=True, exclude_unset=True)
        return {k: v for k, v in data.items() if k not in SERVER_OWNED_FIELDS}


class BankDepositPayload(CamelModel):
    model_config = ConfigDict(extra="allow")

    date: str | None = None
    bank_id: str | None = None
    bank_name: str | None = None
    account_type: str | None = None
    amount: float | None = None
    deposit_amount: float | None = None
    withdrawal_amount: float | None = None

    def to_record(self) -> dict:
        data = self.model_dump(by_alias=True, exclude_unset=True)
        return {k: v for k, v in data.items() if k not in SERVER_OWNED_FIELDS}


# --- Responses ---

class DepositResponse(CamelModel):
    success: bool = True
    deposit: dict


class BankDepositResponse(CamelModel):
    success: bool = True
    bank_deposit: dict


class DepositListResponse(CamelModel):
    deposits: list[dict]
    pagination: Pagination


class BankDepositListResponse(CamelModel):
    bank_deposits: list[dict]
    pagination: Pagination
